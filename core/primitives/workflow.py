"""
Custody Ledger Workflow Primitive — Generic State Machine
============================================================
Deterministic, immutable state machine schemas.

Used by:
    Batches Engine   — batch lifecycle
                       (CREATED → IN_TRANSIT → DELIVERED → QUALITY_TESTED
                        → APPROVED → CONSUMED, REJECTED from any
                        pre-approval state)
    Transfers Engine — transfer request lifecycle
                       (ACTIVE → ACCEPTED | REJECTED | CANCELLED)

RULES:
- Transitions are deterministic (same input → same output)
- Invalid transitions are rejected, including re-stating the current state
- Terminal states have no outgoing transitions
- Definitions are immutable (frozen)

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet


# ══════════════════════════════════════════════════════════════
# WORKFLOW DEFINITION (state machine schema)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Defines the valid states and transitions for a workflow type.

    Fields:
        name:            Identifier for this workflow type (e.g. "Batch")
        initial_state:   Starting state for all new instances
        terminal_states: States from which no further transitions are allowed
        transitions:     Dict of {from_state → frozenset(allowed_to_states)}
    """
    name: str
    initial_state: str
    terminal_states: FrozenSet[str]
    transitions: Dict[str, FrozenSet[str]]

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if not self.initial_state:
            raise ValueError("initial_state must be non-empty.")
        if self.initial_state not in self.transitions:
            raise ValueError(
                f"initial_state '{self.initial_state}' not in transitions."
            )
        for state in self.terminal_states:
            if self.transitions.get(state):
                raise ValueError(
                    f"Terminal state '{state}' must not have outgoing transitions."
                )

    @property
    def states(self) -> FrozenSet[str]:
        return frozenset(self.transitions)

    def is_valid_transition(self, from_state: str, to_state: str) -> bool:
        """Check if a transition is allowed by this definition."""
        allowed = self.transitions.get(from_state, frozenset())
        return to_state in allowed

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def allowed_next_states(self, from_state: str) -> FrozenSet[str]:
        return self.transitions.get(from_state, frozenset())


# ══════════════════════════════════════════════════════════════
# CANONICAL WORKFLOW DEFINITIONS
# ══════════════════════════════════════════════════════════════

BATCH_LIFECYCLE_WORKFLOW = WorkflowDefinition(
    name="Batch",
    initial_state="CREATED",
    terminal_states=frozenset({"REJECTED", "CONSUMED"}),
    transitions={
        "CREATED": frozenset({"IN_TRANSIT", "REJECTED"}),
        "IN_TRANSIT": frozenset({"DELIVERED", "REJECTED"}),
        "DELIVERED": frozenset({"QUALITY_TESTED", "REJECTED"}),
        "QUALITY_TESTED": frozenset({"APPROVED", "REJECTED"}),
        "APPROVED": frozenset({"CONSUMED"}),
        "REJECTED": frozenset(),
        "CONSUMED": frozenset(),
    },
)

TRANSFER_REQUEST_WORKFLOW = WorkflowDefinition(
    name="TransferRequest",
    initial_state="ACTIVE",
    terminal_states=frozenset({"ACCEPTED", "REJECTED", "CANCELLED"}),
    transitions={
        "ACTIVE": frozenset({"ACCEPTED", "REJECTED", "CANCELLED"}),
        "ACCEPTED": frozenset(),
        "REJECTED": frozenset(),
        "CANCELLED": frozenset(),
    },
)
