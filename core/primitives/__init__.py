"""
Custody Ledger Core Primitives — Reusable Building Blocks
============================================================
Pure Python (no Django dependency), immutable, deterministic.

Primitives:
    workflow — state machine schemas for batch and transfer lifecycles
"""

from core.primitives.workflow import (
    BATCH_LIFECYCLE_WORKFLOW,
    TRANSFER_REQUEST_WORKFLOW,
    WorkflowDefinition,
)

__all__ = [
    "WorkflowDefinition",
    "BATCH_LIFECYCLE_WORKFLOW",
    "TRANSFER_REQUEST_WORKFLOW",
]
