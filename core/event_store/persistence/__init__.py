"""
Custody Ledger Event Store — Journal Public API
==================================================
The Django-backed journal lives in
core.event_store.persistence.repository and is imported explicitly,
so the in-memory path never requires configured Django settings.
"""

from core.event_store.persistence.errors import (
    JournalConflictError,
    JournalError,
)
from core.event_store.persistence.memory import InMemoryFeedJournal

__all__ = [
    "InMemoryFeedJournal",
    "JournalError",
    "JournalConflictError",
]
