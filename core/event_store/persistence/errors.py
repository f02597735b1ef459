"""
Custody Ledger Event Store — Journal Errors
==============================================
Infrastructure failures while appending to or reading the feed journal.
These are NOT domain rejections; the ledger state is left untouched.
"""


class JournalError(Exception):
    """Base error for feed journal operations."""
    pass


class JournalConflictError(JournalError):
    """Appended events do not continue the stored chain head."""

    def __init__(self, expected_sequence: int, provided_sequence: int):
        self.expected_sequence = expected_sequence
        self.provided_sequence = provided_sequence
        super().__init__(
            f"Journal head moved: expected next sequence "
            f"{expected_sequence}, got {provided_sequence}."
        )
