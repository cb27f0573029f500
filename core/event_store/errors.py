"""
ARL Event Store — Ledger Errors
=================================
Raised when the ledger cannot commit an entry or when a
committed chain fails verification.

A commit failure aborts the command that produced it: the
registry state is only advanced after a successful append.
"""

from typing import Optional


class LedgerError(Exception):
    """Base error for ledger operations (commit failure)."""
    pass


class LedgerChainBrokenError(LedgerError):
    """Committed chain does not verify — history was altered."""

    def __init__(self, sequence: int, code: str, message: Optional[str] = None):
        self.sequence = sequence
        self.code = code
        super().__init__(
            message or f"Ledger chain broken at sequence {sequence} ({code})."
        )
