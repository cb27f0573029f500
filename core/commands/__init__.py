"""
ARL Command Layer — Public API
================================
Every mutation begins as a Command.
A judged Command produces exactly one Outcome.
"""

from core.commands.base import (
    Command,
    derive_source_engine,
)
from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    "derive_source_engine",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
]
