"""
ARL Command Layer — Command Outcome Contract
===============================================
A judged command produces exactly one Outcome.

ACCEPTED → command authorized and committed.
REJECTED → command denied, reason is mandatory and auditable.

Rules:
- Outcome is immutable (frozen dataclass)
- REJECTED must contain reason (RejectionReason)
- ACCEPTED must NOT contain reason
- occurred_at is mandatory
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from core.commands.rejection import RejectionReason


class CommandStatus(Enum):
    """Binary command decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommandOutcome:
    """
    Deterministic result of command evaluation.

    Invariants:
        - REJECTED + reason is None → ValueError
        - ACCEPTED + reason is not None → ValueError
    """

    command_id: uuid.UUID
    status: CommandStatus
    reason: Optional[RejectionReason]
    occurred_at: datetime

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")

        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )

        if self.status == CommandStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason."
            )

        if self.status == CommandStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

    @classmethod
    def accepted(cls, command_id: uuid.UUID, occurred_at: datetime) -> "CommandOutcome":
        return cls(command_id, CommandStatus.ACCEPTED, None, occurred_at)

    @classmethod
    def rejected(
        cls,
        command_id: uuid.UUID,
        reason: RejectionReason,
        occurred_at: datetime,
    ) -> "CommandOutcome":
        return cls(command_id, CommandStatus.REJECTED, reason, occurred_at)

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED
