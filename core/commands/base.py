"""
ARL Command Layer — Command Base Contract
============================================
Every mutation of the registry begins as a Command.

A Command is a frozen, auditable declaration of intent.
It carries the caller identity, the target registry and the
payload — nothing else.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- No ledger interaction
- No event emission
- command_type must end with '.request'
- command_type follows engine.domain.action.request format
- actor_id IS the caller identity (context passing, no ambient caller)

A Command is NOT an event. It is intent awaiting judgment.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from core.identity.requirements import NULL_IDENTITY


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical ARL Command — declaration of intent.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'adstxt.seller.add.request').
        registry_id:    Registry instance the command targets (UUID).
        actor_id:       Caller identity. Authorization is decided from it.
        payload:        Intent data (dict).
        issued_at:      When the command was issued.
        correlation_id: Groups related commands/events in a story.
        source_engine:  Engine that owns this command.

    Example:
        Command(
            command_id=uuid.uuid4(),
            command_type="adstxt.seller.add.request",
            registry_id=uuid.UUID("..."),
            actor_id="0xabc...",
            payload={"seller_domain": "ssp.com", "seller_id": "123"},
            issued_at=datetime.now(timezone.utc),
            correlation_id=uuid.uuid4(),
            source_engine="adstxt",
        )
    """

    command_id: uuid.UUID
    command_type: str
    registry_id: uuid.UUID
    actor_id: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        # ── command_id must be UUID ───────────────────────────
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        # ── command_type must end with .request ───────────────
        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'adstxt.seller.add.request')."
            )

        # ── command_type minimum 4 segments ───────────────────
        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        # ── source_engine must match first segment ────────────
        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        # ── registry_id must be UUID ──────────────────────────
        if not isinstance(self.registry_id, uuid.UUID):
            raise ValueError("registry_id must be UUID.")

        # ── actor_id must be a real caller ────────────────────
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if self.actor_id == NULL_IDENTITY:
            raise ValueError("actor_id must not be the null identity.")

        # ── payload must be dict ──────────────────────────────
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        # ── issued_at must be datetime ────────────────────────
        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")

        # ── correlation_id must be UUID ───────────────────────
        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be UUID.")


# ══════════════════════════════════════════════════════════════
# EVENT NAMING LAW (derivation helpers)
# ══════════════════════════════════════════════════════════════

def derive_source_engine(command_type: str) -> str:
    """
    Extract source engine from command type.

    adstxt.publisher.register.request → adstxt
    """
    return command_type.split(".")[0]
