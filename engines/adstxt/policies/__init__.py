"""
ARL ads.txt Engine — Policies
==============================
Authorization guards for registry commands.

Each policy returns None when the command may proceed, or a
RejectionReason explaining why it may not. Policies never raise
and never touch state; lookups are injected.
"""

from __future__ import annotations

from typing import Callable, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from engines.adstxt.models import Relationship


def caller_must_be_administrator_policy(
    caller: str,
    administrator: str,
) -> Optional[RejectionReason]:
    """
    Only the administrator manages the publisher table.

    Takes the bare caller: it runs before the request is validated.
    """
    if caller != administrator:
        return RejectionReason(
            code=ReasonCode.PERMISSION_DENIED,
            message=f"Caller '{caller}' is not the registry administrator.",
            policy_name="caller_must_be_administrator_policy",
        )
    return None


def caller_must_be_registered_publisher_policy(
    command: Command,
    is_registered_publisher: Callable[[str], bool],
) -> Optional[RejectionReason]:
    """Sellers are managed by a registered publisher on its own behalf."""
    if not is_registered_publisher(command.actor_id):
        return RejectionReason(
            code=ReasonCode.PUBLISHER_NOT_REGISTERED,
            message=f"Caller '{command.actor_id}' is not a registered publisher.",
            policy_name="caller_must_be_registered_publisher_policy",
        )
    return None


def relationship_must_be_valid_policy(command: Command) -> Optional[RejectionReason]:
    relationship = command.payload.get("relationship")
    if relationship is None:
        return None
    try:
        Relationship.parse(relationship)
    except ValueError:
        return RejectionReason(
            code=ReasonCode.INVALID_RELATIONSHIP,
            message=f"relationship {relationship!r} is not valid.",
            policy_name="relationship_must_be_valid_policy",
        )
    return None
