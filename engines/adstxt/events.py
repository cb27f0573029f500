"""
ARL ads.txt Engine — Event Types
=================================
Committed registry transitions. Each event carries enough data to
replay the transition mechanically; the public notification is a
projection of it (see notification_for()).

| Event                            | Notification                       |
|----------------------------------|------------------------------------|
| adstxt.publisher.registered.v1   | PublisherRegistered(identity)      |
| adstxt.publisher.deregistered.v1 | PublisherDeregistered(identity)    |
| adstxt.seller.added.v1           | SellerAdded(publisher, seller_key) |
| adstxt.seller.removed.v1         | SellerRemoved(publisher, seller_key) |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from core.commands.base import Command
from engines.adstxt.keys import domain_key, seller_key
from engines.adstxt.models import Relationship

# ── Event Types ───────────────────────────────────────────────

PUBLISHER_REGISTERED_V1 = "adstxt.publisher.registered.v1"
PUBLISHER_DEREGISTERED_V1 = "adstxt.publisher.deregistered.v1"
SELLER_ADDED_V1 = "adstxt.seller.added.v1"
SELLER_REMOVED_V1 = "adstxt.seller.removed.v1"

ALL_EVENT_TYPES = (
    PUBLISHER_REGISTERED_V1,
    PUBLISHER_DEREGISTERED_V1,
    SELLER_ADDED_V1,
    SELLER_REMOVED_V1,
)

# publisher table changes; only the administrator commits these
ADMINISTRATOR_EVENT_TYPES = frozenset({
    PUBLISHER_REGISTERED_V1,
    PUBLISHER_DEREGISTERED_V1,
})

COMMAND_TO_EVENT_TYPE = {
    "adstxt.publisher.register.request": PUBLISHER_REGISTERED_V1,
    "adstxt.publisher.deregister.request": PUBLISHER_DEREGISTERED_V1,
    "adstxt.seller.add.request": SELLER_ADDED_V1,
    "adstxt.seller.remove.request": SELLER_REMOVED_V1,
}

NOTIFICATION_NAMES = {
    PUBLISHER_REGISTERED_V1: "PublisherRegistered",
    PUBLISHER_DEREGISTERED_V1: "PublisherDeregistered",
    SELLER_ADDED_V1: "SellerAdded",
    SELLER_REMOVED_V1: "SellerRemoved",
}


def resolve_adstxt_event_type(command_type: str) -> Optional[str]:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


# ── Payload Builders ──────────────────────────────────────────
# retracted_domain_key is decided by the service from current state
# and settings; builders only record it.

def _base_fields(command: Command) -> dict:
    return {
        "registry_id": str(command.registry_id),
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "correlation_id": str(command.correlation_id),
        "issued_at": command.issued_at.isoformat(),
    }


def build_publisher_registered_payload(
    command: Command,
    retracted_domain_key: Optional[str] = None,
) -> dict:
    p = command.payload
    base = _base_fields(command)
    base.update({
        "identity": p["identity"],
        "domain": p["domain"],
        "name": p["name"],
        "domain_key": domain_key(p["domain"]),
        "retracted_domain_key": retracted_domain_key,
    })
    return base


def build_publisher_deregistered_payload(
    command: Command,
    domain: str = "",
    retracted_domain_key: Optional[str] = None,
) -> dict:
    base = _base_fields(command)
    base.update({
        "identity": command.payload["identity"],
        "domain": domain,
        "retracted_domain_key": retracted_domain_key,
    })
    return base


def build_seller_added_payload(command: Command) -> dict:
    p = command.payload
    base = _base_fields(command)
    base.update({
        "publisher": command.actor_id,
        "seller_key": seller_key(p["seller_domain"], p["seller_id"]),
        "seller_domain": p["seller_domain"],
        "seller_id": p["seller_id"],
        "relationship": int(Relationship.parse(p.get("relationship", Relationship.DIRECT))),
        "tag_id": p.get("tag_id", ""),
    })
    return base


def build_seller_removed_payload(command: Command) -> dict:
    p = command.payload
    base = _base_fields(command)
    base.update({
        "publisher": command.actor_id,
        "seller_key": seller_key(p["seller_domain"], p["seller_id"]),
        "seller_domain": p["seller_domain"],
        "seller_id": p["seller_id"],
    })
    return base


# ── Notifications ─────────────────────────────────────────────

@dataclass(frozen=True)
class Notification:
    name: str
    args: Tuple[str, ...]


def notification_for(event_type: str, payload: dict) -> Notification:
    name = NOTIFICATION_NAMES.get(event_type)
    if name is None:
        raise ValueError(f"Not a registry event type: {event_type}")
    if event_type in (PUBLISHER_REGISTERED_V1, PUBLISHER_DEREGISTERED_V1):
        return Notification(name, (payload["identity"],))
    return Notification(name, (payload["publisher"], payload["seller_key"]))
