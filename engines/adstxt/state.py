"""
ARL ads.txt Engine — Registry State
====================================
The three stores and the administrator, as one immutable value.

RULES:
- apply_event() is pure: it returns a NEW RegistryState and never
  mutates the one it was given (copy-on-write per touched store)
- Readers holding an old state keep a consistent snapshot forever
- Unknown event types are rejected, never skipped silently
- Seller entries are never removed implicitly by deregistration

Stores:
    publishers:   identity → Publisher
    domain_index: domain_key(domain) → identity
    sellers:      identity → (seller_key(domain, id) → SellerRecord)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from core.identity.requirements import Identity
from engines.adstxt.events import (
    PUBLISHER_DEREGISTERED_V1,
    PUBLISHER_REGISTERED_V1,
    SELLER_ADDED_V1,
    SELLER_REMOVED_V1,
)
from engines.adstxt.keys import domain_key, seller_key
from engines.adstxt.models import Publisher, Relationship, SellerRecord


def _frozen(mapping: Dict) -> Mapping:
    return MappingProxyType(mapping)


_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class RegistryState:
    administrator: Identity
    publishers: Mapping[Identity, Publisher] = field(default_factory=lambda: _EMPTY)
    domain_index: Mapping[str, Identity] = field(default_factory=lambda: _EMPTY)
    sellers: Mapping[Identity, Mapping[str, SellerRecord]] = field(default_factory=lambda: _EMPTY)

    def snapshot(self) -> dict:
        """Plain nested dicts, suitable for equality checks and JSON."""
        return {
            "administrator": self.administrator,
            "publishers": {
                identity: publisher.to_dict()
                for identity, publisher in sorted(self.publishers.items())
            },
            "domain_index": dict(sorted(self.domain_index.items())),
            "sellers": {
                identity: {
                    key: record.to_dict()
                    for key, record in sorted(records.items())
                }
                for identity, records in sorted(self.sellers.items())
            },
        }


# ══════════════════════════════════════════════════════════════
# TRANSITIONS
# ══════════════════════════════════════════════════════════════

def _apply_publisher_registered(state: RegistryState, payload: Dict[str, Any]) -> RegistryState:
    identity = payload["identity"]
    publishers = dict(state.publishers)
    publishers[identity] = Publisher(
        identity=identity,
        domain=payload["domain"],
        name=payload["name"],
    )

    index = dict(state.domain_index)
    retracted = payload.get("retracted_domain_key")
    if retracted is not None:
        index.pop(retracted, None)
    index[payload["domain_key"]] = identity

    return replace(state, publishers=_frozen(publishers), domain_index=_frozen(index))


def _apply_publisher_deregistered(state: RegistryState, payload: Dict[str, Any]) -> RegistryState:
    publishers = dict(state.publishers)
    publishers.pop(payload["identity"], None)

    index = dict(state.domain_index)
    retracted = payload.get("retracted_domain_key")
    if retracted is not None:
        index.pop(retracted, None)

    return replace(state, publishers=_frozen(publishers), domain_index=_frozen(index))


def _apply_seller_added(state: RegistryState, payload: Dict[str, Any]) -> RegistryState:
    publisher = payload["publisher"]
    records = dict(state.sellers.get(publisher, _EMPTY))
    records[payload["seller_key"]] = SellerRecord(
        domain=payload["seller_domain"],
        seller_id=payload["seller_id"],
        relationship=Relationship(payload["relationship"]),
        tag_id=payload["tag_id"],
    )
    sellers = dict(state.sellers)
    sellers[publisher] = _frozen(records)
    return replace(state, sellers=_frozen(sellers))


def _apply_seller_removed(state: RegistryState, payload: Dict[str, Any]) -> RegistryState:
    publisher = payload["publisher"]
    current = state.sellers.get(publisher)
    if current is None or payload["seller_key"] not in current:
        return state
    records = dict(current)
    del records[payload["seller_key"]]
    sellers = dict(state.sellers)
    sellers[publisher] = _frozen(records)
    return replace(state, sellers=_frozen(sellers))


_TRANSITIONS = {
    PUBLISHER_REGISTERED_V1: _apply_publisher_registered,
    PUBLISHER_DEREGISTERED_V1: _apply_publisher_deregistered,
    SELLER_ADDED_V1: _apply_seller_added,
    SELLER_REMOVED_V1: _apply_seller_removed,
}


def apply_event(state: RegistryState, event_type: str, payload: Dict[str, Any]) -> RegistryState:
    transition = _TRANSITIONS.get(event_type)
    if transition is None:
        raise ValueError(f"Unsupported registry event type: {event_type}")
    return transition(state, payload)


# ══════════════════════════════════════════════════════════════
# INVARIANTS
# ══════════════════════════════════════════════════════════════

def check_invariants(state: RegistryState) -> List[str]:
    """
    Return a description of every violated invariant.

    Empty list means the publisher table, domain index and seller
    table are mutually consistent.
    """
    violations: List[str] = []

    for identity, publisher in state.publishers.items():
        if publisher.identity != identity:
            violations.append(
                f"publisher stored under '{identity}' carries identity "
                f"'{publisher.identity}'"
            )
        key = domain_key(publisher.domain)
        owner = state.domain_index.get(key)
        if owner != identity:
            violations.append(
                f"domain '{publisher.domain}' of '{identity}' is indexed to {owner!r}"
            )

    for key, owner in state.domain_index.items():
        publisher = state.publishers.get(owner)
        if publisher is None:
            violations.append(f"domain key {key[:12]} points at unregistered '{owner}'")
        elif domain_key(publisher.domain) != key:
            violations.append(
                f"domain key {key[:12]} is stale for '{owner}' "
                f"(now '{publisher.domain}')"
            )

    for identity, records in state.sellers.items():
        for key, record in records.items():
            if seller_key(record.domain, record.seller_id) != key:
                violations.append(
                    f"seller ({record.domain}, {record.seller_id}) of '{identity}' "
                    f"stored under foreign key {key[:12]}"
                )

    return violations
