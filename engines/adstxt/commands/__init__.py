"""ARL ads.txt Engine - request commands."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from core.commands.base import Command
from core.identity.requirements import validate_identity
from engines.adstxt.models import Relationship

ADSTXT_PUBLISHER_REGISTER_REQUEST = "adstxt.publisher.register.request"
ADSTXT_PUBLISHER_DEREGISTER_REQUEST = "adstxt.publisher.deregister.request"
ADSTXT_SELLER_ADD_REQUEST = "adstxt.seller.add.request"
ADSTXT_SELLER_REMOVE_REQUEST = "adstxt.seller.remove.request"

ADMIN_COMMAND_TYPES = frozenset({
    ADSTXT_PUBLISHER_REGISTER_REQUEST,
    ADSTXT_PUBLISHER_DEREGISTER_REQUEST,
})

PUBLISHER_COMMAND_TYPES = frozenset({
    ADSTXT_SELLER_ADD_REQUEST,
    ADSTXT_SELLER_REMOVE_REQUEST,
})


def _require_str(value: Any, field_name: str) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string.")


def _cmd(command_type: str, payload: dict, *, registry_id, actor_id,
         issued_at, command_id=None, correlation_id=None) -> Command:
    return Command(
        command_id=command_id or uuid.uuid4(),
        command_type=command_type,
        registry_id=registry_id,
        actor_id=actor_id,
        payload=payload,
        issued_at=issued_at,
        correlation_id=correlation_id or uuid.uuid4(),
        source_engine="adstxt",
    )


@dataclass(frozen=True)
class RegisterPublisherRequest:
    """Administrator creates or overwrites a publisher record."""
    identity: str
    domain: str
    name: str

    def __post_init__(self):
        validate_identity(self.identity, "identity")
        _require_str(self.domain, "domain")
        _require_str(self.name, "name")

    def to_command(self, *, registry_id, actor_id, issued_at: datetime,
                   command_id=None, correlation_id=None) -> Command:
        return _cmd(
            ADSTXT_PUBLISHER_REGISTER_REQUEST,
            {"identity": self.identity, "domain": self.domain, "name": self.name},
            registry_id=registry_id,
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
        )


@dataclass(frozen=True)
class DeregisterPublisherRequest:
    """Administrator removes a publisher and its domain-index entry."""
    identity: str

    def __post_init__(self):
        validate_identity(self.identity, "identity")

    def to_command(self, *, registry_id, actor_id, issued_at: datetime,
                   command_id=None, correlation_id=None) -> Command:
        return _cmd(
            ADSTXT_PUBLISHER_DEREGISTER_REQUEST,
            {"identity": self.identity},
            registry_id=registry_id,
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
        )


@dataclass(frozen=True)
class AddSellerRequest:
    """
    Publisher (the caller) authorizes a seller.

    relationship accepts Relationship, its ordinal or its name.
    """
    seller_domain: str
    seller_id: str
    relationship: Any = Relationship.DIRECT
    tag_id: str = ""

    def __post_init__(self):
        _require_str(self.seller_domain, "seller_domain")
        _require_str(self.seller_id, "seller_id")
        _require_str(self.tag_id, "tag_id")
        object.__setattr__(self, "relationship", Relationship.parse(self.relationship))

    def to_command(self, *, registry_id, actor_id, issued_at: datetime,
                   command_id=None, correlation_id=None) -> Command:
        return _cmd(
            ADSTXT_SELLER_ADD_REQUEST,
            {
                "seller_domain": self.seller_domain,
                "seller_id": self.seller_id,
                "relationship": int(self.relationship),
                "tag_id": self.tag_id,
            },
            registry_id=registry_id,
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
        )


@dataclass(frozen=True)
class RemoveSellerRequest:
    """Publisher (the caller) withdraws a seller authorization."""
    seller_domain: str
    seller_id: str

    def __post_init__(self):
        _require_str(self.seller_domain, "seller_domain")
        _require_str(self.seller_id, "seller_id")

    def to_command(self, *, registry_id, actor_id, issued_at: datetime,
                   command_id=None, correlation_id=None) -> Command:
        return _cmd(
            ADSTXT_SELLER_REMOVE_REQUEST,
            {"seller_domain": self.seller_domain, "seller_id": self.seller_id},
            registry_id=registry_id,
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
        )
