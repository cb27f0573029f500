"""
ARL ads.txt Engine — Records
=============================
Publisher and seller records held by the registry.

Absence is never an error: lookups return the zero-valued record,
and callers treat a zero-valued record as "not present".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from core.identity.requirements import NULL_IDENTITY, Identity


# ══════════════════════════════════════════════════════════════
# RELATIONSHIP
# ══════════════════════════════════════════════════════════════

class Relationship(IntEnum):
    """
    Seller relationship tag. Ordinals are the interchange format.

    New members are appended; existing ordinals never change.
    """
    DIRECT = 0
    RESELLER = 1

    @classmethod
    def parse(cls, value: Any) -> "Relationship":
        """Accept a Relationship, its ordinal, or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid relationship: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid relationship: {value!r}") from None
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls.parse(int(name))
        raise ValueError(f"Invalid relationship: {value!r}")


# ══════════════════════════════════════════════════════════════
# PUBLISHER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Publisher:
    identity: Identity
    domain: str
    name: str

    @classmethod
    def default(cls) -> "Publisher":
        return cls(identity=NULL_IDENTITY, domain="", name="")

    def to_dict(self) -> dict:
        return {
            "identity": self.identity,
            "domain": self.domain,
            "name": self.name,
        }


# ══════════════════════════════════════════════════════════════
# SELLER RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SellerRecord:
    """One authorized seller line of a publisher."""

    domain: str
    seller_id: str
    relationship: Relationship
    tag_id: str

    @classmethod
    def default(cls) -> "SellerRecord":
        return cls(domain="", seller_id="", relationship=Relationship.DIRECT, tag_id="")

    @property
    def is_default(self) -> bool:
        return self == SellerRecord.default()

    def to_dict(self) -> dict:
        """Interchange form: relationship projected to its ordinal."""
        return {
            "domain": self.domain,
            "seller_id": self.seller_id,
            "relationship": int(self.relationship),
            "tag_id": self.tag_id,
        }
