"""
ARL Identity - Identity Constants
=================================
Identities are opaque caller references supplied by the host ledger.

The engine never parses an identity. It only requires a non-empty
string and reserves one sentinel value meaning "absent / unregistered".
"""

from __future__ import annotations

from typing import Any

Identity = str

NULL_IDENTITY: Identity = "0x0000000000000000000000000000000000000000"


def is_null_identity(identity: Any) -> bool:
    """True for the sentinel, None and the empty string."""
    return not identity or identity == NULL_IDENTITY


def validate_identity(identity: Any, field_name: str = "identity") -> Identity:
    """Return identity unchanged or raise ValueError."""
    if not isinstance(identity, str) or not identity.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    if identity == NULL_IDENTITY:
        raise ValueError(f"{field_name} must not be the null identity.")
    return identity
