"""
ARL Identity - Public API
=========================
Identity type, sentinel and validation guard.
"""

from core.identity.requirements import (
    NULL_IDENTITY,
    Identity,
    is_null_identity,
    validate_identity,
)

__all__ = [
    "Identity",
    "NULL_IDENTITY",
    "is_null_identity",
    "validate_identity",
]
