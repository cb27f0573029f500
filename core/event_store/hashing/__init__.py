"""
ARL Event Store — Hash-Chain Engine Public API
================================================
"""

from core.event_store.hashing.errors import HashRejectionCode
from core.event_store.hashing.hasher import (
    GENESIS_HASH,
    canonical_serialize,
    compute_event_hash,
    digest,
)

__all__ = [
    "GENESIS_HASH",
    "canonical_serialize",
    "compute_event_hash",
    "digest",
    "HashRejectionCode",
]
