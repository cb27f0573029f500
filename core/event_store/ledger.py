"""
ARL Event Store — Hash-Chained Ledger
=======================================
In-memory, append-only, tamper-evident record of committed events.

This stands in for the host ledger that totally orders and durably
commits registry transitions. It guarantees:
- Entries are appended in the exact order they are accepted
- Each entry links to its predecessor via previous_event_hash
- event_hash = SHA256(canonical_json(payload) + previous_event_hash)
- No deletes, no overwrites, no updates after append
- verify() recomputes the whole chain; any edit is detected

Replay doctrine (for rebuilding projections):
- READ entries only — never rewrite history
- Deterministic order: sequence ASC
- Verify hash-chain before replay
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from types import MappingProxyType
from typing import Any, Callable, Optional, Tuple

from core.event_store.errors import LedgerChainBrokenError, LedgerError
from core.event_store.hashing import (
    GENESIS_HASH,
    HashRejectionCode,
    compute_event_hash,
)

logger = logging.getLogger("arl.ledger")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _seal(value: Any) -> Any:
    """Deep read-only copy: mappings become MappingProxyType, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _seal(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_seal(item) for item in value)
    return value


# ══════════════════════════════════════════════════════════════
# LEDGER ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerEntry:
    """
    One committed event.

    payload is a sealed, read-only mapping. Listeners and callers
    share it; writing to it raises TypeError.
    """

    sequence: int
    event_id: uuid.UUID
    event_type: str
    registry_id: uuid.UUID
    payload: Mapping[str, Any]
    previous_event_hash: str
    event_hash: str
    recorded_at: datetime


# ══════════════════════════════════════════════════════════════
# LEDGER
# ══════════════════════════════════════════════════════════════

class EventLedger:
    """Append-only hash-chained event ledger."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._entries: list[LedgerEntry] = []
        self._clock = clock or _utc_now
        self._lock = Lock()

    def append(
        self,
        event_type: str,
        payload: dict,
        registry_id: uuid.UUID,
        event_id: Optional[uuid.UUID] = None,
    ) -> LedgerEntry:
        """
        Commit one event at the head of the chain.

        Raises:
            LedgerError: payload is not a dict or event_type is empty.
        """
        if not event_type or not isinstance(event_type, str):
            raise LedgerError("event_type must be a non-empty string.")
        if not isinstance(payload, dict):
            raise LedgerError("payload must be a dict.")

        sealed = _seal(payload)

        with self._lock:
            previous_hash = (
                self._entries[-1].event_hash if self._entries else GENESIS_HASH
            )
            entry = LedgerEntry(
                sequence=len(self._entries),
                event_id=event_id or uuid.uuid4(),
                event_type=event_type,
                registry_id=registry_id,
                payload=sealed,
                previous_event_hash=previous_hash,
                event_hash=compute_event_hash(sealed, previous_hash),
                recorded_at=self._clock(),
            )
            self._entries.append(entry)

        logger.debug(
            f"Ledger append: {event_type} seq={entry.sequence} "
            f"hash={entry.event_hash[:12]}"
        )
        return entry

    def entries(self) -> Tuple[LedgerEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    @property
    def head_hash(self) -> str:
        with self._lock:
            return self._entries[-1].event_hash if self._entries else GENESIS_HASH

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def verify(self) -> None:
        """
        Recompute every hash from GENESIS.

        Raises:
            LedgerChainBrokenError: first entry that fails a check.
        """
        expected_previous = GENESIS_HASH
        for position, entry in enumerate(self.entries()):
            if entry.sequence != position:
                raise LedgerChainBrokenError(
                    position,
                    HashRejectionCode.SEQUENCE_GAP,
                    f"Expected sequence {position}, found {entry.sequence}.",
                )

            if entry.previous_event_hash != expected_previous:
                raise LedgerChainBrokenError(
                    entry.sequence,
                    HashRejectionCode.HASH_CHAIN_BROKEN,
                    f"Entry {entry.sequence} links to "
                    f"'{entry.previous_event_hash}', expected "
                    f"'{expected_previous}'.",
                )

            recomputed = compute_event_hash(entry.payload, entry.previous_event_hash)
            if recomputed != entry.event_hash:
                raise LedgerChainBrokenError(
                    entry.sequence,
                    HashRejectionCode.HASH_COMPUTATION_MISMATCH,
                    f"Entry {entry.sequence} hash mismatch: stored "
                    f"'{entry.event_hash}', computed '{recomputed}'.",
                )

            expected_previous = entry.event_hash

        logger.info("Ledger hash-chain verification passed.")

    def is_valid(self) -> bool:
        try:
            self.verify()
        except LedgerChainBrokenError as exc:
            logger.warning(f"Ledger verification failed: {exc}")
            return False
        return True


def replay(ledger: EventLedger, apply: Callable[[str, Mapping], Any]) -> int:
    """
    Verify the chain, then feed every entry to apply(event_type, payload).

    Returns the number of entries replayed.
    """
    ledger.verify()
    count = 0
    for entry in ledger.entries():
        apply(entry.event_type, entry.payload)
        count += 1
    logger.info(f"Replay complete: {count} entries applied.")
    return count
