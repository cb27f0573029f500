"""ARL hash-chained ledger tests."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from core.event_store.errors import LedgerChainBrokenError, LedgerError
from core.event_store.hashing import (
    GENESIS_HASH,
    HashRejectionCode,
    canonical_serialize,
    compute_event_hash,
    digest,
)
from core.event_store.ledger import EventLedger, replay

REGISTRY = uuid.uuid4()
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _ledger_with(n: int) -> EventLedger:
    ledger = EventLedger(clock=lambda: NOW)
    for i in range(n):
        ledger.append("adstxt.seller.added.v1", {"n": i}, REGISTRY)
    return ledger


class TestHashing:
    def test_canonical_serialize_is_key_order_independent(self):
        assert canonical_serialize({"b": 1, "a": 2}) == canonical_serialize({"a": 2, "b": 1})
        assert canonical_serialize({"a": 1}) == '{"a":1}'

    def test_compute_event_hash_is_deterministic(self):
        h1 = compute_event_hash({"x": 1}, GENESIS_HASH)
        h2 = compute_event_hash({"x": 1}, GENESIS_HASH)
        assert h1 == h2
        assert len(h1) == 64
        assert compute_event_hash({"x": 1}, h1) != h1

    def test_digest_keeps_field_boundaries(self):
        assert digest(["ab", "c"]) != digest(["a", "bc"])


class TestEventLedger:
    def test_append_links_entries(self):
        ledger = _ledger_with(3)
        entries = ledger.entries()

        assert [e.sequence for e in entries] == [0, 1, 2]
        assert entries[0].previous_event_hash == GENESIS_HASH
        assert entries[1].previous_event_hash == entries[0].event_hash
        assert entries[2].previous_event_hash == entries[1].event_hash
        assert ledger.head_hash == entries[2].event_hash
        assert entries[0].recorded_at == NOW
        assert len(ledger) == 3

    def test_empty_ledger(self):
        ledger = EventLedger()
        assert ledger.head_hash == GENESIS_HASH
        ledger.verify()

    def test_payload_is_sealed_copy(self):
        ledger = EventLedger()
        payload = {"name": "Example"}
        entry = ledger.append("adstxt.publisher.registered.v1", payload, REGISTRY)
        payload["name"] = "Changed"
        assert entry.payload["name"] == "Example"
        ledger.verify()

    def test_sealed_payload_is_read_only(self):
        ledger = EventLedger()
        entry = ledger.append(
            "adstxt.seller.added.v1",
            {"seller": {"domain": "ssp.com"}, "tags": ["a", "b"]},
            REGISTRY,
        )

        with pytest.raises(TypeError):
            entry.payload["seen"] = True
        with pytest.raises(TypeError):
            entry.payload["seller"]["domain"] = "evil.com"
        assert entry.payload["tags"] == ("a", "b")
        assert entry.event_hash == compute_event_hash(
            {"seller": {"domain": "ssp.com"}, "tags": ["a", "b"]}, GENESIS_HASH,
        )
        assert ledger.is_valid()

    def test_rejects_bad_input(self):
        ledger = EventLedger()
        with pytest.raises(LedgerError):
            ledger.append("", {}, REGISTRY)
        with pytest.raises(LedgerError):
            ledger.append("adstxt.seller.added.v1", ["x"], REGISTRY)

    def test_payload_tampering_detected(self):
        ledger = _ledger_with(3)
        ledger._entries[1] = replace(ledger._entries[1], payload={"n": 99})

        with pytest.raises(LedgerChainBrokenError) as exc_info:
            ledger.verify()
        assert exc_info.value.sequence == 1
        assert exc_info.value.code == HashRejectionCode.HASH_COMPUTATION_MISMATCH
        assert ledger.is_valid() is False

    def test_relinking_detected(self):
        ledger = _ledger_with(3)
        ledger._entries[2] = replace(ledger._entries[2], previous_event_hash=GENESIS_HASH)

        with pytest.raises(LedgerChainBrokenError) as exc_info:
            ledger.verify()
        assert exc_info.value.code == HashRejectionCode.HASH_CHAIN_BROKEN

    def test_removed_entry_detected(self):
        ledger = _ledger_with(3)
        del ledger._entries[1]

        with pytest.raises(LedgerChainBrokenError) as exc_info:
            ledger.verify()
        assert exc_info.value.code == HashRejectionCode.SEQUENCE_GAP


class TestReplay:
    def test_replay_in_sequence_order(self):
        ledger = _ledger_with(4)
        seen = []
        count = replay(ledger, lambda event_type, payload: seen.append(payload["n"]))
        assert count == 4
        assert seen == [0, 1, 2, 3]

    def test_replay_refuses_broken_chain(self):
        ledger = _ledger_with(2)
        ledger._entries[0] = replace(ledger._entries[0], payload={"n": 7})
        seen = []
        with pytest.raises(LedgerChainBrokenError):
            replay(ledger, lambda event_type, payload: seen.append(payload))
        assert seen == []
