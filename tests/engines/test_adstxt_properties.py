"""
Property-Based Registry Tests - invariants across random command streams.

Uses Hypothesis to drive the registry with random sequences of
administrator and publisher calls, and checks after every step.

Invariants tested:
    1. Publisher table, domain index and seller table stay consistent
    2. Non-administrator register/deregister never changes state
    3. Seller calls from unregistered identities never change state
    4. Replaying the ledger rebuilds the exact live state
    5. Domain lookup and identity lookup agree for registered publishers
    6. Old state values are never mutated by later commands
"""

import pytest
from hypothesis import given, settings, strategies as st

from engines.adstxt.errors import RegistryPermissionError
from engines.adstxt.models import Relationship
from engines.adstxt.services import RegistryService
from engines.adstxt.settings import RegistrySettings
from engines.adstxt.state import check_invariants

ADMIN = "0x00000000000000000000000000000000000000ad"
IDENTITIES = [
    "0x000000000000000000000000000000000000000a",
    "0x000000000000000000000000000000000000000b",
    "0x000000000000000000000000000000000000000c",
]
OUTSIDER = "0x00000000000000000000000000000000000000ff"

SELLER_DOMAINS = ["ssp.com", "exchange.io", "ab", "a"]
SELLER_IDS = ["123", "pub-9", "c", "bc"]


# =============================================================================
# Hypothesis Strategies
# =============================================================================

identity_strategy = st.sampled_from(IDENTITIES)
caller_strategy = st.sampled_from(IDENTITIES + [OUTSIDER])

# Each identity only ever claims its own domains, so no two
# publishers compete for one index entry.
own_register_strategy = st.tuples(
    st.just("register"),
    st.integers(min_value=0, max_value=len(IDENTITIES) - 1),
    st.integers(min_value=0, max_value=2),
    st.text(max_size=8),
)

# Domains drawn from a shared pool, so index entries get overwritten.
shared_register_strategy = st.tuples(
    st.just("register_shared"),
    identity_strategy,
    st.sampled_from(["example.com", "news.org", "blog.net"]),
    st.text(max_size=8),
)

deregister_strategy = st.tuples(st.just("deregister"), identity_strategy)

add_seller_strategy = st.tuples(
    st.just("add"),
    caller_strategy,
    st.sampled_from(SELLER_DOMAINS),
    st.sampled_from(SELLER_IDS),
    st.sampled_from(list(Relationship)),
    st.text(max_size=6),
)

remove_seller_strategy = st.tuples(
    st.just("remove"),
    caller_strategy,
    st.sampled_from(SELLER_DOMAINS),
    st.sampled_from(SELLER_IDS),
)

intrusion_strategy = st.tuples(st.just("intrude"), caller_strategy, identity_strategy)

own_domain_ops = st.lists(
    st.one_of(
        own_register_strategy,
        deregister_strategy,
        add_seller_strategy,
        remove_seller_strategy,
        intrusion_strategy,
    ),
    max_size=30,
)

shared_domain_ops = st.lists(
    st.one_of(
        shared_register_strategy,
        deregister_strategy,
        add_seller_strategy,
        remove_seller_strategy,
    ),
    max_size=30,
)


def _own_domain(index: int, version: int) -> str:
    return f"pub{index}-v{version}.com"


def _run(service: RegistryService, op: tuple) -> None:
    kind = op[0]
    if kind == "register":
        _, index, version, name = op
        service.register_publisher(ADMIN, IDENTITIES[index], _own_domain(index, version), name)
    elif kind == "register_shared":
        _, identity, domain, name = op
        service.register_publisher(ADMIN, identity, domain, name)
    elif kind == "deregister":
        service.deregister_publisher(ADMIN, op[1])
    elif kind == "add":
        _, caller, seller_domain, seller_id, relationship, tag_id = op
        service.add_seller(caller, seller_domain, seller_id, relationship, tag_id)
    elif kind == "remove":
        _, caller, seller_domain, seller_id = op
        service.remove_seller(caller, seller_domain, seller_id)
    elif kind == "intrude":
        _, caller, identity = op
        with pytest.raises(RegistryPermissionError):
            service.register_publisher(caller, identity, "hijack.com", "x")
    else:
        raise AssertionError(f"unknown op {kind}")


# =============================================================================
# Properties
# =============================================================================

class TestRegistryInvariants:
    @given(ops=own_domain_ops)
    @settings(max_examples=150)
    def test_stores_stay_consistent(self, ops):
        service = RegistryService(ADMIN)
        for op in ops:
            _run(service, op)
            assert check_invariants(service.projection_store.state) == []

    @given(ops=own_domain_ops)
    @settings(max_examples=100)
    def test_domain_lookup_matches_identity_lookup(self, ops):
        service = RegistryService(ADMIN)
        for op in ops:
            _run(service, op)

        for identity in IDENTITIES:
            if not service.is_registered_publisher(identity):
                continue
            domain = service.get_publisher(identity).domain
            for seller_domain in SELLER_DOMAINS:
                for seller_id in SELLER_IDS:
                    assert service.get_seller_for_publisher_domain(
                        domain, seller_domain, seller_id,
                    ) == service.get_seller_for_publisher(
                        identity, seller_domain, seller_id,
                    )


class TestAbortsAreInert:
    @given(ops=own_domain_ops, caller=caller_strategy, target=identity_strategy)
    @settings(max_examples=100)
    def test_non_admin_writes_change_nothing(self, ops, caller, target):
        service = RegistryService(ADMIN)
        for op in ops:
            _run(service, op)

        before = service.snapshot()
        ledger_size = len(service.ledger)
        with pytest.raises(RegistryPermissionError):
            service.register_publisher(caller, target, "hijack.com", "x")
        with pytest.raises(RegistryPermissionError):
            service.deregister_publisher(caller, target)

        assert service.snapshot() == before
        assert len(service.ledger) == ledger_size

    @given(
        ops=shared_domain_ops,
        strict=st.booleans(),
        seller_domain=st.sampled_from(SELLER_DOMAINS),
        seller_id=st.sampled_from(SELLER_IDS),
    )
    @settings(max_examples=100)
    def test_unregistered_seller_calls_change_nothing(self, ops, strict, seller_domain, seller_id):
        service = RegistryService(
            ADMIN,
            settings=RegistrySettings(strict_seller_authorization=strict),
        )
        for op in ops:
            _run(service, op)

        before = service.snapshot()
        ledger_size = len(service.ledger)
        added = service.add_seller(OUTSIDER, seller_domain, seller_id)
        removed = service.remove_seller(OUTSIDER, seller_domain, seller_id)

        assert not added.applied and not removed.applied
        assert service.snapshot() == before
        assert len(service.ledger) == ledger_size


class TestReplayDeterminism:
    @given(ops=shared_domain_ops, legacy=st.booleans())
    @settings(max_examples=100)
    def test_replay_rebuilds_live_state(self, ops, legacy):
        registry_settings = RegistrySettings.legacy() if legacy else RegistrySettings()
        service = RegistryService(ADMIN, settings=registry_settings)
        for op in ops:
            _run(service, op)

        rebuilt = RegistryService.from_ledger(ADMIN, service.ledger, settings=registry_settings)
        assert rebuilt.snapshot() == service.snapshot()
        assert service.ledger.is_valid()

    @given(head=shared_domain_ops, tail=shared_domain_ops)
    @settings(max_examples=75)
    def test_earlier_states_are_never_mutated(self, head, tail):
        service = RegistryService(ADMIN)
        for op in head:
            _run(service, op)

        frozen = service.projection_store.state
        expected = frozen.snapshot()
        for op in tail:
            _run(service, op)

        assert frozen.snapshot() == expected
