"""
ARL ads.txt Engine — Behaviour Settings
========================================
Two switches select between the repaired behaviour (default) and
strict parity with the legacy registry.

strict_seller_authorization:
    True  → add/remove seller from an unregistered caller returns an
            explicit REJECTED outcome.
    False → the call is silently ignored (legacy).
    Either way nothing is stored and nothing is emitted.

repair_stale_domain_index:
    True  → re-registering under a new domain retracts the old
            domain-index entry, and deregistration only retracts an
            entry that still points at the publisher.
    False → the old entry is left behind (legacy).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def _as_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"{field_name} must be a boolean, got {value!r}.")


@dataclass(frozen=True)
class RegistrySettings:
    strict_seller_authorization: bool = True
    repair_stale_domain_index: bool = True

    @classmethod
    def legacy(cls) -> "RegistrySettings":
        return cls(strict_seller_authorization=False, repair_stale_domain_index=False)

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "RegistrySettings":
        """
        Build from a settings dict (e.g. Django's ARL_REGISTRY).

        Keys are matched case-insensitively; unknown keys are ignored.
        """
        if not values:
            return cls()
        normalized = {str(k).lower(): v for k, v in values.items()}
        kwargs = {}
        for field_name in ("strict_seller_authorization", "repair_stale_domain_index"):
            if field_name in normalized:
                kwargs[field_name] = _as_bool(normalized[field_name], field_name)
        return cls(**kwargs)
