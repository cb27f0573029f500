"""
ARL Event Bus — Dispatcher
============================
Hands a committed ledger entry to every listener of its event type.

The entry is already sealed when it gets here. A listener that raises
is recorded in the report and logged; the remaining listeners still
run, and nothing is rolled back.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from core.events.registry import SubscriberRegistry

logger = logging.getLogger("arl.events")


@dataclass(frozen=True)
class DispatchFailure:
    handler: str
    subscriber: str
    error_type: str
    error: str

    def to_dict(self) -> dict:
        return {
            "handler": self.handler,
            "subscriber": self.subscriber,
            "error_type": self.error_type,
            "error": self.error,
        }


@dataclass(frozen=True)
class DispatchReport:
    event_type: str
    event_id: str
    notified: int = 0
    failures: List[DispatchFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "notified": self.notified,
            "failed": self.failed,
            "failures": [failure.to_dict() for failure in self.failures],
        }


def dispatch(entry: Any, registry: SubscriberRegistry) -> DispatchReport:
    """
    Call each listener of entry.event_type with the entry. Never raises.
    """
    event_id = str(entry.event_id)
    notified = 0
    failures: List[DispatchFailure] = []

    for subscription in registry.get_subscribers(entry.event_type):
        try:
            subscription.handler(entry)
        except Exception as exc:
            failures.append(DispatchFailure(
                handler=subscription.handler_name,
                subscriber=subscription.subscriber,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                f"Listener {subscription.handler_name} failed on "
                f"{entry.event_type} ({event_id}): {exc}",
                exc_info=True,
            )
        else:
            notified += 1

    if notified or failures:
        logger.debug(
            f"Dispatched {entry.event_type} ({event_id}): "
            f"{notified} notified, {len(failures)} failed"
        )
    return DispatchReport(entry.event_type, event_id, notified, failures)
