"""
ARL Event Bus — Subscriber Registry
======================================
Who listens to which committed registry event.

Listeners are outside consumers that rebuild their own view of the
registry: an ads.txt renderer, an audit mirror, a search index.

Rules:
- Event types follow engine.domain.action[.version]
- Any number of listeners per event type, each handler at most once
- A component may not listen to its own namespace unless it opts in
- Listeners are called in registration order
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, List, Tuple

from core.commands.base import derive_source_engine
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("arl.events")


@dataclass(frozen=True)
class Subscription:
    event_type: str
    handler: Callable
    subscriber: str

    @property
    def handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


def _check_event_type(event_type: str) -> str:
    if not isinstance(event_type, str) or len(event_type.strip().split(".")) < 3:
        raise InvalidEventTypeFormat(event_type if isinstance(event_type, str) else "")
    return event_type.strip()


class SubscriberRegistry:
    """Thread-safe, in-memory table of Subscriptions keyed by event type."""

    def __init__(self):
        self._by_type: Dict[str, List[Subscription]] = {}
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> Subscription:
        """
        Add handler as a listener for event_type.

        Raises:
            InvalidEventTypeFormat:   event_type has fewer than 3 segments
            EventBusError:            handler is not callable
            SelfSubscriptionError:    subscriber_engine owns the event namespace
            DuplicateSubscriberError: handler already listens to event_type
        """
        event_type = _check_event_type(event_type)
        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        if derive_source_engine(event_type) == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        subscription = Subscription(event_type, handler, subscriber_engine)
        with self._lock:
            current = self._by_type.setdefault(event_type, [])
            if any(existing.handler is handler for existing in current):
                raise DuplicateSubscriberError(event_type, subscription.handler_name)
            current.append(subscription)

        logger.info(
            f"Listener {subscription.handler_name} ({subscriber_engine}) "
            f"subscribed to {event_type}"
        )
        return subscription

    def get_subscribers(self, event_type: str) -> Tuple[Subscription, ...]:
        """Listeners for event_type in registration order; empty when none."""
        with self._lock:
            return tuple(self._by_type.get(event_type, ()))

    def has_subscribers(self, event_type: str) -> bool:
        return self.subscriber_count(event_type) > 0

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._by_type.get(event_type, ()))
