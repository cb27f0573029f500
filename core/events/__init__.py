"""
ARL Event Bus — Public API
============================
The ledger seals truth. The event bus distributes truth.
Truth must exist before it is heard.
"""

from core.events.dispatcher import DispatchFailure, DispatchReport, dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)
from core.events.registry import SubscriberRegistry, Subscription

__all__ = [
    "dispatch",
    "DispatchReport",
    "DispatchFailure",
    "SubscriberRegistry",
    "Subscription",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
