"""
ARL Event Bus — Errors
========================
Raised while wiring listeners to committed registry events.

None of these can occur during a commit: a listener that fails at
dispatch time is reported in the DispatchReport, never raised.
"""


class EventBusError(Exception):
    """A listener could not be attached to the registry's event stream."""


class InvalidEventTypeFormat(EventBusError):
    """Registry event types look like adstxt.seller.added.v1."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"'{event_type}' is not a registry event type; expected at least "
            f"three dot-separated segments such as adstxt.seller.added.v1."
        )


class DuplicateSubscriberError(EventBusError):
    """A listener would be notified twice of the same commit."""

    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(
            f"Listener {handler_name} already receives '{event_type}' commits."
        )


class SelfSubscriptionError(EventBusError):
    """A component listening to the events it commits, without opting in."""

    def __init__(self, subscriber: str, event_type: str):
        self.subscriber = subscriber
        self.event_type = event_type
        super().__init__(
            f"'{subscriber}' commits '{event_type}' itself; pass "
            f"allow_self_subscription=True to listen to it."
        )
