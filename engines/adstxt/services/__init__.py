"""
ARL ads.txt Engine — Service Layer
===================================
The registry's only write path.

Write flow (serialized by one lock — single writer):
    1. Resolve event type for the command
    2. Run authorization policies
         - admin commands: failure aborts with RegistryPermissionError
         - seller commands: failure is inert (explicit REJECTED outcome,
           or silently ignored in legacy mode)
    3. Build the event payload from current state + settings
    4. Append to the ledger (failure propagates, state untouched)
    5. Swap in the new immutable state
    6. Dispatch the committed entry to subscribers

Reads never lock: they run against whichever immutable
RegistryState was current when the query started.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
import threading
from threading import Lock
from typing import Any, Callable, Dict, Optional

from core.commands.base import Command
from core.commands.outcomes import CommandOutcome
from core.commands.rejection import RejectionReason
from core.event_store.ledger import EventLedger, LedgerEntry, replay
from core.events.dispatcher import DispatchReport, dispatch
from core.events.registry import SubscriberRegistry
from core.identity.requirements import NULL_IDENTITY, Identity, validate_identity
from engines.adstxt.commands import (
    ADMIN_COMMAND_TYPES,
    ADSTXT_PUBLISHER_DEREGISTER_REQUEST,
    ADSTXT_PUBLISHER_REGISTER_REQUEST,
    ADSTXT_SELLER_ADD_REQUEST,
    ADSTXT_SELLER_REMOVE_REQUEST,
    PUBLISHER_COMMAND_TYPES,
    AddSellerRequest,
    DeregisterPublisherRequest,
    RegisterPublisherRequest,
    RemoveSellerRequest,
)
from engines.adstxt.errors import (
    AdministratorMismatchError,
    ReentrantWriteError,
    RegistryPermissionError,
    UnknownRegistryCommand,
)
from engines.adstxt.events import (
    ADMINISTRATOR_EVENT_TYPES,
    Notification,
    build_publisher_deregistered_payload,
    build_publisher_registered_payload,
    build_seller_added_payload,
    build_seller_removed_payload,
    notification_for,
    resolve_adstxt_event_type,
)
from engines.adstxt.keys import domain_key, seller_key
from engines.adstxt.models import Publisher, Relationship, SellerRecord
from engines.adstxt.policies import (
    caller_must_be_administrator_policy,
    caller_must_be_registered_publisher_policy,
    relationship_must_be_valid_policy,
)
from engines.adstxt.settings import RegistrySettings
from engines.adstxt.state import RegistryState, apply_event

logger = logging.getLogger("arl.registry")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Projection Store ──────────────────────────────────────────

class RegistryProjectionStore:
    """
    Holds the current RegistryState and answers queries.

    apply() replaces the state reference; it never edits the old one.
    """

    def __init__(self, administrator: Identity):
        self._state = RegistryState(administrator=administrator)
        self._event_count = 0

    def apply(self, event_type: str, payload: Dict[str, Any]) -> None:
        self._state = apply_event(self._state, event_type, payload)
        self._event_count += 1

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def event_count(self) -> int:
        return self._event_count

    def snapshot(self) -> dict:
        return self._state.snapshot()

    # ── Queries ───────────────────────────────────────────────

    def is_registered_publisher(self, identity: Identity) -> bool:
        publisher = self._state.publishers.get(identity)
        return publisher is not None and publisher.identity != NULL_IDENTITY

    def is_registered_publisher_domain(self, domain: str) -> bool:
        return self.get_domain_owner(domain) != NULL_IDENTITY

    def get_publisher(self, identity: Identity) -> Publisher:
        return self._state.publishers.get(identity, Publisher.default())

    def get_domain_owner(self, domain: str) -> Identity:
        return self.get_domain_owner_by_key(domain_key(domain))

    def get_domain_owner_by_key(self, key: str) -> Identity:
        return self._state.domain_index.get(key, NULL_IDENTITY)

    def get_seller_for_publisher(
        self,
        identity: Identity,
        seller_domain: str,
        seller_id: str,
    ) -> SellerRecord:
        records = self._state.sellers.get(identity)
        if records is None:
            return SellerRecord.default()
        return records.get(seller_key(seller_domain, seller_id), SellerRecord.default())

    def get_seller_for_publisher_domain(
        self,
        publisher_domain: str,
        seller_domain: str,
        seller_id: str,
    ) -> SellerRecord:
        state = self._state
        identity = state.domain_index.get(domain_key(publisher_domain), NULL_IDENTITY)
        records = state.sellers.get(identity)
        if records is None:
            return SellerRecord.default()
        return records.get(seller_key(seller_domain, seller_id), SellerRecord.default())

    def list_sellers(self, identity: Identity) -> Dict[str, SellerRecord]:
        return dict(self._state.sellers.get(identity, {}))


# ── Execution Result ──────────────────────────────────────────

@dataclass(frozen=True)
class RegistryExecutionResult:
    """
    What happened to one command.

    entry is None when nothing was committed (seller call from an
    unregistered caller). outcome is None only in legacy mode for
    such ignored calls.
    """
    command_id: uuid.UUID
    event_type: Optional[str]
    outcome: Optional[CommandOutcome]
    entry: Optional[LedgerEntry] = None
    notification: Optional[Notification] = None
    dispatch_result: Optional[DispatchReport] = None

    @property
    def applied(self) -> bool:
        return self.entry is not None

    @property
    def rejection(self) -> Optional[RejectionReason]:
        return self.outcome.reason if self.outcome is not None else None


# ── Service ───────────────────────────────────────────────────

class RegistryService:
    """Authorized-reseller registry. All mutations produce ledger entries."""

    def __init__(
        self,
        administrator: Identity,
        *,
        ledger: Optional[EventLedger] = None,
        subscriber_registry: Optional[SubscriberRegistry] = None,
        settings: Optional[RegistrySettings] = None,
        registry_id: Optional[uuid.UUID] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._administrator = validate_identity(administrator, "administrator")
        self._ledger = ledger if ledger is not None else EventLedger()
        self._subscribers = subscriber_registry or SubscriberRegistry()
        self._settings = settings or RegistrySettings()
        self._registry_id = registry_id or uuid.uuid4()
        self._clock = clock or _utc_now
        self._projection = RegistryProjectionStore(self._administrator)
        self._write_lock = Lock()
        # set while this thread is dispatching a commit to listeners
        self._dispatching = threading.local()

    @classmethod
    def from_ledger(cls, administrator: Identity, ledger: EventLedger, **kwargs) -> "RegistryService":
        """
        Rebuild a service by verifying and replaying a committed ledger.

        The administrator is bound to the history: every publisher
        registration or deregistration in the ledger must have been
        committed by the administrator given here.

        Raises:
            LedgerChainBrokenError:     the chain does not verify.
            AdministratorMismatchError: the ledger was written under a
                                        different administrator.
        """
        ledger.verify()
        entries = ledger.entries()
        for entry in entries:
            if entry.event_type not in ADMINISTRATOR_EVENT_TYPES:
                continue
            committed_by = entry.payload.get("actor_id")
            if committed_by != administrator:
                logger.warning(
                    f"Refused replay: entry {entry.sequence} committed by "
                    f"'{committed_by}', administrator given '{administrator}'"
                )
                raise AdministratorMismatchError(administrator, committed_by, entry.sequence)

        if entries and "registry_id" not in kwargs:
            kwargs["registry_id"] = entries[0].registry_id
        service = cls(administrator, ledger=ledger, **kwargs)
        replay(ledger, service._projection.apply)
        return service

    # ── Properties ────────────────────────────────────────────

    @property
    def administrator(self) -> Identity:
        return self._administrator

    @property
    def registry_id(self) -> uuid.UUID:
        return self._registry_id

    @property
    def settings(self) -> RegistrySettings:
        return self._settings

    @property
    def ledger(self) -> EventLedger:
        return self._ledger

    @property
    def subscribers(self) -> SubscriberRegistry:
        return self._subscribers

    @property
    def projection_store(self) -> RegistryProjectionStore:
        return self._projection

    # ── Write path ────────────────────────────────────────────

    def execute(self, command: Command) -> RegistryExecutionResult:
        if command.registry_id != self._registry_id:
            raise ValueError(
                f"Command targets registry {command.registry_id}, "
                f"this is {self._registry_id}."
            )
        event_type = resolve_adstxt_event_type(command.command_type)
        if event_type is None:
            raise UnknownRegistryCommand(command.command_type)

        if getattr(self._dispatching, "active", False):
            raise ReentrantWriteError(command.command_type)

        with self._write_lock:
            if command.command_type in ADMIN_COMMAND_TYPES:
                self._require_administrator(command.actor_id, command.command_type)

            elif command.command_type in PUBLISHER_COMMAND_TYPES:
                invalid = relationship_must_be_valid_policy(command)
                if invalid is not None:
                    raise ValueError(invalid.message)
                rejection = caller_must_be_registered_publisher_policy(
                    command,
                    self._projection.is_registered_publisher,
                )
                if rejection is not None:
                    return self._inert_result(command, rejection)

            payload = self._build_payload(command)
            entry = self._ledger.append(
                event_type,
                payload,
                self._registry_id,
            )
            self._projection.apply(event_type, entry.payload)
            notification = notification_for(event_type, entry.payload)
            logger.info(
                f"Committed {event_type} seq={entry.sequence}: "
                f"{notification.name}{notification.args}"
            )
            self._dispatching.active = True
            try:
                dispatch_result = dispatch(entry, self._subscribers)
            finally:
                self._dispatching.active = False

        return RegistryExecutionResult(
            command_id=command.command_id,
            event_type=event_type,
            outcome=CommandOutcome.accepted(command.command_id, self._clock()),
            entry=entry,
            notification=notification,
            dispatch_result=dispatch_result,
        )

    def _require_administrator(self, caller: Identity, command_type: str) -> None:
        rejection = caller_must_be_administrator_policy(caller, self._administrator)
        if rejection is not None:
            logger.warning(f"Rejected {command_type} from '{caller}': {rejection.code}")
            raise RegistryPermissionError(rejection)

    def _inert_result(self, command: Command, rejection: RejectionReason) -> RegistryExecutionResult:
        if not self._settings.strict_seller_authorization:
            logger.debug(
                f"Ignored {command.command_type} from unregistered '{command.actor_id}'"
            )
            return RegistryExecutionResult(
                command_id=command.command_id,
                event_type=None,
                outcome=None,
            )
        logger.warning(
            f"Rejected {command.command_type} from '{command.actor_id}': {rejection.code}"
        )
        return RegistryExecutionResult(
            command_id=command.command_id,
            event_type=None,
            outcome=CommandOutcome.rejected(command.command_id, rejection, self._clock()),
        )

    def _build_payload(self, command: Command) -> dict:
        state = self._projection.state
        repair = self._settings.repair_stale_domain_index

        if command.command_type == ADSTXT_PUBLISHER_REGISTER_REQUEST:
            identity = command.payload["identity"]
            existing = state.publishers.get(identity)
            retracted = None
            if repair and existing is not None and existing.domain != command.payload["domain"]:
                old_key = domain_key(existing.domain)
                if state.domain_index.get(old_key) == identity:
                    retracted = old_key
            return build_publisher_registered_payload(command, retracted)

        if command.command_type == ADSTXT_PUBLISHER_DEREGISTER_REQUEST:
            identity = command.payload["identity"]
            existing = state.publishers.get(identity)
            domain = existing.domain if existing is not None else ""
            key = domain_key(domain)
            if repair:
                owned = existing is not None and state.domain_index.get(key) == identity
                retracted = key if owned else None
            else:
                retracted = key
            return build_publisher_deregistered_payload(command, domain, retracted)

        if command.command_type == ADSTXT_SELLER_ADD_REQUEST:
            return build_seller_added_payload(command)

        if command.command_type == ADSTXT_SELLER_REMOVE_REQUEST:
            return build_seller_removed_payload(command)

        raise UnknownRegistryCommand(command.command_type)

    # ── Operations (caller passed explicitly) ─────────────────

    def _command_kwargs(self, caller: Identity) -> dict:
        return {
            "registry_id": self._registry_id,
            "actor_id": caller,
            "issued_at": self._clock(),
        }

    def register_publisher(self, caller: Identity, identity: Identity,
                           domain: str, name: str) -> RegistryExecutionResult:
        self._require_administrator(caller, ADSTXT_PUBLISHER_REGISTER_REQUEST)
        request = RegisterPublisherRequest(identity=identity, domain=domain, name=name)
        return self.execute(request.to_command(**self._command_kwargs(caller)))

    def deregister_publisher(self, caller: Identity, identity: Identity) -> RegistryExecutionResult:
        self._require_administrator(caller, ADSTXT_PUBLISHER_DEREGISTER_REQUEST)
        request = DeregisterPublisherRequest(identity=identity)
        return self.execute(request.to_command(**self._command_kwargs(caller)))

    def add_seller(self, caller: Identity, seller_domain: str, seller_id: str,
                   relationship: Any = Relationship.DIRECT,
                   tag_id: str = "") -> RegistryExecutionResult:
        request = AddSellerRequest(
            seller_domain=seller_domain,
            seller_id=seller_id,
            relationship=relationship,
            tag_id=tag_id,
        )
        return self.execute(request.to_command(**self._command_kwargs(caller)))

    def remove_seller(self, caller: Identity, seller_domain: str,
                      seller_id: str) -> RegistryExecutionResult:
        request = RemoveSellerRequest(seller_domain=seller_domain, seller_id=seller_id)
        return self.execute(request.to_command(**self._command_kwargs(caller)))

    # ── Queries ───────────────────────────────────────────────

    def is_registered_publisher(self, identity: Identity) -> bool:
        return self._projection.is_registered_publisher(identity)

    def is_registered_publisher_domain(self, domain: str) -> bool:
        return self._projection.is_registered_publisher_domain(domain)

    def get_publisher(self, identity: Identity) -> Publisher:
        return self._projection.get_publisher(identity)

    def get_domain_owner(self, domain: str) -> Identity:
        return self._projection.get_domain_owner(domain)

    def get_seller_for_publisher(self, identity: Identity, seller_domain: str,
                                 seller_id: str) -> SellerRecord:
        return self._projection.get_seller_for_publisher(identity, seller_domain, seller_id)

    def get_seller_for_publisher_domain(self, publisher_domain: str, seller_domain: str,
                                        seller_id: str) -> SellerRecord:
        return self._projection.get_seller_for_publisher_domain(
            publisher_domain, seller_domain, seller_id,
        )

    def list_sellers(self, identity: Identity) -> Dict[str, SellerRecord]:
        return self._projection.list_sellers(identity)

    def snapshot(self) -> dict:
        return self._projection.snapshot()
