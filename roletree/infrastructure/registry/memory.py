"""In-memory BaseRoleRegistry that records membership changes as events."""

import logging
from collections import defaultdict
from typing import Callable

from roletree.domain.hierarchy.event import (
    RoleAdminChanged,
    RoleGranted,
    RoleIntroduced,
    RoleRevoked,
)
from roletree.domain.hierarchy.model.value import PrincipalId, RoleId
from roletree.domain.hierarchy.port.registry import BaseRoleRegistry
from roletree.domain.shared.event import Event

logger = logging.getLogger(__name__)

EventHandlerFunc = Callable[[Event], None]


class InMemoryRoleRegistry(BaseRoleRegistry):
    """Flat holder sets plus an append-only event log.

    Subscribers registered for an event type are called synchronously, in
    subscription order, after the holder sets are updated and the event is
    appended to the log. A failing subscriber is logged and the remaining
    subscribers still run.
    """

    def __init__(self) -> None:
        self._holders: dict[RoleId, set[PrincipalId]] = defaultdict(set)
        self._events: list[Event] = []
        self._subscribers: dict[type[Event], list[EventHandlerFunc]] = defaultdict(list)

    # --- BaseRoleRegistry ---

    def has_role(self, role: RoleId, principal: PrincipalId) -> bool:
        return principal in self._holders.get(role, ())

    def add_holder(self, role: RoleId, principal: PrincipalId, sender: PrincipalId) -> None:
        self._holders[role].add(principal)
        self._publish(RoleGranted(role=str(role), principal=str(principal), sender=str(sender)))

    def remove_holder(self, role: RoleId, principal: PrincipalId, sender: PrincipalId) -> None:
        holders = self._holders.get(role)
        if holders is not None:
            holders.discard(principal)
            if not holders:
                del self._holders[role]
        self._publish(RoleRevoked(role=str(role), principal=str(principal), sender=str(sender)))

    def role_introduced(self, role: RoleId, admin_role: RoleId, sender: PrincipalId) -> None:
        self._publish(RoleIntroduced(role=str(role), admin_role=str(admin_role), sender=str(sender)))

    def role_admin_changed(
        self, role: RoleId, previous_admin_role: RoleId, new_admin_role: RoleId
    ) -> None:
        self._publish(
            RoleAdminChanged(
                role=str(role),
                previous_admin_role=str(previous_admin_role),
                new_admin_role=str(new_admin_role),
            )
        )

    # --- Event log ---

    def subscribe(self, event_type: type[Event], handler: EventHandlerFunc) -> None:
        self._subscribers[event_type].append(handler)

    def events(self, event_type: type[Event] | None = None) -> list[Event]:
        """Return logged events, oldest first, optionally filtered by type."""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if isinstance(e, event_type)]

    def holders(self, role: RoleId) -> set[PrincipalId]:
        return set(self._holders.get(role, ()))

    def _publish(self, event: Event) -> None:
        self._events.append(event)
        handlers = self._subscribers.get(type(event), [])

        if not handlers:
            logger.debug("No handlers for event %s", type(event).__name__)
            return

        logger.debug("Publishing event %s to %d handlers", type(event).__name__, len(handlers))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on event %s (id=%s)",
                    handler,
                    type(event).__name__,
                    event.id,
                )
