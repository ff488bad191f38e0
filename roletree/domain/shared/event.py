"""Domain event base class."""

from datetime import UTC, datetime
from typing import Any, ClassVar, NewType
from uuid import UUID, uuid4

from pydantic import Field

from roletree.domain.shared.model.entity import Entity

EventId = NewType("EventId", UUID)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def new_event_id() -> EventId:
    return EventId(uuid4())


class Event(Entity):
    """Base class for domain events.

    Subclasses are automatically registered by name in Event._registry.
    """

    id: EventId = Field(default_factory=new_event_id)
    created_at: datetime = Field(default_factory=_utc_now)

    # Auto-populated registry of all Event subclasses
    _registry: ClassVar[dict[str, type["Event"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.__name__] = cls

    @classmethod
    def lookup(cls, name: str) -> type["Event"] | None:
        """Return the registered event class with the given name."""
        return cls._registry.get(name)
