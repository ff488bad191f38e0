"""Handler-level authorization gates: public() and at_least(role)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roletree.domain.hierarchy.model.value import RoleId


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    Subclasses define specific gate behaviors (public access, role checks, etc.).
    """


@dataclass(frozen=True)
class Public(Gate):
    """No caller check at the gate."""


@dataclass(frozen=True)
class AtLeast(Gate):
    """Gate that requires the caller to be able to act as the given role."""

    role: "RoleId"


_PUBLIC = Public()


def public() -> Public:
    """Mark a handler as publicly accessible (no gate check)."""
    return _PUBLIC


def at_least(role: "RoleId") -> AtLeast:
    """Mark a handler as requiring a caller that can act as the given role."""
    return AtLeast(role=role)
