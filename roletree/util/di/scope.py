"""Custom Dishka scopes for roletree."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """roletree dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (the hierarchy and its registry)
    - UOW: Unit of Work (one caller issuing one command or query)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
