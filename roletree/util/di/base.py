from dishka import Provider as DishkaProvider

from roletree.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all roletree DI providers. Defaults to unit-of-work scope."""

    scope = Scope.UOW
