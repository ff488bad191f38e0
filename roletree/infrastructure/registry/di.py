"""DI provider for the base role registry adapter."""

from dishka import provide

from roletree.domain.hierarchy.port.registry import BaseRoleRegistry
from roletree.infrastructure.registry.memory import InMemoryRoleRegistry
from roletree.util.di.base import Provider
from roletree.util.di.scope import Scope


class RegistryProvider(Provider):
    """DI provider for registry adapters."""

    @provide(scope=Scope.APP)
    def get_memory_registry(self) -> InMemoryRoleRegistry:
        """Provide the shared in-memory registry (also exposes the event log)."""
        return InMemoryRoleRegistry()

    @provide(scope=Scope.APP)
    def get_registry(self, registry: InMemoryRoleRegistry) -> BaseRoleRegistry:
        return registry
