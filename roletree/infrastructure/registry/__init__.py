from roletree.infrastructure.registry.di import RegistryProvider
from roletree.infrastructure.registry.memory import InMemoryRoleRegistry

__all__ = ["InMemoryRoleRegistry", "RegistryProvider"]
