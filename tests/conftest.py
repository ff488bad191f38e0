"""Global test fixtures."""

import logfire
import pytest

from roletree.domain.hierarchy.model.value import PrincipalId
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.infrastructure.registry.memory import InMemoryRoleRegistry

# Spans are created by command handlers; keep them local to the test process
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def registry() -> InMemoryRoleRegistry:
    return InMemoryRoleRegistry()


@pytest.fixture
def hierarchy(registry: InMemoryRoleRegistry) -> HierarchyService:
    return HierarchyService.create(registry)


@pytest.fixture
def root_holder(hierarchy: HierarchyService) -> PrincipalId:
    """A principal seated as the first root holder."""
    g0 = PrincipalId.generate()
    hierarchy.bootstrap(g0)
    return g0
