"""Tests for HierarchyService: bootstrap, grant, revoke and re-parenting."""

from unittest.mock import MagicMock, call

import pytest

from roletree.domain.hierarchy.error import (
    AlreadyAssigned,
    DepthLimitExceeded,
    InvalidPrincipal,
    NoRoleAssigned,
    RootRequired,
    Unauthorized,
    UnknownParent,
)
from roletree.domain.hierarchy.event import (
    RoleAdminChanged,
    RoleGranted,
    RoleIntroduced,
    RoleRevoked,
)
from roletree.domain.hierarchy.model.value import (
    NULL_PRINCIPAL,
    ROOT_ROLE,
    PrincipalId,
    RoleId,
)
from roletree.domain.hierarchy.port.registry import BaseRoleRegistry
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.error import InvalidStateError
from roletree.infrastructure.registry.memory import InMemoryRoleRegistry

MANAGER = RoleId.from_name("MANAGER")
USER = RoleId.from_name("USER")
GUEST = RoleId.from_name("GUEST")
AUDITOR = RoleId.from_name("AUDITOR")


def _snapshot(hierarchy: HierarchyService, *principals: PrincipalId) -> tuple:
    roles = hierarchy.list_roles()
    return (
        roles,
        [hierarchy.role_admin(r) for r in roles],
        [hierarchy.holder_count(r) for r in roles],
        [hierarchy.role_of(p) if hierarchy.has_role(p) else None for p in principals],
    )


class TestBootstrap:
    def test_initial_state(self, hierarchy: HierarchyService) -> None:
        assert hierarchy.list_roles() == [ROOT_ROLE]
        assert hierarchy.holder_count(ROOT_ROLE) == 0

    def test_bootstrap_seats_root_holder(
        self, hierarchy: HierarchyService, registry: InMemoryRoleRegistry
    ) -> None:
        g0 = PrincipalId.generate()
        hierarchy.bootstrap(g0)

        assert hierarchy.role_of(g0) == ROOT_ROLE
        assert registry.has_role(ROOT_ROLE, g0)

    def test_bootstrap_only_once(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        with pytest.raises(InvalidStateError) as exc_info:
            hierarchy.bootstrap(PrincipalId.generate())
        assert exc_info.value.code == "already_bootstrapped"

    def test_bootstrap_rejects_null(self, hierarchy: HierarchyService) -> None:
        with pytest.raises(InvalidPrincipal):
            hierarchy.bootstrap(NULL_PRINCIPAL)

    def test_root_grant_requires_existing_root_holder(
        self, hierarchy: HierarchyService
    ) -> None:
        with pytest.raises(Unauthorized):
            hierarchy.grant(PrincipalId.generate(), ROOT_ROLE, PrincipalId.generate())


class TestGrant:
    def test_first_grant_introduces_role_under_parent(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice, ROOT_ROLE)

        assert hierarchy.list_roles() == [ROOT_ROLE, MANAGER]
        assert hierarchy.role_admin(MANAGER) == ROOT_ROLE
        assert hierarchy.role_of(alice) == MANAGER
        assert hierarchy.holder_count(MANAGER) == 1

    def test_first_grant_defaults_parent_to_root(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        hierarchy.grant(root_holder, MANAGER, PrincipalId.generate())
        assert hierarchy.role_admin(MANAGER) == ROOT_ROLE

    def test_role_birth_skips_caller_check(self, hierarchy: HierarchyService) -> None:
        stranger = PrincipalId.generate()
        alice = PrincipalId.generate()

        hierarchy.grant(stranger, MANAGER, alice)

        assert hierarchy.role_of(alice) == MANAGER

    def test_later_grant_requires_admin(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, carol = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)

        with pytest.raises(Unauthorized) as exc_info:
            hierarchy.grant(bob, USER, carol)

        assert exc_info.value.role == MANAGER
        assert not hierarchy.has_role(carol)

    def test_admin_can_grant_existing_role(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, carol = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)

        hierarchy.grant(alice, USER, carol)

        assert hierarchy.holder_count(USER) == 2

    def test_parent_hint_ignored_for_existing_role(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, carol = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)

        hierarchy.grant(root_holder, USER, carol, ROOT_ROLE)

        assert hierarchy.role_admin(USER) == MANAGER

    def test_null_principal_rejected(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        with pytest.raises(InvalidPrincipal):
            hierarchy.grant(root_holder, MANAGER, NULL_PRINCIPAL)
        assert hierarchy.list_roles() == [ROOT_ROLE]

    def test_already_assigned_regardless_of_authority(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)

        with pytest.raises(AlreadyAssigned) as exc_info:
            hierarchy.grant(root_holder, USER, alice, MANAGER)

        assert exc_info.value.role == MANAGER
        assert f"principal={alice} role={MANAGER}" in exc_info.value.message
        assert not hierarchy.children_of(MANAGER)
        assert USER not in hierarchy.list_roles()

    def test_same_role_twice_is_already_assigned(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        with pytest.raises(AlreadyAssigned):
            hierarchy.grant(root_holder, MANAGER, alice)
        assert hierarchy.holder_count(MANAGER) == 1

    def test_unknown_parent_rejected_without_mutation(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        bob = PrincipalId.generate()
        before = _snapshot(hierarchy, bob)

        with pytest.raises(UnknownParent):
            hierarchy.grant(root_holder, USER, bob, MANAGER)

        assert _snapshot(hierarchy, bob) == before

    def test_depth_limit_rejected_without_mutation(self, registry: InMemoryRoleRegistry) -> None:
        hierarchy = HierarchyService.create(registry, max_depth=1)
        g0, alice, bob = (PrincipalId.generate() for _ in range(3))
        hierarchy.bootstrap(g0)
        hierarchy.grant(g0, MANAGER, alice)
        before = _snapshot(hierarchy, bob)

        with pytest.raises(DepthLimitExceeded):
            hierarchy.grant(g0, USER, bob, MANAGER)

        assert _snapshot(hierarchy, bob) == before

    def test_grant_notifies_registry(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)

        introduced = registry.events(RoleIntroduced)
        granted = registry.events(RoleGranted)
        assert [e.role for e in introduced] == [str(MANAGER)]
        assert introduced[0].admin_role == str(ROOT_ROLE)
        assert granted[-1].principal == str(alice)
        assert granted[-1].sender == str(root_holder)
        assert registry.has_role(MANAGER, alice)

    def test_rejected_grant_does_not_notify(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        count = len(registry.events())
        with pytest.raises(UnknownParent):
            hierarchy.grant(root_holder, USER, PrincipalId.generate(), MANAGER)
        assert len(registry.events()) == count


class TestRevoke:
    def test_revoke_removes_assignment(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)

        hierarchy.revoke(root_holder, alice)

        assert not hierarchy.has_role(alice)
        assert hierarchy.holder_count(MANAGER) == 0
        assert MANAGER in hierarchy.list_roles()

    def test_revoked_principal_can_receive_new_role(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.revoke(root_holder, alice)

        hierarchy.grant(root_holder, USER, alice)

        assert hierarchy.role_of(alice) == USER

    def test_roleless_principal(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        with pytest.raises(NoRoleAssigned):
            hierarchy.revoke(root_holder, PrincipalId.generate())

    def test_requires_admin_of_role(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob = PrincipalId.generate(), PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)

        before = _snapshot(hierarchy, root_holder, alice, bob)

        with pytest.raises(Unauthorized):
            hierarchy.revoke(bob, alice)
        with pytest.raises(Unauthorized):
            hierarchy.revoke(bob, bob)

        assert _snapshot(hierarchy, root_holder, alice, bob) == before
        hierarchy.revoke(alice, bob)
        assert not hierarchy.has_role(bob)

    def test_last_root_holder_cannot_be_revoked(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        before = _snapshot(hierarchy, root_holder, alice)
        logged = len(registry.events())

        with pytest.raises(RootRequired) as exc_info:
            hierarchy.revoke(root_holder, root_holder)

        assert exc_info.value.code == "root_required"
        assert _snapshot(hierarchy, root_holder, alice) == before
        assert len(registry.events()) == logged

    def test_non_last_root_holder_can_be_revoked(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        g1 = PrincipalId.generate()
        hierarchy.grant(root_holder, ROOT_ROLE, g1)

        hierarchy.revoke(g1, root_holder)

        assert hierarchy.holder_count(ROOT_ROLE) == 1
        assert hierarchy.role_of(g1) == ROOT_ROLE

    def test_unauthorized_checked_before_root_required(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        before = _snapshot(hierarchy, root_holder, alice)

        with pytest.raises(Unauthorized):
            hierarchy.revoke(alice, root_holder)

        assert _snapshot(hierarchy, root_holder, alice) == before


class TestReparenting:
    def test_last_holder_lifts_children(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, dave = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)
        hierarchy.grant(alice, GUEST, dave, MANAGER)

        hierarchy.revoke(root_holder, alice)

        assert hierarchy.role_admin(USER) == ROOT_ROLE
        assert hierarchy.role_admin(GUEST) == ROOT_ROLE
        assert hierarchy.children_of(MANAGER) == []
        assert MANAGER in hierarchy.list_roles()
        assert hierarchy.role_of(bob) == USER

    def test_lifts_to_revoked_roles_own_parent(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, carol = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)
        hierarchy.grant(bob, GUEST, carol, USER)

        hierarchy.revoke(alice, bob)

        assert hierarchy.role_admin(GUEST) == MANAGER
        assert hierarchy.can_act_as(alice, GUEST)

    def test_remaining_holder_keeps_children(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, erin, bob = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(root_holder, MANAGER, erin)
        hierarchy.grant(alice, USER, bob, MANAGER)

        hierarchy.revoke(root_holder, alice)

        assert hierarchy.role_admin(USER) == MANAGER

    def test_grandchildren_stay_attached(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        alice, bob, carol = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)
        hierarchy.grant(bob, GUEST, carol, USER)

        hierarchy.revoke(root_holder, alice)

        assert hierarchy.role_admin(GUEST) == USER
        assert hierarchy.role_admin(USER) == ROOT_ROLE

    def test_childless_role_emits_no_admin_change(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, AUDITOR, alice)
        hierarchy.revoke(root_holder, alice)
        assert registry.events(RoleAdminChanged) == []

    def test_admin_changed_once_per_child_then_revoked(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice, bob, dave = (PrincipalId.generate() for _ in range(3))
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)
        hierarchy.grant(alice, GUEST, dave, MANAGER)
        start = len(registry.events())

        hierarchy.revoke(root_holder, alice)

        tail = registry.events()[start:]
        assert [type(e) for e in tail] == [RoleAdminChanged, RoleAdminChanged, RoleRevoked]
        assert {e.role for e in tail[:2]} == {str(USER), str(GUEST)}
        assert all(e.previous_admin_role == str(MANAGER) for e in tail[:2])
        assert all(e.new_admin_role == str(ROOT_ROLE) for e in tail[:2])
        assert not registry.has_role(MANAGER, alice)


class TestManagerUserScenario:
    def test_walkthrough(self, hierarchy: HierarchyService, root_holder: PrincipalId) -> None:
        alice, bob = PrincipalId.generate(), PrincipalId.generate()

        hierarchy.grant(root_holder, MANAGER, alice, ROOT_ROLE)
        assert hierarchy.role_admin(MANAGER) == ROOT_ROLE

        hierarchy.grant(alice, USER, bob, MANAGER)
        assert hierarchy.can_act_as(alice, MANAGER)
        assert not hierarchy.can_act_as(bob, MANAGER)
        assert hierarchy.can_act_as(alice, USER)

        hierarchy.revoke(root_holder, alice)
        assert hierarchy.role_admin(USER) == ROOT_ROLE
        assert hierarchy.role_of(bob) == USER


class TestRegistryPort:
    @pytest.fixture
    def port(self) -> MagicMock:
        return MagicMock(spec=BaseRoleRegistry)

    def test_grant_and_revoke_call_port_in_order(self, port: MagicMock) -> None:
        hierarchy = HierarchyService.create(port)
        g0, alice, bob = (PrincipalId.generate() for _ in range(3))
        hierarchy.bootstrap(g0)
        hierarchy.grant(g0, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)
        port.reset_mock()

        hierarchy.revoke(g0, alice)

        assert port.mock_calls == [
            call.role_admin_changed(USER, MANAGER, ROOT_ROLE),
            call.remove_holder(MANAGER, alice, g0),
        ]

    def test_rejections_never_reach_port(self, port: MagicMock) -> None:
        hierarchy = HierarchyService.create(port)
        g0, alice = PrincipalId.generate(), PrincipalId.generate()
        hierarchy.bootstrap(g0)
        port.reset_mock()

        with pytest.raises(UnknownParent):
            hierarchy.grant(g0, USER, alice, MANAGER)
        with pytest.raises(InvalidPrincipal):
            hierarchy.grant(g0, MANAGER, NULL_PRINCIPAL)
        with pytest.raises(RootRequired):
            hierarchy.revoke(g0, g0)

        assert port.mock_calls == []


class TestNullCaller:
    def test_grant_rejects_null_caller_even_for_new_role(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()
        before = _snapshot(hierarchy, alice)
        logged = len(registry.events())

        with pytest.raises(InvalidPrincipal) as exc_info:
            hierarchy.grant(NULL_PRINCIPAL, MANAGER, alice)

        assert exc_info.value.principal == NULL_PRINCIPAL
        assert _snapshot(hierarchy, alice) == before
        assert len(registry.events()) == logged

    def test_null_caller_checked_before_assignment(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        with pytest.raises(InvalidPrincipal):
            hierarchy.grant(NULL_PRINCIPAL, MANAGER, root_holder)

    def test_revoke_rejects_null_caller(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        before = _snapshot(hierarchy, root_holder, alice)
        logged = len(registry.events())

        with pytest.raises(InvalidPrincipal):
            hierarchy.revoke(NULL_PRINCIPAL, alice)
        with pytest.raises(InvalidPrincipal):
            hierarchy.revoke(NULL_PRINCIPAL, PrincipalId.generate())

        assert _snapshot(hierarchy, root_holder, alice) == before
        assert len(registry.events()) == logged


class TestGrantResult:
    def test_reports_whether_role_was_introduced(
        self, hierarchy: HierarchyService, root_holder: PrincipalId
    ) -> None:
        assert hierarchy.grant(root_holder, MANAGER, PrincipalId.generate()) is True
        assert hierarchy.grant(root_holder, MANAGER, PrincipalId.generate()) is False


class TestFailingSubscriber:
    def test_revoke_completes_and_registry_agrees(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        alice, bob = PrincipalId.generate(), PrincipalId.generate()
        hierarchy.grant(root_holder, MANAGER, alice)
        hierarchy.grant(alice, USER, bob, MANAGER)

        def explode(event: object) -> None:
            raise RuntimeError("subscriber down")

        registry.subscribe(RoleAdminChanged, explode)
        registry.subscribe(RoleRevoked, explode)

        with caplog.at_level("ERROR", logger="roletree.infrastructure.registry.memory"):
            hierarchy.revoke(root_holder, alice)

        assert not hierarchy.has_role(alice)
        assert not registry.has_role(MANAGER, alice)
        assert hierarchy.role_admin(USER) == ROOT_ROLE
        assert [type(e) for e in registry.events()[-2:]] == [RoleAdminChanged, RoleRevoked]
        assert "subscriber down" in caplog.text

    def test_grant_completes(
        self,
        hierarchy: HierarchyService,
        registry: InMemoryRoleRegistry,
        root_holder: PrincipalId,
    ) -> None:
        alice = PrincipalId.generate()

        def explode(event: object) -> None:
            raise RuntimeError("subscriber down")

        registry.subscribe(RoleIntroduced, explode)

        hierarchy.grant(root_holder, MANAGER, alice)

        assert hierarchy.role_of(alice) == MANAGER
        assert registry.has_role(MANAGER, alice)
