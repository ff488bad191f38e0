"""HierarchyService: the only mutator of the role hierarchy."""

import logging
from contextlib import AbstractContextManager
from dataclasses import field
from threading import RLock

from roletree.domain.hierarchy.error import AlreadyAssigned, InvalidPrincipal, RootRequired
from roletree.domain.hierarchy.model.assignment import AssignmentTable
from roletree.domain.hierarchy.model.tree import DEFAULT_MAX_DEPTH, RoleTree
from roletree.domain.hierarchy.model.value import ROOT_ROLE, PrincipalId, RoleId
from roletree.domain.hierarchy.port.registry import BaseRoleRegistry
from roletree.domain.hierarchy.service.authorization import AuthorizationChecker
from roletree.domain.shared.error import InvalidStateError
from roletree.domain.shared.service import Service

logger = logging.getLogger(__name__)


class HierarchyService(Service):
    """Grants and revokes roles, keeping the tree and assignments consistent.

    Every mutation validates all of its preconditions before touching state,
    so a rejected call leaves the tree, the assignments and the registry
    exactly as they were. A single re-entrant lock serialises mutations and
    reads so that queries only ever observe committed state.
    """

    _tree: RoleTree
    _assignments: AssignmentTable
    _checker: AuthorizationChecker
    _registry: BaseRoleRegistry
    _lock: AbstractContextManager = field(default_factory=RLock, repr=False)

    @classmethod
    def create(
        cls,
        registry: BaseRoleRegistry,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> "HierarchyService":
        """Build a service over a fresh tree holding only the root role."""
        tree = RoleTree(max_depth=max_depth)
        assignments = AssignmentTable()
        return cls(
            _tree=tree,
            _assignments=assignments,
            _checker=AuthorizationChecker(_tree=tree, _assignments=assignments),
            _registry=registry,
        )

    # --- Transitions ---

    def bootstrap(self, principal: PrincipalId) -> None:
        """Seat the first root holder.

        This is the root's birth: the only path to the root role that does not
        go through an existing root holder.
        """
        with self._lock:
            if principal.is_null:
                raise InvalidPrincipal(principal)
            if self._assignments.holder_count(ROOT_ROLE):
                raise InvalidStateError(
                    "Root role already has a holder", code="already_bootstrapped"
                )
            if self._assignments.has_role(principal):
                raise AlreadyAssigned(principal, self._assignments.role_of(principal))

            self._assignments.assign(principal, ROOT_ROLE)
            logger.info("Bootstrapped root holder: principal=%s", principal)
            self._registry.add_holder(ROOT_ROLE, principal, principal)

    def grant(
        self,
        caller: PrincipalId,
        role: RoleId,
        principal: PrincipalId,
        parent: RoleId | None = None,
    ) -> bool:
        """Assign ``role`` to ``principal`` on behalf of ``caller``.

        The first grant naming a role introduces it under ``parent`` (the root
        when omitted) without checking the caller. Later grants require the
        caller to act as the role's admin. A supplied parent is ignored for
        roles that already exist.

        Returns True when the grant introduced ``role``.

        Raises:
            InvalidPrincipal: If ``caller`` or ``principal`` is the null identity.
            AlreadyAssigned: If ``principal`` already holds a role.
            UnknownParent: If ``parent`` is not in the hierarchy.
            DepthLimitExceeded: If the new role would sit too deep.
            Unauthorized: If ``caller`` cannot act as the role's admin.
        """
        with self._lock:
            if caller.is_null:
                raise InvalidPrincipal(caller)
            if principal.is_null:
                raise InvalidPrincipal(principal)
            if self._assignments.has_role(principal):
                raise AlreadyAssigned(principal, self._assignments.role_of(principal))

            born = not self._tree.is_known(role)
            if born:
                admin = parent if parent is not None else ROOT_ROLE
                self._tree.introduce(role, admin)
                logger.info("Introduced role=%s admin=%s by principal=%s", role, admin, caller)
            else:
                admin = self._tree.parent_of(role)
                if parent is not None and parent != admin:
                    logger.debug(
                        "Ignoring parent=%s for existing role=%s (admin=%s)", parent, role, admin
                    )
                self._checker.require_at_least(caller, admin)

            self._assignments.assign(principal, role)
            logger.info("Granted %s by principal=%s", _subject(principal, role), caller)

            if born:
                self._registry.role_introduced(role, admin, caller)
            self._registry.add_holder(role, principal, caller)
            return born

    def revoke(self, caller: PrincipalId, principal: PrincipalId) -> None:
        """Remove ``principal``'s role on behalf of ``caller``.

        When the principal was the role's last holder, every child of the role
        is lifted to the role's own admin. The emptied role stays listed.

        Raises:
            InvalidPrincipal: If ``caller`` is the null identity.
            NoRoleAssigned: If ``principal`` holds no role.
            Unauthorized: If ``caller`` cannot act as the role's admin.
            RootRequired: If ``principal`` is the last root holder.
        """
        with self._lock:
            if caller.is_null:
                raise InvalidPrincipal(caller)
            role = self._assignments.role_of(principal)
            admin = self._tree.parent_of(role)
            self._checker.require_at_least(caller, admin)
            if role == ROOT_ROLE and self._assignments.holder_count(ROOT_ROLE) == 1:
                raise RootRequired(principal)

            self._assignments.unassign(principal)
            logger.info("Revoked %s by principal=%s", _subject(principal, role), caller)

            lifted: list[RoleId] = []
            if not self._assignments.holder_count(role):
                for child in self._tree.children_of(role):
                    self._tree.reparent(child, admin)
                    lifted.append(child)
                    logger.info("Re-parented role=%s from admin=%s to admin=%s", child, role, admin)

            for child in lifted:
                self._registry.role_admin_changed(child, role, admin)
            self._registry.remove_holder(role, principal, caller)

    # --- Queries ---

    def list_roles(self) -> list[RoleId]:
        with self._lock:
            return self._tree.list_roles()

    def role_admin(self, role: RoleId) -> RoleId:
        with self._lock:
            return self._tree.parent_of(role)

    def role_of(self, principal: PrincipalId) -> RoleId:
        with self._lock:
            return self._assignments.role_of(principal)

    def has_role(self, principal: PrincipalId) -> bool:
        with self._lock:
            return self._assignments.has_role(principal)

    def can_act_as(self, principal: PrincipalId, role: RoleId) -> bool:
        with self._lock:
            return self._checker.can_act_as(principal, role)

    def require_at_least(self, principal: PrincipalId, role: RoleId) -> None:
        """Raise Unauthorized unless ``principal`` can act as ``role``."""
        with self._lock:
            self._checker.require_at_least(principal, role)

    def holder_count(self, role: RoleId) -> int:
        with self._lock:
            return self._assignments.holder_count(role)

    def holders_of(self, role: RoleId) -> list[PrincipalId]:
        with self._lock:
            return self._assignments.holders_of(role)

    def children_of(self, role: RoleId) -> list[RoleId]:
        with self._lock:
            return self._tree.children_of(role)


def _subject(principal: PrincipalId, role: RoleId) -> str:
    return f"principal={principal} role={role}"
