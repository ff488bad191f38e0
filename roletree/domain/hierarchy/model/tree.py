"""RoleTree: parent pointers from each role to its admin."""

from roletree.domain.hierarchy.error import DepthLimitExceeded, UnknownParent
from roletree.domain.hierarchy.model.value import ROOT_ROLE, RoleId
from roletree.domain.shared.error import ConflictError, InvalidStateError

DEFAULT_MAX_DEPTH = 32


class RoleTree:
    """The role hierarchy as a tree of parent pointers.

    Roles enter the tree only through ``introduce``, which requires the parent
    to be known already, and move only through ``reparent``, which points a
    role at an existing node. Together they keep the structure acyclic with a
    single root. Dict insertion order doubles as the role listing order.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self._max_depth = max_depth
        self._parents: dict[RoleId, RoleId] = {ROOT_ROLE: ROOT_ROLE}

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def is_known(self, role: RoleId) -> bool:
        return role in self._parents

    def parent_of(self, role: RoleId) -> RoleId:
        """Return the admin role. Unknown roles are administered by the root."""
        return self._parents.get(role, ROOT_ROLE)

    def list_roles(self) -> list[RoleId]:
        return list(self._parents)

    def children_of(self, role: RoleId) -> list[RoleId]:
        return [r for r, p in self._parents.items() if p == role and r != ROOT_ROLE]

    def ancestors(self, role: RoleId) -> list[RoleId]:
        """Return the chain from ``role`` up to the root, inclusive of both ends."""
        chain = [role]
        current = role
        # A tree of n roles has no path longer than n
        for _ in range(len(self._parents) + 1):
            if current == ROOT_ROLE:
                return chain
            current = self.parent_of(current)
            chain.append(current)
        raise InvalidStateError(f"Cycle detected above role {role}", code="cycle_detected")

    def depth(self, role: RoleId) -> int:
        """Number of edges between ``role`` and the root."""
        return len(self.ancestors(role)) - 1

    def would_exceed_depth(self, parent: RoleId) -> bool:
        """True if a new child of ``parent`` would break the depth bound."""
        return self.depth(parent) + 1 > self._max_depth

    def introduce(self, role: RoleId, parent: RoleId) -> None:
        """Add a new role under an existing parent.

        Raises:
            ConflictError: If the role is already known.
            UnknownParent: If the parent has not been introduced.
            DepthLimitExceeded: If the role would sit deeper than max_depth.
        """
        if self.is_known(role):
            raise ConflictError(f"Role already introduced: role={role}", code="role_exists")
        if not self.is_known(parent):
            raise UnknownParent(role, parent)
        if self.would_exceed_depth(parent):
            raise DepthLimitExceeded(role, parent, self._max_depth)
        self._parents[role] = parent

    def reparent(self, role: RoleId, new_parent: RoleId) -> None:
        """Point an existing role at a new existing parent."""
        if role == ROOT_ROLE:
            raise InvalidStateError("The root role cannot be re-parented", code="root_reparent")
        if not self.is_known(role) or not self.is_known(new_parent):
            raise InvalidStateError(
                f"Cannot re-parent role={role} to parent={new_parent}: unknown role",
                code="unknown_role",
            )
        self._parents[role] = new_parent
