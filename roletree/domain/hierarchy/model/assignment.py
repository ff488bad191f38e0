"""AssignmentTable: at most one role per principal, with holder counts."""

from collections import Counter

from roletree.domain.hierarchy.error import AlreadyAssigned, InvalidPrincipal, NoRoleAssigned
from roletree.domain.hierarchy.model.value import PrincipalId, RoleId


class AssignmentTable:
    """Maps each principal to its single role and counts holders per role."""

    def __init__(self) -> None:
        self._roles: dict[PrincipalId, RoleId] = {}
        self._holders: Counter[RoleId] = Counter()

    def has_role(self, principal: PrincipalId) -> bool:
        return principal in self._roles

    def role_of(self, principal: PrincipalId) -> RoleId:
        try:
            return self._roles[principal]
        except KeyError:
            raise NoRoleAssigned(principal) from None

    def holder_count(self, role: RoleId) -> int:
        return self._holders[role]

    def holders_of(self, role: RoleId) -> list[PrincipalId]:
        return [p for p, r in self._roles.items() if r == role]

    def assign(self, principal: PrincipalId, role: RoleId) -> None:
        if principal.is_null:
            raise InvalidPrincipal(principal)
        current = self._roles.get(principal)
        if current is not None:
            raise AlreadyAssigned(principal, current)
        self._roles[principal] = role
        self._holders[role] += 1

    def unassign(self, principal: PrincipalId) -> RoleId:
        """Remove the principal's assignment and return the role it held."""
        role = self.role_of(principal)
        del self._roles[principal]
        self._holders[role] -= 1
        if not self._holders[role]:
            del self._holders[role]
        return role
