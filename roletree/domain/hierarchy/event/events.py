"""Domain events raised to the base role registry."""

from roletree.domain.shared.event import Event


class RoleIntroduced(Event):
    """Emitted when a role is first added to the hierarchy."""

    role: str
    admin_role: str
    sender: str


class RoleGranted(Event):
    """Emitted when a principal is assigned a role."""

    role: str
    principal: str
    sender: str


class RoleRevoked(Event):
    """Emitted when a principal's role is removed."""

    role: str
    principal: str
    sender: str


class RoleAdminChanged(Event):
    """Emitted once per child role lifted during re-parenting."""

    role: str
    previous_admin_role: str
    new_admin_role: str
