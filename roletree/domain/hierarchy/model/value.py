"""Value objects for the hierarchy domain."""

import hashlib
from uuid import UUID, uuid4

from pydantic import field_validator

from roletree.domain.shared.model.value import RootValueObject

ROLE_ID_BYTES = 32


class RoleId(RootValueObject[bytes]):
    """A 256-bit role identifier.

    Roles are usually derived from a human-readable name with ``from_name``;
    the all-zero identifier is reserved for the root role.
    """

    @field_validator("root", mode="before")
    @classmethod
    def coerce_hex(cls, v: object) -> object:
        if isinstance(v, str):
            text = v[2:] if v.startswith("0x") else v
            try:
                return bytes.fromhex(text)
            except ValueError as e:
                raise ValueError(f"Invalid role id: {v}") from e
        return v

    @field_validator("root")
    @classmethod
    def validate_width(cls, v: bytes) -> bytes:
        if len(v) != ROLE_ID_BYTES:
            raise ValueError(f"Role id must be {ROLE_ID_BYTES} bytes, got {len(v)}")
        return v

    @classmethod
    def from_name(cls, name: str) -> "RoleId":
        """Derive a role id as SHA3-256 of the UTF-8 name."""
        return cls(hashlib.sha3_256(name.encode("utf-8")).digest())

    @property
    def hex(self) -> str:
        return "0x" + self.root.hex()

    def __str__(self) -> str:
        return self.hex

    def __hash__(self) -> int:
        return hash(self.root)


ROOT_ROLE = RoleId(bytes(ROLE_ID_BYTES))
"""The unique tree root. Self-administered; can act as any role."""


class PrincipalId(RootValueObject[UUID]):
    """Account identifier of a principal that may hold at most one role."""

    @classmethod
    def generate(cls) -> "PrincipalId":
        return cls(uuid4())

    @property
    def is_null(self) -> bool:
        return self.root.int == 0

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


NULL_PRINCIPAL = PrincipalId(UUID(int=0))
"""The null identity. Never a valid principal."""
