"""Scenario files: scripted grants, revokes and checks replayed against a fresh hierarchy.

A scenario is YAML of the form::

    root: g0                  # principal seated as the first root holder
    max_depth: 8              # optional
    steps:
      - grant: {caller: g0, role: MANAGER, principal: alice}
      - grant: {caller: alice, role: USER, principal: bob, parent: MANAGER}
      - check: {principal: bob, role: MANAGER, expect: false}
      - revoke: {caller: g0, principal: alice}
      - admin: {role: USER, expect: ROOT}
      - grant: {caller: bob, role: USER, principal: carol, expect_error: unauthorized}

Principals are names mapped to stable UUIDs (or literal UUIDs; ``NULL`` is the
null identity). Roles are names hashed to ids (or literal ``0x`` ids; ``ROOT``
is the root role).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from uuid import NAMESPACE_DNS, UUID, uuid5

import yaml
from dishka import Container
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from roletree.application.di import create_container
from roletree.config import Config, HierarchyConfig
from roletree.domain.hierarchy.command.grant_role import GrantRole, GrantRoleHandler
from roletree.domain.hierarchy.command.revoke_role import RevokeRole, RevokeRoleHandler
from roletree.domain.hierarchy.model.value import (
    NULL_PRINCIPAL,
    ROOT_ROLE,
    PrincipalId,
    RoleId,
)
from roletree.domain.hierarchy.query.can_behave_like import CanBehaveLike, CanBehaveLikeHandler
from roletree.domain.hierarchy.query.get_role_admin import GetRoleAdmin, GetRoleAdminHandler
from roletree.domain.hierarchy.service.hierarchy import HierarchyService
from roletree.domain.shared.error import DomainError, ValidationError
from roletree.domain.shared.model.value import ValueObject

logger = logging.getLogger(__name__)

PRINCIPAL_NAMESPACE = uuid5(NAMESPACE_DNS, "principals.roletree")


def principal_id(name: str) -> PrincipalId:
    """Resolve a scenario principal name to a PrincipalId."""
    if name == "NULL":
        return NULL_PRINCIPAL
    try:
        return PrincipalId(UUID(name))
    except ValueError:
        return PrincipalId(uuid5(PRINCIPAL_NAMESPACE, name))


def role_id(name: str) -> RoleId:
    """Resolve a scenario role name to a RoleId."""
    if name == "ROOT":
        return ROOT_ROLE
    if name.startswith("0x"):
        return RoleId(name)
    return RoleId.from_name(name)


def _check_role(name: str | None) -> str | None:
    if name is not None:
        try:
            role_id(name)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid role {name!r}: {e.errors()[0]['msg']}") from None
    return name


# =============================================================================
# Scenario models
# =============================================================================


class GrantStep(ValueObject):
    caller: str
    role: str
    principal: str
    parent: str | None = None
    expect_error: str | None = None

    @field_validator("role", "parent")
    @classmethod
    def valid_role(cls, v: str | None) -> str | None:
        return _check_role(v)


class RevokeStep(ValueObject):
    caller: str
    principal: str
    expect_error: str | None = None


class CheckStep(ValueObject):
    principal: str
    role: str
    expect: bool

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str | None) -> str | None:
        return _check_role(v)


class AdminStep(ValueObject):
    role: str
    expect: str

    @field_validator("role", "expect")
    @classmethod
    def valid_role(cls, v: str | None) -> str | None:
        return _check_role(v)


class Step(BaseModel):
    """One scenario step. Exactly one action key must be set."""

    grant: GrantStep | None = None
    revoke: RevokeStep | None = None
    check: CheckStep | None = None
    admin: AdminStep | None = None

    @model_validator(mode="after")
    def exactly_one_action(self) -> "Step":
        actions = [k for k in ("grant", "revoke", "check", "admin") if getattr(self, k)]
        if len(actions) != 1:
            raise ValueError(f"Step must have exactly one action, got {actions or 'none'}")
        return self


class Scenario(BaseModel):
    root: str
    max_depth: int | None = Field(default=None, ge=1)
    steps: list[Step] = []

    @classmethod
    def load(cls, path: Path) -> "Scenario":
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValidationError(f"Scenario {path} must be a mapping", field="scenario")
        return cls.model_validate(data)


# =============================================================================
# Runner
# =============================================================================


@dataclass(frozen=True)
class StepOutcome:
    """What happened when a step ran, and whether it matched the expectation."""

    index: int
    kind: str
    description: str
    passed: bool
    detail: str


class ScenarioRunner:
    """Replays a Scenario through the command and query handlers."""

    def __init__(self, scenario: Scenario, container: Container | None = None) -> None:
        self._scenario = scenario
        if container is None:
            overrides: dict[str, Any] = {"root_holder": principal_id(scenario.root).root}
            if scenario.max_depth is not None:
                overrides["max_depth"] = scenario.max_depth
            container = create_container(Config(hierarchy=HierarchyConfig(**overrides)))
        self._container = container
        self._names: dict[str, str] = {str(ROOT_ROLE): "ROOT"}

    @property
    def hierarchy(self) -> HierarchyService:
        return self._container.get(HierarchyService)

    def role_name(self, role: str) -> str:
        return self._names.get(role, role)

    async def run(self) -> list[StepOutcome]:
        outcomes = []
        for index, step in enumerate(self._scenario.steps, 1):
            outcome = await self._run_step(index, step)
            logger.debug("Step %d (%s): %s", index, outcome.kind, outcome.detail)
            outcomes.append(outcome)
        return outcomes

    def tree(self) -> tuple[str, dict[str, list[str]], dict[str, int]]:
        """Snapshot the hierarchy as (root, children-by-role, holders-by-role), by name."""
        hierarchy = self.hierarchy
        children: dict[str, list[str]] = {}
        holders: dict[str, int] = {}
        for role in hierarchy.list_roles():
            name = self.role_name(str(role))
            holders[name] = hierarchy.holder_count(role)
            children[name] = [self.role_name(str(c)) for c in hierarchy.children_of(role)]
        return "ROOT", children, holders

    async def _run_step(self, index: int, step: Step) -> StepOutcome:
        if step.grant is not None:
            return await self._grant(index, step.grant)
        if step.revoke is not None:
            return await self._revoke(index, step.revoke)
        if step.check is not None:
            return await self._check(index, step.check)
        if step.admin is not None:
            return await self._admin(index, step.admin)
        raise ValidationError(f"Step {index} has no action", field="steps")

    def _remember(self, name: str) -> RoleId:
        role = role_id(name)
        self._names.setdefault(str(role), name)
        return role

    async def _grant(self, index: int, step: GrantStep) -> StepOutcome:
        role = self._remember(step.role)
        parent = self._remember(step.parent) if step.parent is not None else None
        description = f"{step.caller} grants {step.role} to {step.principal}"
        cmd = GrantRole(
            role=str(role),
            principal=str(principal_id(step.principal)),
            parent=str(parent) if parent is not None else None,
        )
        with self._container(context={PrincipalId: principal_id(step.caller)}) as uow:
            handler = uow.get(GrantRoleHandler)
            return await self._expecting(
                index, "grant", description, step.expect_error, handler.run(cmd)
            )

    async def _revoke(self, index: int, step: RevokeStep) -> StepOutcome:
        description = f"{step.caller} revokes {step.principal}"
        cmd = RevokeRole(principal=str(principal_id(step.principal)))
        with self._container(context={PrincipalId: principal_id(step.caller)}) as uow:
            handler = uow.get(RevokeRoleHandler)
            return await self._expecting(
                index, "revoke", description, step.expect_error, handler.run(cmd)
            )

    async def _check(self, index: int, step: CheckStep) -> StepOutcome:
        role = self._remember(step.role)
        with self._container() as uow:
            handler = uow.get(CanBehaveLikeHandler)
            result = await handler.run(
                CanBehaveLike(principal=str(principal_id(step.principal)), role=str(role))
            )
        return StepOutcome(
            index=index,
            kind="check",
            description=f"{step.principal} can act as {step.role}",
            passed=result.allowed == step.expect,
            detail=f"allowed={result.allowed} expected={step.expect}",
        )

    async def _admin(self, index: int, step: AdminStep) -> StepOutcome:
        role = self._remember(step.role)
        expected = role_id(step.expect)
        with self._container() as uow:
            handler = uow.get(GetRoleAdminHandler)
            result = await handler.run(GetRoleAdmin(role=str(role)))
        actual = self.role_name(result.admin_role)
        return StepOutcome(
            index=index,
            kind="admin",
            description=f"admin of {step.role}",
            passed=result.admin_role == str(expected),
            detail=f"admin={actual} expected={step.expect}",
        )

    async def _expecting(
        self,
        index: int,
        kind: str,
        description: str,
        expect_error: str | None,
        pending: Any,
    ) -> StepOutcome:
        """Await a command and compare its outcome with the expected error code."""
        try:
            await pending
        except DomainError as e:
            return StepOutcome(
                index=index,
                kind=kind,
                description=description,
                passed=e.code == expect_error,
                detail=f"rejected: {e.code}: {e.message}",
            )
        return StepOutcome(
            index=index,
            kind=kind,
            description=description,
            passed=expect_error is None,
            detail="ok" if expect_error is None else f"expected error {expect_error}",
        )
