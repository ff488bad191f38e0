"""Query and QueryHandler base classes with authorization gate."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel

from roletree.domain.shared.authorization.enforce import wrap_run_with_gate

if TYPE_CHECKING:
    from roletree.domain.shared.authorization.gate import Gate


class Query(BaseModel): ...


class Result(BaseModel): ...


Q = TypeVar("Q", bound=Query)
R = TypeVar("R", bound=Result)


@dataclass_transform()
class _QueryHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and __auth__ gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = wrap_run_with_gate(original_run)

        return cls


class QueryHandler(Generic[Q, R], metaclass=_QueryHandlerMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses.

    Read-only queries in this package are public:
        class MyHandler(QueryHandler[MyQuery, MyResult]):
            __auth__ = public()
            hierarchy: HierarchyService
    """

    __auth__: ClassVar[Gate]

    @abstractmethod
    async def run(self, query: Q) -> R: ...
