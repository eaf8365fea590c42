"""
Typed outcomes returned by UserService.

Expected failures (missing record, duplicate email) are values, not
exceptions, so callers branch with isinstance() instead of catching.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    resource: str
    key: str

    @property
    def message(self) -> str:
        return f"{self.resource} with {self.key} not found"


@dataclass(frozen=True)
class Conflict:
    field: str
    value: str

    @property
    def message(self) -> str:
        return f"A user with this {self.field} already exists."


Outcome = Success[T] | NotFound | Conflict
