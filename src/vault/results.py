"""Operation outcomes returned across the public API."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation completed; ``payload`` is the typed response."""

    payload: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Error:
    """Operation failed; ``message`` describes why."""

    message: str

    @property
    def is_success(self) -> bool:
        return False


RepoResult = Union[Success[T], Error]

__all__ = ["Success", "Error", "RepoResult"]
