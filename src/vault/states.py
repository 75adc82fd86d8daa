"""
Cache check outcomes for the operation pipeline.

Exactly one of these is produced per call before any network I/O:
- CompleteFromCache: everything was cached, the result is ready
- PartialFromCache: some batch items were cached, the rest must be fetched
- NothingFromCache: nothing was cached, the full request must be fetched
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

Req = TypeVar("Req")
Res = TypeVar("Res")


@dataclass(frozen=True)
class CompleteFromCache(Generic[Req, Res]):
    original_request: Req
    result: Res


@dataclass(frozen=True)
class PartialFromCache(Generic[Req, Res]):
    original_request: Req
    cached_items: list[Any] = field(default_factory=list)
    uncached_request: Req | None = None


@dataclass(frozen=True)
class NothingFromCache(Generic[Req, Res]):
    original_request: Req
    uncached_request: Req | None = None

    def __post_init__(self):
        if self.uncached_request is None:
            object.__setattr__(self, "uncached_request", self.original_request)


CacheCheckResult = Union[
    CompleteFromCache[Req, Res],
    PartialFromCache[Req, Res],
    NothingFromCache[Req, Res],
]

__all__ = [
    "CompleteFromCache",
    "PartialFromCache",
    "NothingFromCache",
    "CacheCheckResult",
]
