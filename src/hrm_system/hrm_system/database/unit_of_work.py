from __future__ import annotations

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Protocol


class UnitOfWork(Protocol):
    """Anything that can run a block as one atomic transaction."""

    def transaction(self) -> ContextManager[Any]:
        raise NotImplementedError


class NoTransaction:
    """Unit of work that does nothing; for in-memory repositories."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield None
