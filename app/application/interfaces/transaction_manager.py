from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """Unit of work around the writes of a single use case."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
