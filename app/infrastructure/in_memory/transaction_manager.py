from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """In-memory repos apply writes immediately; there is nothing to commit."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
