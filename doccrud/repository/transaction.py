"""
Transaction service: runs a unit of work inside a MongoDB transaction and publishes the
session to the context store so every repository call underneath picks it up.
"""

import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from doccrud.context import SessionContext, session_context
from doccrud.logging.logger import TRANSACTION_LOGGER, get_logger

R = TypeVar("R")
UnitOfWork = Callable[[AsyncIOMotorClientSession], Awaitable[R]]


class TransactionService:
    """
    Owns the session lifecycle for the outermost ``run``.

    Nested ``run`` calls reuse the active session and run their unit inline; only the
    invocation that opened the session commits, aborts, ends it and clears the context.
    """

    def __init__(self, client: AsyncIOMotorClient, context: Optional[SessionContext] = None):
        self.client = client
        self.context = context or session_context

    def get_client(self) -> AsyncIOMotorClient:
        return self.client

    async def run(self, unit_of_work: UnitOfWork) -> R:
        session = self.context.get()
        if session is not None:
            return await unit_of_work(session)

        session = await self.client.start_session()
        self.context.set(session)
        try:
            # with_transaction commits on success and aborts when the unit raises
            return await session.with_transaction(unit_of_work)
        except Exception as e:
            # Bound here so the record carries the current request trace id
            get_logger(TRANSACTION_LOGGER).opt(exception=e).error(f"Transaction aborted: {e!r}")
            raise
        finally:
            try:
                await session.end_session()
            finally:
                self.context.set(None)

    def transactional(self, func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        """Decorator form of ``run`` for coroutine functions that don't need the session."""

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            async def unit(_session: AsyncIOMotorClientSession) -> R:
                return await func(*args, **kwargs)

            return await self.run(unit)

        return wrapper
