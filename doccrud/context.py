"""
Continuation-local context store: values set inside one asyncio task are visible to
everything awaited from it (and to tasks it spawns), never to unrelated tasks.
"""

from contextvars import ContextVar
from typing import Any, Dict, Optional
from motor.motor_asyncio import AsyncIOMotorClientSession
from doccrud.config import settings


class ContextStore:
    """Keyed store with one ContextVar per key."""

    def __init__(self, *keys: str):
        self._slots: Dict[str, ContextVar] = {key: ContextVar(f"doccrud_{key}", default=None) for key in keys}

    def _slot(self, key: str) -> ContextVar:
        slot = self._slots.get(key)
        if slot is None:
            # setdefault keeps the first var if two threads race on a new key
            slot = self._slots.setdefault(key, ContextVar(f"doccrud_{key}", default=None))
        return slot

    def get(self, key: str) -> Any:
        return self._slot(key).get()

    def set(self, key: str, value: Any) -> None:
        self._slot(key).set(value)


# Process-wide store shared by the transaction service and every repository
context_store = ContextStore(settings.SESSION_CONTEXT_KEY)


class SessionContext:
    """Single-slot accessor for the active Mongo session."""

    def __init__(self, store: ContextStore = context_store, key: Optional[str] = None):
        self.store = store
        self.key = key or settings.SESSION_CONTEXT_KEY

    def get(self) -> Optional[AsyncIOMotorClientSession]:
        return self.store.get(self.key)

    def set(self, session: Optional[AsyncIOMotorClientSession]) -> None:
        self.store.set(self.key, session)


session_context = SessionContext()
