from abc import ABC, abstractmethod
from typing import Any

class BaseDatabaseDriver(ABC):
    """Connection lifecycle shared by storage drivers."""

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def disconnect(self):
        pass

    @abstractmethod
    def get_client(self) -> Any:
        """Return the client that can open sessions."""
