"""
Client Storage Interface

String key/value store scoped to one browser client (the server-side
stand-in for the browser's local storage).
"""

from abc import ABC, abstractmethod
from typing import Optional


class IClientStorage(ABC):
    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Raises:
            StorageUnavailableError: the store cannot be reached
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Raises:
            StorageUnavailableError: the store cannot be reached
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """
        Raises:
            StorageUnavailableError: the store cannot be reached
        """
        pass
