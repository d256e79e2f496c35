from typing import Dict, Optional

from lodgetix.service.reservation.app.interface import IClientStorage


class InMemoryClientStorageImpl(IClientStorage):
    """Process-local storage for tests and single-process runs"""

    def __init__(self) -> None:
        self.items: Dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
