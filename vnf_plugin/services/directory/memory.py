"""In-process instance directory for local development. Not persistent."""

import logging
from typing import Dict, List, Optional

from .base import BaseInstanceDirectory, strip_prefix

logger = logging.getLogger(__name__)


class MemoryInstanceDirectory(BaseInstanceDirectory):
    """Dictionary-backed directory; contents vanish with the process."""

    def __init__(self):
        self._entries: Dict[str, str] = {}
        logger.warning("[DIRECTORY] Using in-memory directory - records are lost on restart")

    async def create_entry(self, key: str, value: str) -> None:
        self._entries[key] = value

    async def read_entry(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    async def delete_entry(self, key: str) -> None:
        self._entries.pop(key, None)

    async def read_all(self, prefix: str) -> List[str]:
        return strip_prefix(self._entries.keys(), prefix)

    async def check_health(self) -> None:
        return None
