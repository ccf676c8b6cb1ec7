"""
Consul-backed instance directory.

Records live under "{kv_root}/{internal_vnf_id}". The python-consul client is
blocking, so every call runs in a worker thread.
"""

import asyncio
import logging
from typing import List, Optional

import consul

from .base import BaseInstanceDirectory, strip_prefix
from ...errors import DirectoryError

logger = logging.getLogger(__name__)


class ConsulInstanceDirectory(BaseInstanceDirectory):
    """Instance directory stored in the Consul KV store."""

    def __init__(
        self,
        host: str,
        port: int = 8500,
        scheme: str = "http",
        token: Optional[str] = None,
        kv_root: str = "vnf_instances",
        consul_client: Optional[consul.Consul] = None,
    ):
        """
        Initialize the Consul connection.

        Args:
            host: Consul agent host
            port: Consul HTTP port
            scheme: "http" or "https"
            token: ACL token, if the agent requires one
            kv_root: Path prefix for all instance records
            consul_client: Pre-built client (tests)
        """
        self.kv_root = kv_root.strip("/")
        self._client = consul_client or consul.Consul(
            host=host,
            port=port,
            scheme=scheme,
            token=token or None,
        )
        logger.info(f"[DIRECTORY] Consul directory at {scheme}://{host}:{port}/{self.kv_root}")

    def _full_key(self, key: str) -> str:
        return f"{self.kv_root}/{key}" if self.kv_root else key

    async def create_entry(self, key: str, value: str) -> None:
        full_key = self._full_key(key)
        try:
            stored = await asyncio.to_thread(self._client.kv.put, full_key, value)
        except (consul.ConsulException, OSError) as e:
            raise DirectoryError(str(e), operation="create directory entry", key=key) from e

        if not stored:
            raise DirectoryError("Consul rejected the write", operation="create directory entry", key=key)
        logger.debug(f"[DIRECTORY] Stored {full_key}")

    async def read_entry(self, key: str) -> Optional[str]:
        full_key = self._full_key(key)
        try:
            _, data = await asyncio.to_thread(self._client.kv.get, full_key)
        except (consul.ConsulException, OSError) as e:
            raise DirectoryError(str(e), operation="read directory entry", key=key) from e

        if data is None:
            return None

        raw = data.get("Value")
        if raw is None:
            return ""
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    async def delete_entry(self, key: str) -> None:
        full_key = self._full_key(key)
        try:
            await asyncio.to_thread(self._client.kv.delete, full_key)
        except (consul.ConsulException, OSError) as e:
            raise DirectoryError(str(e), operation="delete directory entry", key=key) from e
        logger.debug(f"[DIRECTORY] Deleted {full_key}")

    async def read_all(self, prefix: str) -> List[str]:
        root = f"{self.kv_root}/" if self.kv_root else ""
        scan = f"{root}{prefix}"
        try:
            _, data = await asyncio.to_thread(self._client.kv.get, scan, recurse=True)
        except (consul.ConsulException, OSError) as e:
            raise DirectoryError(str(e), operation="list directory entries", key=prefix) from e

        keys = [item["Key"][len(root):] for item in (data or []) if item.get("Key", "").startswith(root)]
        return strip_prefix(keys, prefix)

    async def check_health(self) -> None:
        try:
            leader = await asyncio.to_thread(self._client.status.leader)
        except (consul.ConsulException, OSError) as e:
            raise DirectoryError(
                f"Cannot talk to Datastore. Check if it is running/reachable: {e}",
                operation="check directory",
            ) from e

        if not leader:
            raise DirectoryError("Consul cluster has no leader", operation="check directory")
