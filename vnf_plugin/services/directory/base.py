"""
Abstract Base Instance Directory

Defines the key-value contract used to record which cluster resources belong
to which VNF instance. Keys are internal VNF ids
("{cloud_region_id}-{namespace}-{external_vnf_id}"), so listing one
region/namespace pair is a prefix scan.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ...utils.resource_naming import NAME_SEPARATOR


class BaseInstanceDirectory(ABC):
    """
    Abstract base class for instance directory backends.

    A missing key is not an error: read_entry returns None and callers decide
    what absence means.
    """

    @abstractmethod
    async def create_entry(self, key: str, value: str) -> None:
        """
        Store value under key, replacing any previous value.

        Raises:
            DirectoryError: If the store rejects or fails the write
        """
        pass

    @abstractmethod
    async def read_entry(self, key: str) -> Optional[str]:
        """
        Get the value stored under key.

        Returns:
            The value, or None when the key does not exist

        Raises:
            DirectoryError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def delete_entry(self, key: str) -> None:
        """
        Remove key. Removing a missing key is not an error.

        Raises:
            DirectoryError: If the store fails the delete
        """
        pass

    @abstractmethod
    async def read_all(self, prefix: str) -> List[str]:
        """
        List identifiers stored under a prefix.

        Only keys of the form "{prefix}-{identifier}" match; the prefix and
        separator are stripped from the returned identifiers.

        Example:
            keys "region1-default-abc", "region1-other-xyz"
            read_all("region1-default") -> ["abc"]

        Raises:
            DirectoryError: If the store cannot be listed
        """
        pass

    @abstractmethod
    async def check_health(self) -> None:
        """
        Raises:
            DirectoryError: If the store is unreachable
        """
        pass


def strip_prefix(keys: Iterable[str], prefix: str) -> List[str]:
    """Identifiers of keys under "{prefix}-", prefix and separator removed, sorted."""
    if not prefix:
        return sorted(k for k in keys if k)

    scan = f"{prefix}{NAME_SEPARATOR}"
    return sorted(
        key[len(scan):]
        for key in keys
        if key.startswith(scan) and len(key) > len(scan)
    )
