"""
Instance Directory Factory

Creates the instance directory selected by DIRECTORY_BACKEND.
"""

import logging
from enum import Enum

from .base import BaseInstanceDirectory
from ...errors import ConfigurationError

logger = logging.getLogger(__name__)


class DirectoryBackend(str, Enum):
    """
    Supported instance directory backends.

    Attributes:
        CONSUL: Consul KV store (production)
        MEMORY: Process memory (local development and tests)
    """

    CONSUL = "consul"
    MEMORY = "memory"

    @classmethod
    def from_string(cls, value: str) -> "DirectoryBackend":
        """
        Convert a string to DirectoryBackend enum.

        Raises:
            ValueError: If value is not a valid backend
        """
        value_lower = value.lower().strip()
        for backend in cls:
            if backend.value == value_lower:
                return backend
        valid_backends = ", ".join([b.value for b in cls])
        raise ValueError(
            f"Invalid directory backend: '{value}'. Valid backends: {valid_backends}"
        )

    def __str__(self) -> str:
        return self.value


def create_directory(settings) -> BaseInstanceDirectory:
    """
    Create the instance directory for the configured backend.

    Args:
        settings: Settings instance

    Returns:
        Directory implementing BaseInstanceDirectory

    Raises:
        ConfigurationError: If the backend is unknown or not configured
    """
    try:
        backend = DirectoryBackend.from_string(settings.directory_backend)
    except ValueError as e:
        raise ConfigurationError(str(e), operation="create directory") from e

    if backend == DirectoryBackend.CONSUL:
        if not settings.consul_address:
            raise ConfigurationError(
                "DATABASE_IP or CONSUL_HOST must be set for the consul backend",
                operation="create directory",
            )
        from .consul import ConsulInstanceDirectory
        directory = ConsulInstanceDirectory(
            host=settings.consul_address,
            port=settings.consul_port,
            scheme=settings.consul_scheme,
            token=settings.consul_token,
            kv_root=settings.consul_kv_root,
        )
        logger.info("[DIRECTORY] Created Consul directory")
        return directory

    from .memory import MemoryInstanceDirectory
    directory = MemoryInstanceDirectory()
    logger.info("[DIRECTORY] Created in-memory directory")
    return directory
