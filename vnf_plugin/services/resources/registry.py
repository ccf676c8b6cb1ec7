"""
Resource Client Registry

Holds one client per resource kind. Populated once at startup and read-only
afterwards; the instance manager receives it through its constructor.

Kinds resolve to built-in clients first, then to client classes published by
other installed distributions under the "vnf_plugin.resource_clients" entry
point group:

    [project.entry-points."vnf_plugin.resource_clients"]
    configmap = "my_package.configmap:ConfigMapClient"
"""

import logging
from importlib.metadata import entry_points
from typing import Dict, Iterable, List, Optional, Type

from .base import BaseResourceClient
from .deployment import DeploymentClient
from .service import ServiceClient
from ...errors import ConfigurationError, NotRegisteredError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "vnf_plugin.resource_clients"

# Statically linked clients
BUILTIN_RESOURCE_CLIENTS: Dict[str, Type[BaseResourceClient]] = {
    "deployment": DeploymentClient,
    "service": ServiceClient,
}


class ResourceClientRegistry:
    """
    Registry of resource clients keyed by kind.

    Lookup of an unknown kind raises NotRegisteredError, so a CSAR naming an
    unsupported kind fails before any cluster call is made for it.
    """

    def __init__(self):
        self._clients: Dict[str, BaseResourceClient] = {}

    def register(self, kind: str, resource_client: BaseResourceClient) -> None:
        """Register a client for a kind."""
        if not isinstance(resource_client, BaseResourceClient):
            raise TypeError(f"Resource client for '{kind}' must implement BaseResourceClient")

        kind = kind.lower()
        if kind in self._clients:
            logger.warning(f"Overwriting existing resource client: {kind}")
        self._clients[kind] = resource_client
        logger.info(f"Registered resource client: {kind} ({type(resource_client).__name__})")

    def lookup(self, kind: str) -> BaseResourceClient:
        """
        Get the client for a kind.

        Raises:
            NotRegisteredError: If no client is registered for kind
        """
        resource_client = self._clients.get(kind.lower())
        if resource_client is None:
            raise NotRegisteredError(kind, available=self.kinds())
        return resource_client

    def kinds(self) -> List[str]:
        """Registered kinds in registration order."""
        return list(self._clients.keys())

    def __contains__(self, kind: str) -> bool:
        return kind.lower() in self._clients

    def __len__(self) -> int:
        return len(self._clients)


def _find_entry_point_client(kind: str) -> Optional[Type[BaseResourceClient]]:
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name.lower() == kind:
            return entry_point.load()
    return None


def load_resource_client(kind: str) -> BaseResourceClient:
    """
    Instantiate the client for a kind.

    Raises:
        ConfigurationError: If no client exists for kind or it cannot be loaded
    """
    kind = kind.lower()
    client_class = BUILTIN_RESOURCE_CLIENTS.get(kind)

    try:
        if client_class is None:
            client_class = _find_entry_point_client(kind)
        if client_class is None:
            available = ", ".join(BUILTIN_RESOURCE_CLIENTS.keys())
            raise ConfigurationError(
                f"no resource client available for '{kind}'. Built-in kinds: {available}",
                operation="load plugins",
            )
        resource_client = client_class()
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"cannot load resource client for '{kind}': {e}",
            operation="load plugins",
        ) from e

    if not isinstance(resource_client, BaseResourceClient):
        raise ConfigurationError(
            f"resource client for '{kind}' does not implement BaseResourceClient",
            operation="load plugins",
        )
    return resource_client


def load_registry(kinds: Iterable[str]) -> ResourceClientRegistry:
    """
    Build the process-wide registry for the configured kinds.

    Any kind that fails to load aborts startup; the service never runs with a
    partially populated registry.

    Raises:
        ConfigurationError: If a kind cannot be loaded or none are configured
    """
    registry = ResourceClientRegistry()
    for kind in kinds:
        registry.register(kind, load_resource_client(kind))

    if not len(registry):
        raise ConfigurationError("no resource clients loaded", operation="load plugins")

    logger.info(f"[PLUGINS] Loaded resource clients: {', '.join(registry.kinds())}")
    return registry
