"""
Resource Clients - one pluggable client per Kubernetes resource kind

- BaseResourceClient: Uniform create/list/delete/get/update contract
- DeploymentClient, ServiceClient: Built-in kinds
- ResourceClientRegistry: Process-wide kind -> client table

New kinds are added by registering another BaseResourceClient, never by
changing the instance manager.
"""

from .base import BaseResourceClient, DEFAULT_NAMESPACE
from .deployment import DeploymentClient
from .service import ServiceClient
from .registry import (
    ResourceClientRegistry,
    BUILTIN_RESOURCE_CLIENTS,
    ENTRY_POINT_GROUP,
    load_resource_client,
    load_registry,
)

__all__ = [
    "BaseResourceClient",
    "DEFAULT_NAMESPACE",
    "DeploymentClient",
    "ServiceClient",
    "ResourceClientRegistry",
    "BUILTIN_RESOURCE_CLIENTS",
    "ENTRY_POINT_GROUP",
    "load_resource_client",
    "load_registry",
]
