"""
Cluster Connector

Resolves the Kubernetes API client for a cloud region and manages the target
namespace of an instance.

Each cloud region may have its own kubeconfig at {kube_config_dir}/{region}.
Regions without one use the in-cluster configuration, falling back to the
default kubeconfig for development.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..errors import ConfigurationError, ResourceOperationError
from .resources.base import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)

MANAGED_BY_LABEL = "k8s-vnf-plugin"


class ClusterConnector:
    """Caches one API client per cloud region."""

    def __init__(self, kube_config_dir: Optional[str] = None):
        self.kube_config_dir = Path(kube_config_dir) if kube_config_dir else None
        self._clients: Dict[str, client.ApiClient] = {}
        self._default_client: Optional[client.ApiClient] = None

    def get_api_client(self, cloud_region_id: str) -> client.ApiClient:
        """
        Get the API client for a cloud region.

        Raises:
            ConfigurationError: If no usable Kubernetes configuration exists
        """
        if cloud_region_id in self._clients:
            return self._clients[cloud_region_id]

        region_config = self._region_config_path(cloud_region_id)
        if region_config is not None:
            try:
                api_client = config.new_client_from_config(config_file=str(region_config))
            except (config.ConfigException, OSError) as e:
                logger.error(f"[K8S] Failed to load kubeconfig {region_config}: {e}")
                raise ConfigurationError(
                    f"Cannot load Kubernetes configuration for region {cloud_region_id}: {e}",
                    operation="connect cluster",
                ) from e
            logger.info(f"[K8S] Loaded kubeconfig for region {cloud_region_id}")
        else:
            api_client = self._get_default_client()

        self._clients[cloud_region_id] = api_client
        return api_client

    def _region_config_path(self, cloud_region_id: str) -> Optional[Path]:
        if self.kube_config_dir is None or not cloud_region_id:
            return None
        path = self.kube_config_dir / cloud_region_id
        return path if path.is_file() else None

    def _get_default_client(self) -> client.ApiClient:
        if self._default_client is not None:
            return self._default_client

        try:
            # Try in-cluster config first (for production)
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
        except config.ConfigException:
            try:
                # Fall back to kubeconfig (for development)
                config.load_kube_config()
                logger.info("Loaded kubeconfig for development")
            except config.ConfigException as e:
                logger.error(f"Failed to load Kubernetes config: {e}")
                raise ConfigurationError(
                    "Cannot load Kubernetes configuration",
                    operation="connect cluster",
                ) from e

        self._default_client = client.ApiClient()
        return self._default_client

    # =========================================================================
    # NAMESPACE MANAGEMENT
    # =========================================================================

    async def namespace_exists(self, namespace: str, api_client: client.ApiClient) -> bool:
        """
        Check if a Kubernetes namespace exists.

        Raises:
            ResourceOperationError: If the lookup fails for a reason other than absence
        """
        core_v1 = client.CoreV1Api(api_client)
        try:
            await asyncio.to_thread(core_v1.read_namespace, name=namespace or DEFAULT_NAMESPACE)
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise ResourceOperationError(
                f"{e.status} {e.reason}",
                operation=f"get namespace {namespace}",
                kind="namespace",
                name=namespace,
                status=e.status,
            ) from e

    async def create_namespace(self, namespace: str, api_client: client.ApiClient) -> None:
        """
        Create a namespace. A namespace that already exists is left alone.

        Raises:
            ResourceOperationError: If creation fails
        """
        core_v1 = client.CoreV1Api(api_client)
        namespace_manifest = client.V1Namespace(
            metadata=client.V1ObjectMeta(
                name=namespace,
                labels={"managed-by": MANAGED_BY_LABEL},
            )
        )
        try:
            await asyncio.to_thread(core_v1.create_namespace, body=namespace_manifest)
        except ApiException as e:
            if e.status == 409:
                logger.debug(f"[K8S] Namespace {namespace} already exists")
                return
            raise ResourceOperationError(
                f"{e.status} {e.reason}",
                operation=f"create namespace {namespace}",
                kind="namespace",
                name=namespace,
                status=e.status,
            ) from e
        logger.info(f"[K8S] ✅ Created namespace: {namespace}")

    async def ensure_namespace(self, namespace: str, api_client: client.ApiClient) -> None:
        """Create the namespace if it doesn't exist. The default namespace always exists."""
        if not namespace or namespace == DEFAULT_NAMESPACE:
            return
        if await self.namespace_exists(namespace, api_client):
            logger.debug(f"[K8S] Namespace {namespace} already exists")
            return
        await self.create_namespace(namespace, api_client)
