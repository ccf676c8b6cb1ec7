"""
Abstract Base Resource Client

Defines the common interface every Kubernetes resource kind implements, so
the instance manager can create and delete heterogeneous kinds through a
single code path.

A concrete client only declares what it manages (kind, apiVersion, model
class) and maps the five cluster calls onto the kubernetes SDK. Error
wrapping, namespace defaulting, logging and thread offloading live here.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from kubernetes import client
from kubernetes.client.rest import ApiException

from ...errors import InvalidInputError, ResourceOperationError
from ...utils.resource_naming import is_dns1123_subdomain

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"

# Deletion waits for dependents (ReplicaSets, Pods) to go first
DELETE_PROPAGATION_POLICY = "Foreground"


class _ManifestPayload:
    """Lets ApiClient.deserialize consume an already-parsed manifest."""

    def __init__(self, document: Dict[str, Any]):
        self.data = json.dumps(document, default=str)


class BaseResourceClient(ABC):
    """
    Abstract base class for resource kind clients.

    Subclasses set:
        kind: Registry key and instance record key (e.g. "deployment")
        api_version: Manifest apiVersion accepted by decode (e.g. "apps/v1")
        manifest_kind: Manifest kind accepted by decode (e.g. "Deployment")
        model: kubernetes model class name used for decoding (e.g. "V1Deployment")
    """

    kind: str = ""
    api_version: str = ""
    manifest_kind: str = ""
    model: str = ""

    def __init__(self):
        self._decoder = client.ApiClient()

    # =========================================================================
    # MANIFEST HANDLING
    # =========================================================================

    def decode(self, document: Dict[str, Any]) -> Any:
        """
        Decode a parsed manifest into this kind's kubernetes model.

        Raises:
            ValueError: If the document does not fit the model schema
        """
        return self._decoder.deserialize(_ManifestPayload(document), self.model)

    def is_valid_name(self, name: str) -> bool:
        """Check the object name syntax Kubernetes enforces for this kind."""
        return is_dns1123_subdomain(name)

    def validate_name(self, name: str) -> None:
        """
        Raises:
            InvalidInputError: If name is not a legal object name for this kind
        """
        if not self.is_valid_name(name):
            raise InvalidInputError(
                f"'{name}' is not a valid {self.kind} name",
                operation=f"name {self.kind}",
            )

    def get_name(self, resource: Any) -> str:
        """Name currently set on a decoded resource."""
        return resource.metadata.name

    def set_identity(self, resource: Any, name: str, namespace: str) -> Any:
        """Assign the cluster-side name and namespace to a decoded resource."""
        resource.metadata.name = name
        resource.metadata.namespace = self._namespace(namespace)
        return resource

    @staticmethod
    def _namespace(namespace: str) -> str:
        return namespace or DEFAULT_NAMESPACE

    def _api_error(self, e: ApiException, action: str, name: str = "") -> ResourceOperationError:
        target = f" {name}" if name else ""
        logger.error(f"[K8S] {action.capitalize()} {self.kind}{target} failed: {e.status} {e.reason}")
        return ResourceOperationError(
            f"{e.status} {e.reason}",
            operation=f"{action} {self.kind}{target}",
            kind=self.kind,
            name=name or None,
            status=e.status,
        )

    # =========================================================================
    # SDK CALLS (implemented per kind, run in a worker thread)
    # =========================================================================

    @abstractmethod
    def _create(self, api_client: client.ApiClient, namespace: str, resource: Any) -> Any:
        """Create the object and return the created object."""
        pass

    @abstractmethod
    def _list(self, api_client: client.ApiClient, namespace: str) -> Any:
        """Return the kind's list object for the namespace."""
        pass

    @abstractmethod
    def _read(self, api_client: client.ApiClient, namespace: str, name: str) -> Any:
        """Return the named object."""
        pass

    @abstractmethod
    def _delete(self, api_client: client.ApiClient, namespace: str, name: str, body: client.V1DeleteOptions) -> Any:
        """Delete the named object."""
        pass

    @abstractmethod
    def _patch(self, api_client: client.ApiClient, namespace: str, name: str, resource: Any) -> Any:
        """Patch the named object with resource and return the result."""
        pass

    # =========================================================================
    # RESOURCE CLIENT CONTRACT
    # =========================================================================

    async def create_resource(self, resource: Any, namespace: str, api_client: client.ApiClient) -> str:
        """
        Create a decoded resource in the cluster.

        Returns:
            Name the cluster assigned to the created object

        Raises:
            ResourceOperationError: If the API call fails
        """
        namespace = self._namespace(namespace)
        name = self.get_name(resource)
        try:
            result = await asyncio.to_thread(self._create, api_client, namespace, resource)
        except ApiException as e:
            raise self._api_error(e, "create", name) from e

        created_name = result.metadata.name if result is not None and result.metadata else name
        logger.info(f"[K8S] ✅ Created {self.kind}: {created_name} in {namespace}")
        return created_name

    async def list_resources(self, namespace: str, api_client: client.ApiClient) -> List[str]:
        """
        List names of this kind in a namespace.

        Raises:
            ResourceOperationError: If the API call fails
        """
        namespace = self._namespace(namespace)
        try:
            result = await asyncio.to_thread(self._list, api_client, namespace)
        except ApiException as e:
            raise self._api_error(e, "list") from e

        items = result.items if result is not None and result.items else []
        return [item.metadata.name for item in items]

    async def delete_resource(self, name: str, namespace: str, api_client: client.ApiClient) -> None:
        """
        Delete a named object. An object that is already gone counts as deleted.

        Raises:
            ResourceOperationError: If the API call fails
        """
        namespace = self._namespace(namespace)
        logger.info(f"[K8S] Deleting {self.kind}: {name} in {namespace}")
        body = client.V1DeleteOptions(propagation_policy=DELETE_PROPAGATION_POLICY)
        try:
            await asyncio.to_thread(self._delete, api_client, namespace, name, body)
        except ApiException as e:
            if e.status == 404:
                logger.warning(f"[K8S] {self.kind} {name} already absent from {namespace}")
                return
            raise self._api_error(e, "delete", name) from e

        logger.info(f"[K8S] Deleted {self.kind}: {name}")

    async def get_resource(self, name: str, namespace: str, api_client: client.ApiClient) -> str:
        """
        Look up a named object.

        Returns:
            The name if the object exists, "" otherwise

        Raises:
            ResourceOperationError: If the API call fails for another reason
        """
        namespace = self._namespace(namespace)
        try:
            result = await asyncio.to_thread(self._read, api_client, namespace, name)
        except ApiException as e:
            if e.status == 404:
                return ""
            raise self._api_error(e, "get", name) from e

        return result.metadata.name if result is not None and result.metadata else name

    async def update_resource(self, resource: Any, namespace: str, api_client: client.ApiClient) -> str:
        """
        Patch an existing object with a decoded resource.

        Returns:
            Name of the updated object

        Raises:
            ResourceOperationError: If the API call fails
        """
        namespace = self._namespace(namespace)
        name = self.get_name(resource)
        try:
            await asyncio.to_thread(self._patch, api_client, namespace, name, resource)
        except ApiException as e:
            raise self._api_error(e, "update", name) from e

        logger.info(f"[K8S] ✅ Updated {self.kind}: {name} in {namespace}")
        return name
