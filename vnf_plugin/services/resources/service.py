"""Service resource client (core/v1)."""

from typing import Any

from kubernetes import client

from .base import BaseResourceClient
from ...utils.resource_naming import is_dns1035_label


class ServiceClient(BaseResourceClient):
    """Creates, lists, reads, patches and deletes v1 Services."""

    kind = "service"
    api_version = "v1"
    manifest_kind = "Service"
    model = "V1Service"

    def is_valid_name(self, name: str) -> bool:
        # Service names become DNS labels: start with a letter, at most 63 chars
        return is_dns1035_label(name)

    def _create(self, api_client: client.ApiClient, namespace: str, resource: Any) -> Any:
        return client.CoreV1Api(api_client).create_namespaced_service(
            namespace=namespace,
            body=resource
        )

    def _list(self, api_client: client.ApiClient, namespace: str) -> Any:
        return client.CoreV1Api(api_client).list_namespaced_service(namespace=namespace)

    def _read(self, api_client: client.ApiClient, namespace: str, name: str) -> Any:
        return client.CoreV1Api(api_client).read_namespaced_service(
            name=name,
            namespace=namespace
        )

    def _delete(self, api_client: client.ApiClient, namespace: str, name: str, body: client.V1DeleteOptions) -> Any:
        return client.CoreV1Api(api_client).delete_namespaced_service(
            name=name,
            namespace=namespace,
            body=body
        )

    def _patch(self, api_client: client.ApiClient, namespace: str, name: str, resource: Any) -> Any:
        return client.CoreV1Api(api_client).patch_namespaced_service(
            name=name,
            namespace=namespace,
            body=resource
        )
