"""Deployment resource client (apps/v1)."""

from typing import Any

from kubernetes import client

from .base import BaseResourceClient


class DeploymentClient(BaseResourceClient):
    """Creates, lists, reads, patches and deletes apps/v1 Deployments."""

    kind = "deployment"
    api_version = "apps/v1"
    manifest_kind = "Deployment"
    model = "V1Deployment"

    def _create(self, api_client: client.ApiClient, namespace: str, resource: Any) -> Any:
        return client.AppsV1Api(api_client).create_namespaced_deployment(
            namespace=namespace,
            body=resource
        )

    def _list(self, api_client: client.ApiClient, namespace: str) -> Any:
        return client.AppsV1Api(api_client).list_namespaced_deployment(namespace=namespace)

    def _read(self, api_client: client.ApiClient, namespace: str, name: str) -> Any:
        return client.AppsV1Api(api_client).read_namespaced_deployment(
            name=name,
            namespace=namespace
        )

    def _delete(self, api_client: client.ApiClient, namespace: str, name: str, body: client.V1DeleteOptions) -> Any:
        return client.AppsV1Api(api_client).delete_namespaced_deployment(
            name=name,
            namespace=namespace,
            body=body
        )

    def _patch(self, api_client: client.ApiClient, namespace: str, name: str, resource: Any) -> Any:
        return client.AppsV1Api(api_client).patch_namespaced_deployment(
            name=name,
            namespace=namespace,
            body=resource
        )
