"""
Test configuration and fixtures for pytest.

Fixtures include: a CSAR tree on disk, an in-memory fake cluster behind the
real resource clients, an in-memory instance directory, and a fully wired
InstanceManager.
"""

import os
from types import SimpleNamespace
from typing import Dict, List, Set, Tuple
from unittest.mock import AsyncMock, Mock

import pytest
from kubernetes.client.rest import ApiException

from vnf_plugin.services.cluster import ClusterConnector
from vnf_plugin.services.csar import CsarArchive, ManifestStore
from vnf_plugin.services.directory import MemoryInstanceDirectory
from vnf_plugin.services.instance_manager import InstanceManager
from vnf_plugin.services.resources import (
    DeploymentClient,
    ResourceClientRegistry,
    ServiceClient,
)

def pytest_configure(config):
    """
    Pytest hook called before test collection.
    Sets up test environment variables and registers custom markers.
    """
    # Set before any vnf_plugin import reads settings
    os.environ.setdefault("CSAR_DIR", "/tmp/vnf-plugin-test-csars")
    os.environ["DIRECTORY_BACKEND"] = "memory"
    os.environ["LOG_LEVEL"] = "DEBUG"

    from vnf_plugin.config import get_settings
    get_settings.cache_clear()

    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "kubernetes: mark test as requiring the kubernetes client")


# ============================================================================
# CSAR content
# ============================================================================

DEPLOYMENT_MANIFEST = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: {name}
  labels:
    app: sise
spec:
  replicas: 1
  selector:
    matchLabels:
      app: sise
  template:
    metadata:
      labels:
        app: sise
    spec:
      containers:
        - name: sise
          image: {image}
"""

SERVICE_MANIFEST = """\
apiVersion: v1
kind: Service
metadata:
  name: {name}
spec:
  selector:
    app: sise
  ports:
    - port: 80
      targetPort: 8080
"""

SEQUENCE = """\
deployment:
  - deploy.yaml
service:
  - svc.yaml
"""


def write_csar(root, csar_id: str, files: Dict[str, str]):
    """Create {root}/{csar_id}/ with the given files."""
    csar_dir = root / csar_id
    csar_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        (csar_dir / filename).write_text(content, encoding="utf-8")
    return csar_dir


@pytest.fixture
def manifests():
    """Manifest templates; format with name= (and image= for deployments)."""
    return SimpleNamespace(
        deployment=DEPLOYMENT_MANIFEST,
        service=SERVICE_MANIFEST,
        sequence=SEQUENCE,
    )


@pytest.fixture
def csar_root(tmp_path):
    """CSAR root holding UUID-1: one deployment (sise-deploy) and one service (sise-svc)."""
    root = tmp_path / "csars"
    write_csar(root, "UUID-1", {
        "sequence.yaml": SEQUENCE,
        "deploy.yaml": DEPLOYMENT_MANIFEST.format(name="sise-deploy", image="nginx:1.25"),
        "svc.yaml": SERVICE_MANIFEST.format(name="sise-svc"),
    })
    return root


@pytest.fixture
def make_csar(csar_root):
    """Factory adding another CSAR under csar_root."""
    def _make(csar_id: str, files: Dict[str, str]):
        return write_csar(csar_root, csar_id, files)
    return _make


@pytest.fixture
def manifest_store(csar_root):
    return ManifestStore(csar_root)


# ============================================================================
# Fake cluster
# ============================================================================

class FakeCluster:
    """
    In-memory stand-in for the Kubernetes API.

    Attributes:
        objects: (kind, namespace) -> {name: resource}
        calls: (action, kind, name, namespace) in call order
        fail_on: action -> names whose call raises a 500
    """

    def __init__(self):
        self.objects: Dict[Tuple[str, str], Dict[str, object]] = {}
        self.calls: List[Tuple[str, str, str, str]] = []
        self.fail_on: Dict[str, Set[str]] = {}

    def record(self, action: str, kind: str, name: str, namespace: str):
        self.calls.append((action, kind, name, namespace))
        if name in self.fail_on.get(action, set()):
            raise ApiException(status=500, reason="Internal Server Error")

    def names(self, kind: str, namespace: str) -> List[str]:
        return list(self.objects.get((kind, namespace), {}).keys())

    def actions(self, action: str) -> List[Tuple[str, str]]:
        return [(kind, name) for a, kind, name, _ in self.calls if a == action]


class FakeClusterMixin:
    """Replaces the SDK calls of a resource client with FakeCluster operations."""

    def __init__(self, cluster: FakeCluster):
        super().__init__()
        self.cluster = cluster

    def _store(self, namespace):
        return self.cluster.objects.setdefault((self.kind, namespace), {})

    def _create(self, api_client, namespace, resource):
        name = resource.metadata.name
        self.cluster.record("create", self.kind, name, namespace)
        if name in self._store(namespace):
            raise ApiException(status=409, reason="Conflict")
        self._store(namespace)[name] = resource
        return resource

    def _list(self, api_client, namespace):
        self.cluster.record("list", self.kind, "", namespace)
        return SimpleNamespace(items=[
            SimpleNamespace(metadata=SimpleNamespace(name=name))
            for name in self._store(namespace)
        ])

    def _read(self, api_client, namespace, name):
        self.cluster.record("get", self.kind, name, namespace)
        if name not in self._store(namespace):
            raise ApiException(status=404, reason="Not Found")
        return self._store(namespace)[name]

    def _delete(self, api_client, namespace, name, body):
        self.cluster.record("delete", self.kind, name, namespace)
        if name not in self._store(namespace):
            raise ApiException(status=404, reason="Not Found")
        del self._store(namespace)[name]

    def _patch(self, api_client, namespace, name, resource):
        self.cluster.record("update", self.kind, name, namespace)
        if name not in self._store(namespace):
            raise ApiException(status=404, reason="Not Found")
        self._store(namespace)[name] = resource
        return resource


class FakeDeploymentClient(FakeClusterMixin, DeploymentClient):
    pass


class FakeServiceClient(FakeClusterMixin, ServiceClient):
    pass


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def registry(cluster):
    registry = ResourceClientRegistry()
    registry.register("deployment", FakeDeploymentClient(cluster))
    registry.register("service", FakeServiceClient(cluster))
    return registry


@pytest.fixture
def directory():
    return MemoryInstanceDirectory()


@pytest.fixture
def connector():
    """Cluster connector returning a sentinel API client."""
    connector = Mock(spec=ClusterConnector)
    connector.api_client = Mock(name="api_client")
    connector.get_api_client.return_value = connector.api_client
    connector.ensure_namespace = AsyncMock()
    return connector


@pytest.fixture
def manager(registry, directory, connector, manifest_store):
    return InstanceManager(
        registry=registry,
        directory=directory,
        connector=connector,
        manifest_store=manifest_store,
        archive=CsarArchive(manifest_store),
    )
