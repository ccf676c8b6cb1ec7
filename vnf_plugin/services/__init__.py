"""
Services Module

Key Submodules:
- csar: Sequence parsing, manifest decoding and CSAR download
- resources: Pluggable per-kind Kubernetes resource clients
- directory: Instance record storage (Consul or in-memory)
- cluster: Per-region Kubernetes API clients and namespace provisioning
- instance_manager: Create/get/list/update/delete/reconcile VNF instances

Usage:
    from vnf_plugin.services import InstanceManager
"""

from .instance_manager import InstanceInfo, InstanceManager, ReconcileReport

__all__ = [
    "InstanceInfo",
    "InstanceManager",
    "ReconcileReport",
]
