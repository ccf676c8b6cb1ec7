"""Utility modules for the VNF plugin."""

from .resource_naming import (
    generate_external_vnf_id,
    get_instance_prefix,
    get_internal_vnf_id,
    get_internal_resource_name,
    get_declared_name,
    is_external_vnf_id,
)

__all__ = [
    'generate_external_vnf_id',
    'get_instance_prefix',
    'get_internal_vnf_id',
    'get_internal_resource_name',
    'get_declared_name',
    'is_external_vnf_id',
]
