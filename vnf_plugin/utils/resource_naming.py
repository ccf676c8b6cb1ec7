"""
Resource naming utilities for VNF instances.

Centralized functions for generating consistent identifiers across:
- Instance directory keys
- Kubernetes object names
- Reported (declared) component names

Naming scheme:
- External VNF ID: random UUID4, the only identifier callers see
- Internal VNF ID: "{cloud_region_id}-{namespace}-{external_vnf_id}"
- Internal resource name: "{internal_vnf_id}-{declared_name}"

All functions here are pure: the same inputs always give the same name.
"""

import re
from typing import Union
from uuid import UUID, uuid4

# DNS-1123 label: namespaces, cloud region ids
DNS1123_LABEL_MAX_LENGTH = 63
_DNS1123_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

# DNS-1123 subdomain: most namespaced objects (deployments, configmaps, ...)
DNS1123_SUBDOMAIN_MAX_LENGTH = 253
_DNS1123_SUBDOMAIN = re.compile(
    r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"
)

# DNS-1035 label: services (must start with a letter)
DNS1035_LABEL_MAX_LENGTH = 63
_DNS1035_LABEL = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")

NAME_SEPARATOR = "-"


def generate_external_vnf_id() -> str:
    """
    Generate a fresh external VNF ID.

    Returns:
        Random UUID4 string, e.g. "7c9e6679-7425-40de-944b-e07fc1f90ae7"
    """
    return str(uuid4())


def get_instance_prefix(cloud_region_id: str, namespace: str) -> str:
    """
    Get the key prefix shared by every instance of a region/namespace pair.

    Example:
        >>> get_instance_prefix("region1", "default")
        "region1-default"
    """
    return f"{cloud_region_id}{NAME_SEPARATOR}{namespace}"


def get_internal_vnf_id(cloud_region_id: str, namespace: str, external_vnf_id: Union[UUID, str]) -> str:
    """
    Get the internal VNF ID used as directory key and resource name prefix.

    Example:
        >>> get_internal_vnf_id("region1", "test", "7c9e6679-7425-40de-944b-e07fc1f90ae7")
        "region1-test-7c9e6679-7425-40de-944b-e07fc1f90ae7"
    """
    return f"{get_instance_prefix(cloud_region_id, namespace)}{NAME_SEPARATOR}{str(external_vnf_id)}"


def get_internal_resource_name(internal_vnf_id: str, declared_name: str) -> str:
    """
    Get the cluster-side name of a manifest's resource.

    Example:
        >>> get_internal_resource_name("region1-test-7c9e...", "sise-deploy")
        "region1-test-7c9e...-sise-deploy"
    """
    return f"{internal_vnf_id}{NAME_SEPARATOR}{declared_name}"


def get_declared_name(internal_vnf_id: str, internal_name: str) -> str:
    """
    Recover the manifest's declared name from an internal resource name.

    Raises:
        ValueError: If internal_name was not derived from internal_vnf_id
    """
    prefix = f"{internal_vnf_id}{NAME_SEPARATOR}"
    if not internal_name.startswith(prefix) or len(internal_name) == len(prefix):
        raise ValueError(f"Resource name {internal_name} does not belong to {internal_vnf_id}")
    return internal_name[len(prefix):]


def is_external_vnf_id(value: str) -> bool:
    """Check whether value has the shape of a generated external VNF ID."""
    try:
        return str(UUID(value)) == value
    except (ValueError, TypeError):
        return False


def is_instance_resource_name(instance_prefix: str, name: str) -> bool:
    """
    Check whether name is "{instance_prefix}-{external_vnf_id}-{declared_name}".

    A bare prefix match is not enough: region "r" namespace "x" is a prefix of
    region "r-x" namespace "x".
    """
    head = f"{instance_prefix}{NAME_SEPARATOR}"
    if not name.startswith(head):
        return False
    rest = name[len(head):]
    id_length = len(str(UUID(int=0)))
    return (
        is_external_vnf_id(rest[:id_length])
        and rest[id_length:id_length + 1] == NAME_SEPARATOR
        and len(rest) > id_length + 1
    )


def is_dns1123_label(name: str) -> bool:
    """Check Kubernetes DNS-1123 label syntax (namespaces)."""
    return len(name) <= DNS1123_LABEL_MAX_LENGTH and bool(_DNS1123_LABEL.fullmatch(name))


def is_dns1123_subdomain(name: str) -> bool:
    """Check Kubernetes DNS-1123 subdomain syntax (deployment names)."""
    return len(name) <= DNS1123_SUBDOMAIN_MAX_LENGTH and bool(_DNS1123_SUBDOMAIN.fullmatch(name))


def is_dns1035_label(name: str) -> bool:
    """Check Kubernetes DNS-1035 label syntax (service names)."""
    return len(name) <= DNS1035_LABEL_MAX_LENGTH and bool(_DNS1035_LABEL.fullmatch(name))
