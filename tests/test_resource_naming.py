"""
Unit tests for resource naming utilities.
"""

import pytest
from uuid import UUID

from vnf_plugin.utils.resource_naming import (
    generate_external_vnf_id,
    get_declared_name,
    get_instance_prefix,
    get_internal_resource_name,
    get_internal_vnf_id,
    is_dns1035_label,
    is_dns1123_label,
    is_dns1123_subdomain,
    is_external_vnf_id,
    is_instance_resource_name,
)

VNF_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


@pytest.mark.unit
class TestIdentifiers:

    def test_generated_ids_are_uuids(self):
        vnf_id = generate_external_vnf_id()
        assert str(UUID(vnf_id)) == vnf_id

    def test_generated_ids_are_unique(self):
        assert len({generate_external_vnf_id() for _ in range(100)}) == 100

    def test_internal_vnf_id(self):
        assert get_internal_vnf_id("region1", "test", VNF_ID) == f"region1-test-{VNF_ID}"
        assert get_internal_vnf_id("region1", "test", UUID(VNF_ID)) == f"region1-test-{VNF_ID}"

    def test_instance_prefix(self):
        assert get_instance_prefix("region1", "default") == "region1-default"

    def test_internal_resource_name_is_deterministic(self):
        internal_vnf_id = get_internal_vnf_id("region1", "test", VNF_ID)
        first = get_internal_resource_name(internal_vnf_id, "sise-deploy")
        second = get_internal_resource_name(internal_vnf_id, "sise-deploy")

        assert first == second == f"region1-test-{VNF_ID}-sise-deploy"

    def test_declared_name_round_trip(self):
        internal_vnf_id = get_internal_vnf_id("region1", "test", VNF_ID)
        internal_name = get_internal_resource_name(internal_vnf_id, "sise-svc")

        assert get_declared_name(internal_vnf_id, internal_name) == "sise-svc"

    @pytest.mark.parametrize("internal_name", [
        "region1-other-x-sise-svc",
        f"region1-test-{VNF_ID}-",
        f"region1-test-{VNF_ID}",
    ])
    def test_declared_name_of_foreign_resource(self, internal_name):
        with pytest.raises(ValueError):
            get_declared_name(get_internal_vnf_id("region1", "test", VNF_ID), internal_name)

    @pytest.mark.parametrize("value,expected", [
        (VNF_ID, True),
        (VNF_ID.upper(), False),
        ("x-" + VNF_ID, False),
        ("abc", False),
        ("", False),
    ])
    def test_is_external_vnf_id(self, value, expected):
        assert is_external_vnf_id(value) is expected


@pytest.mark.unit
class TestNameSyntax:

    @pytest.mark.parametrize("name,expected", [
        ("test", True),
        ("region-1", True),
        ("a" * 63, True),
        ("a" * 64, False),
        ("Test", False),
        ("under_score", False),
        ("pipe|name", False),
        ("-leading", False),
        ("trailing-", False),
        ("dotted.name", False),
        ("test\n", False),
        ("", False),
    ])
    def test_dns1123_label(self, name, expected):
        assert is_dns1123_label(name) is expected

    @pytest.mark.parametrize("name,expected", [
        ("sise-deploy", True),
        ("app.v1.example", True),
        ("a" * 253, True),
        ("a" * 254, False),
        ("bad..dots", False),
        ("under_score", False),
    ])
    def test_dns1123_subdomain(self, name, expected):
        assert is_dns1123_subdomain(name) is expected

    @pytest.mark.parametrize("name,expected", [
        ("sise-svc", True),
        ("1-starts-with-digit", False),
        ("has.dot", False),
        ("a" * 64, False),
    ])
    def test_dns1035_label(self, name, expected):
        assert is_dns1035_label(name) is expected

    @pytest.mark.parametrize("name,expected", [
        (f"r-x-{VNF_ID}-sise-deploy", True),
        (f"r-x-x-{VNF_ID}-sise-deploy", False),
        (f"r-x-{VNF_ID}-", False),
        (f"r-x-{VNF_ID}", False),
        ("r-x-not-a-uuid-sise-deploy", False),
        ("someone-elses-app", False),
    ])
    def test_instance_resource_name(self, name, expected):
        assert is_instance_resource_name("r-x", name) is expected
