"""
Unit tests for CSAR sequence parsing.
"""

import pytest

from vnf_plugin.errors import ManifestParseError
from vnf_plugin.services.csar import SequenceEntry, count_manifests, parse_sequence


def write_sequence(tmp_path, content):
    (tmp_path / "sequence.yaml").write_text(content, encoding="utf-8")
    return tmp_path


@pytest.mark.unit
class TestParseSequence:

    def test_mapping_layout(self, tmp_path):
        write_sequence(tmp_path, "deployment:\n  - deploy.yaml\nservice:\n  - svc.yaml\n")

        assert parse_sequence(tmp_path) == [
            SequenceEntry(kind="deployment", files=["deploy.yaml"]),
            SequenceEntry(kind="service", files=["svc.yaml"]),
        ]

    def test_list_layout_allows_repeated_kinds(self, tmp_path):
        write_sequence(tmp_path, (
            "resources:\n"
            "  - service: [db-svc.yaml]\n"
            "  - deployment: [db.yaml, app.yaml]\n"
            "  - service: [app-svc.yaml]\n"
        ))

        entries = parse_sequence(tmp_path)

        assert [e.kind for e in entries] == ["service", "deployment", "service"]
        assert entries[1].files == ["db.yaml", "app.yaml"]
        assert count_manifests(entries) == 4

    def test_kinds_are_lowercased(self, tmp_path):
        write_sequence(tmp_path, "Deployment: [deploy.yaml]\n")
        assert parse_sequence(tmp_path)[0].kind == "deployment"

    def test_single_filename_string(self, tmp_path):
        write_sequence(tmp_path, "deployment: deploy.yaml\n")
        assert parse_sequence(tmp_path)[0].files == ["deploy.yaml"]

    def test_kind_without_files(self, tmp_path):
        write_sequence(tmp_path, "deployment:\n")
        assert parse_sequence(tmp_path) == [SequenceEntry(kind="deployment", files=[])]

    def test_subdirectory_filenames(self, tmp_path):
        write_sequence(tmp_path, "deployment: [manifests/deploy.yaml]\n")
        assert parse_sequence(tmp_path)[0].files == ["manifests/deploy.yaml"]

    def test_absent_file_is_empty(self, tmp_path):
        assert parse_sequence(tmp_path) == []

    def test_absent_directory_is_empty(self, tmp_path):
        assert parse_sequence(tmp_path / "missing") == []

    @pytest.mark.parametrize("content", ["", "# only a comment\n", "resources:\n"])
    def test_empty_documents(self, tmp_path, content):
        write_sequence(tmp_path, content)
        assert parse_sequence(tmp_path) == []

    @pytest.mark.parametrize("content", [
        "deployment: [deploy.yaml\n",
        "- deployment\n",
        "resources: deployment\n",
        "resources:\n  - deploy.yaml\n",
        "deployment: {a: b}\n",
        "deployment: [1]\n",
        "deployment: ['']\n",
        "deployment: [/etc/passwd]\n",
        "deployment: [../other/deploy.yaml]\n",
        "deployment: ['..\\\\deploy.yaml']\n",
        "1: [deploy.yaml]\n",
    ])
    def test_malformed(self, tmp_path, content):
        write_sequence(tmp_path, content)

        with pytest.raises(ManifestParseError) as exc_info:
            parse_sequence(tmp_path)

        assert exc_info.value.path.endswith("sequence.yaml")
        assert exc_info.value.operation == "parse sequence"
