"""
CSAR handling - what to build and from which manifests

- parse_sequence: Ordered (kind, [filename]) steps from sequence.yaml
- ManifestStore: CSAR directory resolution and manifest decoding
- CsarArchive: Download/extract/remove zipped CSARs
"""

from .sequence import SequenceEntry, SEQUENCE_FILE_NAME, parse_sequence, get_sequence_path, count_manifests
from .manifests import ManifestStore
from .archive import CsarArchive

__all__ = [
    "SequenceEntry",
    "SEQUENCE_FILE_NAME",
    "parse_sequence",
    "get_sequence_path",
    "count_manifests",
    "ManifestStore",
    "CsarArchive",
]
