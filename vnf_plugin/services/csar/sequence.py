"""
CSAR Sequence Descriptor

Reads sequence.yaml from a CSAR directory. The file declares, per resource
kind, which manifest files to process and in which order. Two layouts are
accepted:

    resources:                      deployment:
      - deployment:                   - deploy.yaml
          - deploy.yaml             service:
      - service:                      - svc.yaml
          - svc.yaml

The list layout may repeat a kind; the mapping layout may not. Declaration
order is creation order.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, List, Union

import yaml

from ...errors import ManifestParseError

logger = logging.getLogger(__name__)

SEQUENCE_FILE_NAME = "sequence.yaml"


@dataclass
class SequenceEntry:
    """One (kind, [filename, ...]) step of a CSAR sequence."""
    kind: str
    files: List[str] = field(default_factory=list)


def get_sequence_path(csar_dir: Union[str, Path]) -> Path:
    """Get the path of the sequence file inside a CSAR directory."""
    return Path(csar_dir) / SEQUENCE_FILE_NAME


def _validate_filename(sequence_path: Path, kind: str, filename: Any) -> str:
    if not isinstance(filename, str) or not filename.strip():
        raise ManifestParseError(sequence_path, f"'{kind}' lists a non-string or empty filename")

    # Filenames are relative to the CSAR directory and may not leave it
    pure = PurePosixPath(filename.strip())
    if pure.is_absolute() or ".." in pure.parts or "\\" in filename:
        raise ManifestParseError(sequence_path, f"'{kind}' lists a path outside the CSAR: {filename}")

    return str(pure)


def _parse_entry(sequence_path: Path, kind: Any, files: Any) -> SequenceEntry:
    if not isinstance(kind, str) or not kind.strip():
        raise ManifestParseError(sequence_path, f"invalid resource kind: {kind!r}")

    kind_name = kind.strip().lower()

    if files is None:
        files = []
    elif isinstance(files, str):
        files = [files]
    elif not isinstance(files, list):
        raise ManifestParseError(sequence_path, f"'{kind_name}' must map to a list of filenames")

    return SequenceEntry(
        kind=kind_name,
        files=[_validate_filename(sequence_path, kind_name, f) for f in files],
    )


def parse_sequence(csar_dir: Union[str, Path]) -> List[SequenceEntry]:
    """
    Parse the sequence file of a CSAR directory.

    Args:
        csar_dir: CSAR directory expected to hold sequence.yaml

    Returns:
        Ordered list of SequenceEntry. Empty when the file does not exist.

    Raises:
        ManifestParseError: If the file exists but is malformed
    """
    sequence_path = get_sequence_path(csar_dir)

    if not sequence_path.is_file():
        logger.info(f"[CSAR] No sequence file at {sequence_path}, nothing to process")
        return []

    logger.info(f"[CSAR] Reading sequence YAML: {sequence_path}")

    try:
        document = yaml.safe_load(sequence_path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ManifestParseError(sequence_path, str(e)) from e
    except OSError as e:
        raise ManifestParseError(sequence_path, f"read error: {e}") from e

    if document is None:
        return []

    if not isinstance(document, dict):
        raise ManifestParseError(sequence_path, "top level must be a mapping")

    entries: List[SequenceEntry] = []

    if "resources" in document:
        resources = document["resources"]
        if resources is None:
            return []
        if not isinstance(resources, list):
            raise ManifestParseError(sequence_path, "'resources' must be a list")

        for item in resources:
            if not isinstance(item, dict):
                raise ManifestParseError(sequence_path, "each 'resources' item must be a mapping")
            for kind, files in item.items():
                entries.append(_parse_entry(sequence_path, kind, files))
    else:
        for kind, files in document.items():
            entries.append(_parse_entry(sequence_path, kind, files))

    logger.debug(
        f"[CSAR] Sequence for {csar_dir}: "
        + ", ".join(f"{e.kind}={e.files}" for e in entries)
    )
    return entries


def count_manifests(entries: List[SequenceEntry]) -> int:
    """Total number of manifest files declared by a sequence."""
    return sum(len(entry.files) for entry in entries)
