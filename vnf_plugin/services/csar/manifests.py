"""
CSAR Manifest Store

Resolves CSAR directories under the configured CSAR root and decodes the
manifests a sequence file references into typed kubernetes models.

Decoding never touches the declared name; identity assignment belongs to the
instance manager.
"""

import logging
from pathlib import Path
from typing import Any, List, Tuple, Union

import yaml
from kubernetes.client.rest import ApiException

from .sequence import SequenceEntry, get_sequence_path, parse_sequence
from ..resources.base import BaseResourceClient
from ...errors import InvalidInputError, ManifestDecodeError, ManifestNotFoundError

logger = logging.getLogger(__name__)


class ManifestStore:
    """
    Reads CSAR content from {csar_root}/{csar_id}/.

    Attributes:
        csar_root: Directory holding one subdirectory per CSAR id
    """

    def __init__(self, csar_root: Union[str, Path]):
        self.csar_root = Path(csar_root)

    def get_csar_dir(self, csar_id: str) -> Path:
        """
        Get the directory of a CSAR.

        Raises:
            InvalidInputError: If csar_id is empty or would leave the CSAR root
        """
        if not csar_id or not csar_id.strip():
            raise InvalidInputError("CSAR id is required", operation="resolve CSAR")
        if "/" in csar_id or "\\" in csar_id or csar_id in (".", ".."):
            raise InvalidInputError(f"invalid CSAR id: {csar_id}", operation="resolve CSAR")
        return self.csar_root / csar_id

    def csar_exists(self, csar_id: str) -> bool:
        return self.get_csar_dir(csar_id).is_dir()

    def read_sequence(self, csar_id: str) -> Tuple[Path, List[SequenceEntry]]:
        """
        Parse the sequence file of a CSAR.

        Returns:
            Tuple of (sequence file path, ordered entries)

        Raises:
            ManifestParseError: If the sequence file is malformed
        """
        csar_dir = self.get_csar_dir(csar_id)
        return get_sequence_path(csar_dir), parse_sequence(csar_dir)

    def get_manifest_path(self, csar_id: str, filename: str) -> Path:
        return self.get_csar_dir(csar_id) / filename

    def read_and_decode(self, resource_client: BaseResourceClient, path: Union[str, Path]) -> Any:
        """
        Read one manifest and decode it with the kind's client.

        Args:
            resource_client: Client of the kind the sequence declared for this file
            path: Manifest file path

        Returns:
            Decoded kubernetes model object (e.g. V1Deployment)

        Raises:
            ManifestNotFoundError: If the file does not exist
            ManifestDecodeError: If the file is not a valid manifest of that kind
        """
        path = Path(path)
        if not path.is_file():
            raise ManifestNotFoundError(path)

        logger.info(f"[CSAR] Processing file: {path}")

        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ManifestDecodeError(path, str(e)) from e
        except OSError as e:
            raise ManifestDecodeError(path, f"read error: {e}") from e

        if not isinstance(document, dict):
            raise ManifestDecodeError(path, "manifest must be a single YAML mapping")

        api_version = document.get("apiVersion")
        manifest_kind = document.get("kind")
        if api_version != resource_client.api_version or manifest_kind != resource_client.manifest_kind:
            raise ManifestDecodeError(
                path,
                f"expected {resource_client.api_version} {resource_client.manifest_kind}, "
                f"got {api_version} {manifest_kind}"
            )

        metadata = document.get("metadata")
        if not isinstance(metadata, dict) or not isinstance(metadata.get("name"), str) or not metadata["name"]:
            raise ManifestDecodeError(path, "metadata.name is required")

        logger.debug(f"[CSAR] Decoding {manifest_kind} YAML: {path}")

        try:
            resource = resource_client.decode(document)
        except (ValueError, TypeError, AttributeError, ApiException) as e:
            # Bad date and datetime fields surface as ApiException(status=0)
            raise ManifestDecodeError(path, str(e)) from e

        if resource is None or getattr(resource, "metadata", None) is None:
            raise ManifestDecodeError(path, f"decoded {manifest_kind} has no metadata")

        return resource
