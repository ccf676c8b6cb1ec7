"""
CSAR Archive Retrieval

Downloads a zipped CSAR, extracts it into the CSAR root and removes it again.
Extraction goes to a temporary sibling directory first and is moved into
place only when every member was written, so a half-extracted CSAR is never
visible to the manifest store.
"""

import asyncio
import io
import logging
import shutil
import tempfile
import zipfile
from pathlib import Path

import httpx

from .manifests import ManifestStore
from ...errors import CsarFetchError

logger = logging.getLogger(__name__)


class CsarArchive:
    """Fetches CSAR packages into a ManifestStore's root directory."""

    def __init__(self, store: ManifestStore, timeout: float = 60.0):
        self.store = store
        self.timeout = timeout

    async def fetch(self, csar_id: str, url: str) -> Path:
        """
        Download and extract a CSAR.

        Args:
            csar_id: CSAR id, becomes the directory name
            url: Location of the zipped CSAR

        Returns:
            Path of the extracted CSAR directory

        Raises:
            CsarFetchError: If the download or extraction fails
        """
        target = self.store.get_csar_dir(csar_id)
        logger.info(f"[CSAR] Downloading {csar_id} from {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as http:
                response = await http.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise CsarFetchError(f"CSAR download error: {e}", operation=f"fetch CSAR {csar_id}") from e

        await asyncio.to_thread(self._extract, response.content, target)
        logger.info(f"[CSAR] ✅ Extracted {csar_id} to {target}")
        return target

    def _extract(self, content: bytes, target: Path) -> None:
        operation = f"extract CSAR {target.name}"
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))

        try:
            try:
                with zipfile.ZipFile(io.BytesIO(content)) as archive:
                    staging_root = staging.resolve()
                    for member in archive.infolist():
                        destination = (staging / member.filename).resolve()
                        if staging_root != destination and staging_root not in destination.parents:
                            raise CsarFetchError(
                                f"archive member escapes the CSAR directory: {member.filename}",
                                operation=operation,
                            )
                    archive.extractall(staging)
            except (zipfile.BadZipFile, OSError) as e:
                raise CsarFetchError(f"CSAR file extracting error: {e}", operation=operation) from e

            if target.exists():
                shutil.rmtree(target)
            staging.rename(target)
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

    async def delete(self, csar_id: str) -> None:
        """
        Remove an extracted CSAR. Removing a missing CSAR is a no-op.

        Raises:
            CsarFetchError: If the directory cannot be removed
        """
        target = self.store.get_csar_dir(csar_id)
        if not target.exists():
            return
        try:
            await asyncio.to_thread(shutil.rmtree, target)
        except OSError as e:
            raise CsarFetchError(f"CSAR file delete error: {e}", operation=f"delete CSAR {csar_id}") from e
        logger.info(f"[CSAR] Deleted {target}")
