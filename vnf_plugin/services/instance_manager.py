"""
VNF Instance Manager

Drives the lifecycle of a VNF instance: every resource a CSAR declares is
created in the target cluster under a name derived from the instance
identity, and the resulting names are recorded in the instance directory.

Creation:
    generate id -> parse sequence -> check every kind is registered
    -> provision namespace -> read, rename, create each manifest in order
    -> persist the record

Deletion:
    look up the record -> delete every recorded resource, newest first
    -> delete the record

There is no compensating rollback. When creation fails after resources were
created, or the record cannot be written, the created names are logged and
reconcile() reports them as orphans.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .cluster import ClusterConnector
from .csar import CsarArchive, ManifestStore, SequenceEntry, count_manifests
from .directory import BaseInstanceDirectory, InstanceRecord
from .resources import BaseResourceClient, ResourceClientRegistry
from .resources.base import DEFAULT_NAMESPACE
from ..errors import (
    DirectoryError,
    EmptySequenceError,
    InvalidInputError,
    NotFoundError,
    NotRegisteredError,
    VnfPluginError,
)
from ..utils.resource_naming import (
    generate_external_vnf_id,
    get_declared_name,
    get_instance_prefix,
    get_internal_resource_name,
    get_internal_vnf_id,
    is_dns1123_label,
    is_external_vnf_id,
    is_instance_resource_name,
)

logger = logging.getLogger(__name__)

FORBIDDEN_ID_CHARACTER = "|"


@dataclass
class InstanceInfo:
    """What a caller may see of an instance: identity and declared names."""
    external_vnf_id: str
    cloud_region_id: str
    namespace: str
    resources: Dict[str, List[str]] = field(default_factory=dict)
    csar_id: Optional[str] = None

    @property
    def components(self) -> List[str]:
        """Declared names of every resource, in creation order."""
        return [name for names in self.resources.values() for name in names]


@dataclass
class ReconcileReport:
    """Differences between the cluster and the instance directory for one namespace."""
    cloud_region_id: str
    namespace: str
    orphaned: Dict[str, List[str]] = field(default_factory=dict)
    missing: Dict[str, List[str]] = field(default_factory=dict)
    instances: int = 0

    @property
    def is_consistent(self) -> bool:
        return not any(self.orphaned.values()) and not any(self.missing.values())


class InstanceManager:
    """
    Creates, inspects, updates and deletes VNF instances.

    All collaborators are injected so tests can substitute fakes.
    """

    def __init__(
        self,
        registry: ResourceClientRegistry,
        directory: BaseInstanceDirectory,
        connector: ClusterConnector,
        manifest_store: ManifestStore,
        archive: Optional[CsarArchive] = None,
        auto_create_namespace: bool = True,
    ):
        self.registry = registry
        self.directory = directory
        self.connector = connector
        self.manifest_store = manifest_store
        self.archive = archive
        self.auto_create_namespace = auto_create_namespace

    # =========================================================================
    # INPUT HANDLING
    # =========================================================================

    @staticmethod
    def _validate_target(cloud_region_id: str, namespace: str) -> str:
        """
        Check the region/namespace pair and return the effective namespace.

        Raises:
            InvalidInputError: If either value cannot be part of a resource name
        """
        if not cloud_region_id:
            raise InvalidInputError("cloud region id is required", operation="validate request")
        namespace = namespace or DEFAULT_NAMESPACE

        for label, value in (("cloud region id", cloud_region_id), ("namespace", namespace)):
            if FORBIDDEN_ID_CHARACTER in value or not is_dns1123_label(value):
                raise InvalidInputError(
                    f"invalid {label} '{value}': must be a lowercase DNS-1123 label",
                    operation="validate request",
                )
        return namespace

    async def _ensure_csar(self, csar_id: str, csar_url: Optional[str]) -> None:
        if not csar_url or self.manifest_store.csar_exists(csar_id):
            return
        if self.archive is None:
            raise InvalidInputError("CSAR download is not available", operation=f"fetch CSAR {csar_id}")
        await self.archive.fetch(csar_id, csar_url)

    def _read_sequence(self, csar_id: str) -> List[SequenceEntry]:
        sequence_path, sequence = self.manifest_store.read_sequence(csar_id)
        if not sequence or not any(entry.files for entry in sequence):
            raise EmptySequenceError(sequence_path)
        return sequence

    def _resolve_clients(self, sequence: List[SequenceEntry]) -> Dict[str, BaseResourceClient]:
        """Look up every declared kind before anything is read or created."""
        return {entry.kind: self.registry.lookup(entry.kind) for entry in sequence}

    def _prepare_resource(
        self,
        csar_id: str,
        resource_client: BaseResourceClient,
        filename: str,
        internal_vnf_id: str,
        namespace: str,
    ) -> Tuple[str, str, Any]:
        """
        Decode a manifest and give it its cluster identity.

        Returns:
            Tuple of (declared name, internal name, renamed resource)
        """
        path = self.manifest_store.get_manifest_path(csar_id, filename)
        resource = self.manifest_store.read_and_decode(resource_client, path)

        declared_name = resource_client.get_name(resource)
        internal_name = get_internal_resource_name(internal_vnf_id, declared_name)
        resource_client.validate_name(internal_name)
        resource_client.set_identity(resource, internal_name, namespace)
        return declared_name, internal_name, resource

    async def _load_record(self, internal_vnf_id: str, operation: str) -> InstanceRecord:
        value = await self.directory.read_entry(internal_vnf_id)
        if value is None:
            raise NotFoundError(internal_vnf_id, operation=operation)
        try:
            return InstanceRecord.from_value(value)
        except ValueError as e:
            raise DirectoryError(str(e), operation=operation, key=internal_vnf_id) from e

    @staticmethod
    def _log_orphans(internal_vnf_id: str, created: List[Tuple[str, str]]) -> None:
        if created:
            names = ", ".join(f"{kind}/{name}" for kind, name in created)
            logger.error(f"[VNF] Instance {internal_vnf_id} left unrecorded resources: {names}")

    def _to_info(
        self,
        cloud_region_id: str,
        namespace: str,
        external_vnf_id: str,
        record: InstanceRecord,
    ) -> InstanceInfo:
        internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
        resources: Dict[str, List[str]] = {}
        for kind, internal_name in record.entries():
            try:
                declared_name = get_declared_name(internal_vnf_id, internal_name)
            except ValueError:
                # Legacy records may hold names created under another scheme
                declared_name = internal_name
            resources.setdefault(kind, []).append(declared_name)

        return InstanceInfo(
            external_vnf_id=external_vnf_id,
            cloud_region_id=cloud_region_id,
            namespace=namespace,
            resources=resources,
            csar_id=record.csar_id,
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def create_instance(
        self,
        csar_id: str,
        cloud_region_id: str,
        namespace: str,
        csar_url: Optional[str] = None,
    ) -> InstanceInfo:
        """
        Create every resource a CSAR declares and record the instance.

        Args:
            csar_id: CSAR directory name under the CSAR root
            cloud_region_id: Target cloud region
            namespace: Target namespace ("" means "default")
            csar_url: Download location, used when the CSAR is not present yet

        Returns:
            InstanceInfo with the new external id and the declared names

        Raises:
            InvalidInputError: Bad identifiers, bad CSAR content or unregistered kind
            OperationalError: Cluster, directory or download failure
        """
        namespace = self._validate_target(cloud_region_id, namespace)
        external_vnf_id = generate_external_vnf_id()
        internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
        logger.info(f"[VNF] Creating instance {internal_vnf_id} from CSAR {csar_id}")

        await self._ensure_csar(csar_id, csar_url)
        sequence = self._read_sequence(csar_id)
        clients = self._resolve_clients(sequence)
        logger.debug(f"[VNF] CSAR {csar_id} declares {count_manifests(sequence)} manifests")

        api_client = self.connector.get_api_client(cloud_region_id)
        if self.auto_create_namespace:
            await self.connector.ensure_namespace(namespace, api_client)

        record = InstanceRecord(csar_id=csar_id)
        declared: Dict[str, List[str]] = {}
        created: List[Tuple[str, str]] = []

        try:
            for entry in sequence:
                resource_client = clients[entry.kind]
                for filename in entry.files:
                    declared_name, internal_name, resource = self._prepare_resource(
                        csar_id, resource_client, filename, internal_vnf_id, namespace
                    )
                    created_name = await resource_client.create_resource(resource, namespace, api_client)
                    created.append((entry.kind, created_name or internal_name))
                    record.add(entry.kind, created_name or internal_name)
                    declared.setdefault(entry.kind, []).append(declared_name)
        except VnfPluginError:
            self._log_orphans(internal_vnf_id, created)
            raise

        try:
            await self.directory.create_entry(internal_vnf_id, record.to_value())
        except DirectoryError:
            self._log_orphans(internal_vnf_id, created)
            raise

        logger.info(f"[VNF] ✅ Created instance {internal_vnf_id} with {len(created)} resources")
        return InstanceInfo(
            external_vnf_id=external_vnf_id,
            cloud_region_id=cloud_region_id,
            namespace=namespace,
            resources=declared,
            csar_id=csar_id,
        )

    async def list_instances(self, cloud_region_id: str, namespace: str) -> List[str]:
        """External VNF ids recorded for a region/namespace pair."""
        namespace = self._validate_target(cloud_region_id, namespace)
        prefix = get_instance_prefix(cloud_region_id, namespace)
        # Namespaces may contain "-": keep only exact "<prefix>-<uuid>" matches
        return [vnf_id for vnf_id in await self.directory.read_all(prefix) if is_external_vnf_id(vnf_id)]

    async def get_instance(self, cloud_region_id: str, namespace: str, external_vnf_id: str) -> InstanceInfo:
        """
        Raises:
            NotFoundError: If no instance is recorded under the identity
        """
        namespace = self._validate_target(cloud_region_id, namespace)
        internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
        record = await self._load_record(internal_vnf_id, operation="get instance")
        return self._to_info(cloud_region_id, namespace, external_vnf_id, record)

    async def delete_instance(self, cloud_region_id: str, namespace: str, external_vnf_id: str) -> None:
        """
        Delete every recorded resource, then the record.

        Resources are removed in reverse creation order. The first failure
        stops the deletion and leaves the record in place.

        Raises:
            NotFoundError: If no instance is recorded (no cluster calls are made)
            NotRegisteredError: If a recorded kind is no longer registered
            OperationalError: Cluster or directory failure
        """
        namespace = self._validate_target(cloud_region_id, namespace)
        internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
        record = await self._load_record(internal_vnf_id, operation="delete instance")

        entries = list(reversed(record.entries()))
        clients = {kind: self.registry.lookup(kind) for kind, _ in entries}

        if not record.is_empty():
            api_client = self.connector.get_api_client(cloud_region_id)
            for kind, internal_name in entries:
                await clients[kind].delete_resource(internal_name, namespace, api_client)

        await self.directory.delete_entry(internal_vnf_id)
        logger.info(f"[VNF] Deleted instance {internal_vnf_id}")

    async def update_instance(
        self,
        cloud_region_id: str,
        namespace: str,
        external_vnf_id: str,
        csar_id: Optional[str] = None,
        csar_url: Optional[str] = None,
    ) -> InstanceInfo:
        """
        Bring an instance in line with its CSAR.

        Recorded resources that are still declared are patched, newly declared
        ones are created, and recorded ones no longer declared are deleted.

        Args:
            csar_id: CSAR to apply (default: the one the instance was created from)

        Raises:
            NotFoundError: If no instance is recorded under the identity
            InvalidInputError: No CSAR known, bad CSAR content or unregistered kind
            OperationalError: Cluster, directory or download failure
        """
        namespace = self._validate_target(cloud_region_id, namespace)
        internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
        current = await self._load_record(internal_vnf_id, operation="update instance")

        csar_id = csar_id or current.csar_id
        if not csar_id:
            raise InvalidInputError("CSAR id is required for this instance", operation="update instance")
        logger.info(f"[VNF] Updating instance {internal_vnf_id} from CSAR {csar_id}")

        await self._ensure_csar(csar_id, csar_url)
        sequence = self._read_sequence(csar_id)
        clients = self._resolve_clients(sequence)
        api_client = self.connector.get_api_client(cloud_region_id)

        updated = InstanceRecord(csar_id=csar_id)
        created: List[Tuple[str, str]] = []
        try:
            for entry in sequence:
                resource_client = clients[entry.kind]
                recorded = set(current.names(entry.kind))
                for filename in entry.files:
                    _, internal_name, resource = self._prepare_resource(
                        csar_id, resource_client, filename, internal_vnf_id, namespace
                    )
                    if internal_name in recorded:
                        await resource_client.update_resource(resource, namespace, api_client)
                    else:
                        internal_name = await resource_client.create_resource(resource, namespace, api_client) or internal_name
                        created.append((entry.kind, internal_name))
                    updated.add(entry.kind, internal_name)
        except VnfPluginError:
            self._log_orphans(internal_vnf_id, created)
            raise

        kept = set(updated.entries())
        stale = [(kind, name) for kind, name in current.entries() if (kind, name) not in kept]

        # Record new and stale resources together until the stale ones are gone
        interim = InstanceRecord(csar_id=csar_id)
        for kind, name in updated.entries() + stale:
            interim.add(kind, name)
        try:
            await self.directory.create_entry(internal_vnf_id, interim.to_value())
        except DirectoryError:
            self._log_orphans(internal_vnf_id, created)
            raise

        for kind, name in reversed(stale):
            await self.registry.lookup(kind).delete_resource(name, namespace, api_client)

        await self.directory.create_entry(internal_vnf_id, updated.to_value())
        logger.info(
            f"[VNF] ✅ Updated instance {internal_vnf_id}: "
            f"{len(created)} created, {len(stale)} deleted"
        )
        return self._to_info(cloud_region_id, namespace, external_vnf_id, updated)

    # =========================================================================
    # CONSISTENCY
    # =========================================================================

    async def reconcile(self, cloud_region_id: str, namespace: str) -> ReconcileReport:
        """
        Compare live cluster resources with the directory for one namespace.

        Only live objects named "{cloud_region_id}-{namespace}-{uuid}-..." are
        considered; anything else in the namespace is not ours.

        Returns:
            ReconcileReport listing orphaned (live but unrecorded) and missing
            (recorded but not live) internal names per kind
        """
        namespace = self._validate_target(cloud_region_id, namespace)
        prefix = get_instance_prefix(cloud_region_id, namespace)
        report = ReconcileReport(cloud_region_id=cloud_region_id, namespace=namespace)

        recorded: Dict[str, set] = {}
        for external_vnf_id in await self.list_instances(cloud_region_id, namespace):
            internal_vnf_id = get_internal_vnf_id(cloud_region_id, namespace, external_vnf_id)
            value = await self.directory.read_entry(internal_vnf_id)
            if value is None:
                continue
            try:
                record = InstanceRecord.from_value(value)
            except ValueError as e:
                logger.warning(f"[VNF] Skipping unreadable record {internal_vnf_id}: {e}")
                continue
            report.instances += 1
            for kind, name in record.entries():
                recorded.setdefault(kind, set()).add(name)

        api_client = self.connector.get_api_client(cloud_region_id)
        for kind in sorted(set(self.registry.kinds()) | set(recorded)):
            try:
                resource_client = self.registry.lookup(kind)
            except NotRegisteredError:
                logger.warning(f"[VNF] Cannot check recorded {kind} resources: kind not registered")
                continue

            live = {
                name for name in await resource_client.list_resources(namespace, api_client)
                if is_instance_resource_name(prefix, name)
            }
            known = recorded.get(kind, set())

            orphaned = sorted(live - known)
            missing = sorted(known - live)
            if orphaned:
                report.orphaned[kind] = orphaned
            if missing:
                report.missing[kind] = missing

        if not report.is_consistent:
            logger.warning(
                f"[VNF] {prefix}: {sum(len(v) for v in report.orphaned.values())} orphaned, "
                f"{sum(len(v) for v in report.missing.values())} missing resources"
            )
        return report

    async def check_health(self) -> None:
        """
        Raises:
            DirectoryError: If the instance directory is unreachable
        """
        await self.directory.check_health()
