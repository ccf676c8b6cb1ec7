"""
VNF Instances API Router.

Endpoints for creating, listing, inspecting, updating and deleting VNF
instances, plus an on-demand consistency check per namespace.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..errors import (
    CsarFetchError,
    InvalidInputError,
    ManifestError,
    NotFoundError,
    NotRegisteredError,
    OperationalError,
    VnfPluginError,
)
from ..schemas import (
    CreateVnfRequest,
    ReconcileResponse,
    UpdateVnfRequest,
    VnfInstanceResponse,
    VnfListResponse,
)
from ..services.instance_manager import InstanceInfo, InstanceManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/vnf_instances", tags=["vnf_instances"])
reconcile_router = APIRouter(prefix="/v1/reconcile", tags=["reconcile"])


def get_instance_manager(request: Request) -> InstanceManager:
    """Instance manager built at startup."""
    return request.app.state.instance_manager


def to_http_exception(e: VnfPluginError) -> HTTPException:
    """Map an error category onto its status code."""
    if isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, (ManifestError, NotRegisteredError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(e, InvalidInputError):
        code = 422  # Starlette renamed the 422 constant
    elif isinstance(e, CsarFetchError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(e, OperationalError):
        logger.error(f"[VNF] {e}", exc_info=True)
    else:
        logger.warning(f"[VNF] {e}")
    return HTTPException(status_code=code, detail=str(e))


def _to_response(info: InstanceInfo) -> VnfInstanceResponse:
    return VnfInstanceResponse(
        vnf_id=info.external_vnf_id,
        cloud_region_id=info.cloud_region_id,
        namespace=info.namespace,
        csar_id=info.csar_id,
        vnf_components=info.components,
        resources=info.resources,
    )


@router.post("/", response_model=VnfInstanceResponse, status_code=status.HTTP_201_CREATED)
async def create_vnf_instance(
    request: CreateVnfRequest,
    manager: InstanceManager = Depends(get_instance_manager),
):
    """Create every resource the CSAR declares in the target namespace."""
    try:
        info = await manager.create_instance(
            csar_id=request.csar_id,
            cloud_region_id=request.cloud_region_id,
            namespace=request.namespace,
            csar_url=request.csar_url,
        )
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return _to_response(info)


@router.get("/{cloud_region_id}/{namespace}", response_model=VnfListResponse)
async def list_vnf_instances(
    cloud_region_id: str,
    namespace: str,
    manager: InstanceManager = Depends(get_instance_manager),
):
    try:
        vnf_ids = await manager.list_instances(cloud_region_id, namespace)
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return VnfListResponse(vnf_list=vnf_ids)


@router.get("/{cloud_region_id}/{namespace}/{vnf_id}", response_model=VnfInstanceResponse)
async def get_vnf_instance(
    cloud_region_id: str,
    namespace: str,
    vnf_id: str,
    manager: InstanceManager = Depends(get_instance_manager),
):
    try:
        info = await manager.get_instance(cloud_region_id, namespace, vnf_id)
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return _to_response(info)


@router.put("/{cloud_region_id}/{namespace}/{vnf_id}", response_model=VnfInstanceResponse)
async def update_vnf_instance(
    cloud_region_id: str,
    namespace: str,
    vnf_id: str,
    request: UpdateVnfRequest,
    manager: InstanceManager = Depends(get_instance_manager),
):
    """Re-apply the CSAR to an existing instance."""
    try:
        info = await manager.update_instance(
            cloud_region_id,
            namespace,
            vnf_id,
            csar_id=request.csar_id,
            csar_url=request.csar_url,
        )
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return _to_response(info)


@router.delete("/{cloud_region_id}/{namespace}/{vnf_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_vnf_instance(
    cloud_region_id: str,
    namespace: str,
    vnf_id: str,
    manager: InstanceManager = Depends(get_instance_manager),
):
    try:
        await manager.delete_instance(cloud_region_id, namespace, vnf_id)
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_202_ACCEPTED)


@reconcile_router.get("/{cloud_region_id}/{namespace}", response_model=ReconcileResponse)
async def reconcile_namespace(
    cloud_region_id: str,
    namespace: str,
    manager: InstanceManager = Depends(get_instance_manager),
):
    """Report resources that exist without a record, and records without resources."""
    try:
        report = await manager.reconcile(cloud_region_id, namespace)
    except VnfPluginError as e:
        raise to_http_exception(e) from e
    return ReconcileResponse(
        cloud_region_id=report.cloud_region_id,
        namespace=report.namespace,
        instances=report.instances,
        consistent=report.is_consistent,
        orphaned=report.orphaned,
        missing=report.missing,
    )
