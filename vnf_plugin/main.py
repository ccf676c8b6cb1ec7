from fastapi import FastAPI, HTTPException, status
from .config import get_settings, check_initial_settings
from .errors import DirectoryError
from .routers import vnf_instances
from .services.cluster import ClusterConnector
from .services.csar import CsarArchive, ManifestStore
from .services.directory import create_directory
from .services.instance_manager import InstanceManager
from .services.resources import load_registry
import logging

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Kubernetes VNF Plugin API")


def build_instance_manager(settings) -> InstanceManager:
    """
    Wire the instance manager from settings.

    Raises:
        ConfigurationError: If settings are incomplete or a resource client cannot be loaded
    """
    check_initial_settings(settings)

    registry = load_registry(settings.resource_kind_list)
    directory = create_directory(settings)
    manifest_store = ManifestStore(settings.csar_dir)

    return InstanceManager(
        registry=registry,
        directory=directory,
        connector=ClusterConnector(settings.kube_config_dir),
        manifest_store=manifest_store,
        archive=CsarArchive(manifest_store, timeout=settings.csar_download_timeout),
        auto_create_namespace=settings.auto_create_namespace,
    )


@app.on_event("startup")
async def startup():
    # Fail fast: a missing setting or unloadable plugin stops the server here
    app.state.instance_manager = build_instance_manager(settings)
    logger.info(
        f"VNF plugin started - CSAR dir: {settings.csar_dir}, "
        f"directory backend: {settings.directory_backend}"
    )

    try:
        await app.state.instance_manager.check_health()
    except DirectoryError as e:
        logger.warning(f"[DIRECTORY] Not reachable at startup: {e}")


@app.get("/health")
async def health_check():
    try:
        await app.state.instance_manager.check_health()
    except DirectoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return {"status": "healthy", "service": "k8s-vnf-plugin"}


app.include_router(vnf_instances.router)
app.include_router(vnf_instances.reconcile_router)


def run():
    """Console entry point."""
    import uvicorn
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
