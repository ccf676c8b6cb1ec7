from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings
from functools import lru_cache

from .errors import ConfigurationError


class Settings(BaseSettings):
    # CSAR storage - one subdirectory per CSAR id, each holding sequence.yaml
    # plus the manifests it references. MUST be set via environment.
    csar_dir: str = ""

    # Timeout in seconds when downloading a zipped CSAR from csar_url
    csar_download_timeout: int = 60

    # Resource client plugins
    # When plugin_dir is set, every subdirectory name is a resource kind to load
    # (e.g. plugins/deployment, plugins/service). Otherwise resource_kinds is used.
    plugin_dir: str = ""
    resource_kinds: str = "deployment,service"  # Comma-separated list

    # Kubernetes connection
    # Per cloud region kubeconfig files: {kube_config_dir}/{cloud_region_id}
    # Empty: in-cluster config, falling back to the default kubeconfig
    kube_config_dir: str = ""

    # Create the target namespace on instance creation when it does not exist
    auto_create_namespace: bool = True

    # Instance directory backend: "consul" (production) or "memory" (local dev)
    directory_backend: str = "consul"

    # Consul KV store
    # DATABASE_IP is accepted for deployments that only export the store address
    database_ip: str = ""
    consul_host: str = ""
    consul_port: int = 8500
    consul_scheme: str = "http"
    consul_token: str = ""
    consul_kv_root: str = "vnf_instances"  # All instance records live under this path

    # HTTP server (vnf-plugin console script)
    server_host: str = "0.0.0.0"
    server_port: int = 8081

    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    @property
    def consul_address(self) -> str:
        """Consul host, preferring CONSUL_HOST over DATABASE_IP."""
        return self.consul_host or self.database_ip

    @property
    def resource_kind_list(self) -> List[str]:
        """
        Resource kinds the registry must load at startup.

        Returns:
            Subdirectory names of plugin_dir when configured, otherwise the
            entries of resource_kinds. Names are lowercased and de-duplicated.

        Raises:
            ConfigurationError: If plugin_dir is set but is not a directory
        """
        if self.plugin_dir:
            plugin_root = Path(self.plugin_dir)
            if not plugin_root.is_dir():
                raise ConfigurationError(
                    f"PLUGIN_DIR {self.plugin_dir} is not a directory",
                    operation="load plugins",
                )
            names = sorted(p.name for p in plugin_root.iterdir() if p.is_dir())
        else:
            names = self.resource_kinds.split(",")

        kinds: List[str] = []
        for name in names:
            kind = name.strip().lower()
            if kind and kind not in kinds:
                kinds.append(kind)
        return kinds

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields from .env file
        case_sensitive = False  # Allow lowercase env vars to match uppercase field names


def check_initial_settings(settings: Settings) -> None:
    """
    Verify the settings required before serving any request.

    Raises:
        ConfigurationError: If a required setting is missing or unusable
    """
    if not settings.csar_dir:
        raise ConfigurationError("environment variable CSAR_DIR not set", operation="check settings")

    if settings.directory_backend.lower() == "consul" and not settings.consul_address:
        raise ConfigurationError(
            "environment variable CONSUL_HOST (or DATABASE_IP) not set",
            operation="check settings",
        )

    if not settings.resource_kind_list:
        raise ConfigurationError("no resource kinds configured", operation="check settings")


@lru_cache()
def get_settings():
    return Settings()
