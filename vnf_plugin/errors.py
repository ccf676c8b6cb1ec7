"""
Error taxonomy for the VNF plugin.

Three categories matter to callers:
- InvalidInputError: bad request or bad CSAR content
- OperationalError: a collaborator (cluster, KV store, configuration) failed
- NotFoundError: nothing recorded under the requested identity

Every error carries the name of the operation that produced it so a chained
failure reads like "create deployment: ...".
"""

from typing import Optional


class VnfPluginError(Exception):
    """Base exception for all VNF plugin errors."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.message = message
        self.operation = operation
        super().__init__(f"{operation}: {message}" if operation else message)


# =============================================================================
# BAD INPUT
# =============================================================================

class InvalidInputError(VnfPluginError):
    """Request data that can never succeed (bad identifiers, bad names)."""
    pass


class ManifestError(InvalidInputError):
    """Base exception for missing or unusable CSAR content."""

    def __init__(self, path: str, message: str, operation: Optional[str] = None):
        self.path = str(path)
        super().__init__(f"{message} ({self.path})", operation=operation)


class ManifestNotFoundError(ManifestError):
    """A manifest referenced by the sequence file does not exist."""

    def __init__(self, path: str, operation: Optional[str] = "read manifest"):
        super().__init__(path, "file does not exist", operation=operation)


class ManifestDecodeError(ManifestError):
    """A manifest could not be decoded into its resource model."""

    def __init__(self, path: str, cause: str, operation: Optional[str] = "decode manifest"):
        self.cause = cause
        super().__init__(path, f"cannot decode manifest: {cause}", operation=operation)


class ManifestParseError(ManifestError):
    """The sequence file exists but is malformed."""

    def __init__(self, path: str, reason: str, operation: Optional[str] = "parse sequence"):
        self.reason = reason
        super().__init__(path, f"malformed sequence file: {reason}", operation=operation)


class EmptySequenceError(ManifestError):
    """The CSAR declares nothing to create."""

    def __init__(self, path: str, operation: Optional[str] = "create instance"):
        super().__init__(path, "sequence declares no resources", operation=operation)


class NotRegisteredError(InvalidInputError):
    """No resource client is registered for the requested kind."""

    def __init__(self, kind: str, available=None, operation: Optional[str] = "lookup resource client"):
        self.kind = kind
        available_text = ", ".join(available) if available else "none"
        super().__init__(
            f"resource kind '{kind}' not supported. Available kinds: {available_text}",
            operation=operation,
        )


# =============================================================================
# OPERATIONAL FAILURES
# =============================================================================

class OperationalError(VnfPluginError):
    """A downstream system failed while handling a valid request."""
    pass


class ConfigurationError(OperationalError):
    """Missing or invalid settings, or an unloadable resource client. Fatal at startup."""
    pass


class ResourceOperationError(OperationalError):
    """A Kubernetes API call failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        kind: Optional[str] = None,
        name: Optional[str] = None,
        status: Optional[int] = None,
    ):
        self.kind = kind
        self.name = name
        self.status = status
        super().__init__(message, operation=operation)


class DirectoryError(OperationalError):
    """The instance directory (KV store) could not be read or written."""

    def __init__(self, message: str, operation: Optional[str] = None, key: Optional[str] = None):
        self.key = key
        super().__init__(message, operation=operation)


class CsarFetchError(OperationalError):
    """A CSAR archive could not be downloaded or extracted."""
    pass


# =============================================================================
# ABSENCE
# =============================================================================

class NotFoundError(VnfPluginError):
    """No instance is recorded under the given identity."""

    def __init__(self, instance_key: str, operation: Optional[str] = None):
        self.instance_key = instance_key
        super().__init__(f"no VNF instance found for {instance_key}", operation=operation)
