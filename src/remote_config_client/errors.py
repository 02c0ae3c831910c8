"""
Error taxonomy for remote_config_client.

Every failure of a store operation is raised as a subclass of
RemoteConfigError so callers can branch on the kind of failure:

- MissingProjectIdError: store construction without a project id
- AuthError: no bearer credential available
- PreconditionMissingError: update() called without an expected version
- VersionConflictError: server rejected a conditional write (stale version)
- TransportError: network failure, timeout, or a non-2xx response
- DecodeError: success response body is not a JSON object
"""
from typing import Optional


class RemoteConfigError(Exception):
    """Base class for all remote_config_client errors."""
    pass


class MissingProjectIdError(RemoteConfigError):
    """Raised when neither an explicit nor an environment project id is available."""

    def __init__(self, env_var: str = "FIREBASE_PROJECT_ID"):
        self.env_var = env_var
        super().__init__(
            f"Project id is not set. Pass project_id explicitly or set the "
            f"{env_var} environment variable."
        )


class AuthError(RemoteConfigError):
    """Raised when the token provider cannot supply a bearer credential."""
    pass


class PreconditionMissingError(RemoteConfigError, ValueError):
    """Raised when update() is called without a version from a prior read()."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "An ETag is required for update(). Call read() first to obtain the current version."
        )


class VersionConflictError(RemoteConfigError):
    """Server rejected a conditional write because the version is stale.

    Recoverable: re-read the document and retry with the fresh version.
    """

    def __init__(self, expected_version: str, status: int, message: Optional[str] = None):
        self.expected_version = expected_version
        self.status = status
        detail = f": {message}" if message else ""
        super().__init__(
            f"Version conflict (HTTP {status}) for If-Match {expected_version!r}{detail}"
        )


class TransportError(RemoteConfigError):
    """Network failure, timeout, or non-2xx response other than a version conflict."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        timeout: bool = False,
        body: Optional[bytes] = None,
    ):
        self.status = status
        self.timeout = timeout
        self.body = body
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        """True for timeouts, network failures, 429 and 5xx responses."""
        if self.timeout or self.status is None:
            return True
        return self.status == 429 or self.status >= 500


class DecodeError(RemoteConfigError):
    """Response body could not be parsed as a configuration document."""

    def __init__(self, message: str, body: Optional[bytes] = None):
        self.body = body
        super().__init__(message)
