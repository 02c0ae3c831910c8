"""
Configuration for remote_config_client.

Settings are read from the process environment. A dotenv file can be
loaded into the environment first with load_env_file().
"""
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .errors import MissingProjectIdError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://firebaseremoteconfig.googleapis.com"
DEFAULT_TIMEOUT = 30.0

# OAuth scope granting remote-config read/write
REMOTE_CONFIG_SCOPES = ("https://www.googleapis.com/auth/firebase.remoteconfig",)

ENV_PROJECT_ID = "FIREBASE_PROJECT_ID"
ENV_BASE_URL = "REMOTE_CONFIG_BASE_URL"
ENV_TIMEOUT = "REMOTE_CONFIG_TIMEOUT"
ENV_TRACE = "REMOTE_CONFIG_TRACE"

_TRUTHY = {"1", "true", "yes", "on"}


class RemoteConfigSettings(BaseModel):
    """Resolved client settings."""

    project_id: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    trace: bool = False

    @field_validator("project_id")
    @classmethod
    def _blank_project_id_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base_url: {value}")
        return value.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"timeout must be positive, got {value}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RemoteConfigSettings":
        """Build settings from environment variables (defaults to os.environ)."""
        env = os.environ if environ is None else environ
        data = {"project_id": env.get(ENV_PROJECT_ID)}
        if env.get(ENV_BASE_URL):
            data["base_url"] = env[ENV_BASE_URL]
        if env.get(ENV_TIMEOUT):
            data["timeout"] = env[ENV_TIMEOUT]
        if env.get(ENV_TRACE):
            data["trace"] = env[ENV_TRACE].strip().lower() in _TRUTHY
        logger.debug(
            f"RemoteConfigSettings.from_env: project_id={data['project_id']!r}, "
            f"base_url={data.get('base_url', DEFAULT_BASE_URL)}"
        )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ValueError(f"Invalid remote config environment ({fields}): {e}") from e


def resolve_project_id(
    project_id: Optional[str] = None,
    settings: Optional[RemoteConfigSettings] = None,
) -> str:
    """Return the explicit project id, else the configured one.

    Raises:
        MissingProjectIdError: if neither is available
    """
    if project_id and project_id.strip():
        return project_id.strip()
    settings = settings or RemoteConfigSettings.from_env()
    if settings.project_id:
        return settings.project_id
    raise MissingProjectIdError(ENV_PROJECT_ID)


def load_env_file(directory: str, file: str = ".env", override: bool = False) -> Path:
    """
    Load a dotenv file into the process environment.

    Args:
        directory: Directory holding the dotenv file
        file: File name inside directory (default: .env)
        override: Whether values in the file replace existing variables

    Returns:
        Path of the loaded file

    Raises:
        NotADirectoryError: directory does not exist
        FileNotFoundError: the file does not exist in directory
    """
    base = Path(directory)
    if not base.is_dir():
        raise NotADirectoryError(f"Directory does not exist: {base}")

    path = base / file
    if not path.is_file():
        raise FileNotFoundError(f"Env file not found: {path}")

    logger.info(f"Loading env file: {path}")
    load_dotenv(dotenv_path=path, override=override)
    return path
