"""Server configuration from environment variables.

Environment variables checked:
- GTASKS_ACCESS_TOKEN -> OAuth bearer token for the Tasks API
- GTASKS_CREDENTIALS_PATH -> saved credentials JSON, used when no token is set
- GTASKS_OAUTH_KEYS_PATH -> OAuth client keys, used to refresh saved credentials
- GTASKS_API_BASE_URL -> Tasks API base URL
- GTASKS_TIMEOUT -> request timeout in seconds
- GTASKS_LOG_LEVEL / GTASKS_LOG_FILE -> logging setup
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from google.oauth2.credentials import Credentials

from .auth import CredentialsError, load_credentials
from .client import DEFAULT_BASE_URL

# Load .env file if present
load_dotenv()

DEFAULT_CREDENTIALS_PATH = Path.home() / ".gtasks-server-credentials.json"
DEFAULT_OAUTH_KEYS_PATH = Path.home() / "gcp-oauth.keys.json"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(ValueError):
    """The server cannot be configured from the environment."""


@dataclass
class ServerConfig:
    """Configuration for the Google Tasks MCP server."""

    credentials: Credentials
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _env_path(name: str, default: Path) -> Path:
    return Path(os.getenv(name, str(default))).expanduser()


def load_credentials_from_env() -> Credentials:
    """Credentials from GTASKS_ACCESS_TOKEN, else from the saved credentials file.

    Raises:
        ConfigError: No usable credentials were found.
    """
    access_token = os.getenv("GTASKS_ACCESS_TOKEN", "")
    if access_token:
        return Credentials(token=access_token)

    credentials_path = _env_path("GTASKS_CREDENTIALS_PATH", DEFAULT_CREDENTIALS_PATH)
    try:
        credentials = load_credentials(
            credentials_path, _env_path("GTASKS_OAUTH_KEYS_PATH", DEFAULT_OAUTH_KEYS_PATH)
        )
    except CredentialsError as e:
        raise ConfigError(str(e)) from e

    if credentials is None:
        raise ConfigError(
            "No access token found. Set GTASKS_ACCESS_TOKEN or save credentials to "
            f"{credentials_path}."
        )
    return credentials


def load_config() -> ServerConfig:
    """Build the server configuration from the environment.

    Raises:
        ConfigError: No credentials could be loaded, or a setting is invalid.
    """
    credentials = load_credentials_from_env()

    timeout_raw = os.getenv("GTASKS_TIMEOUT", "30")
    try:
        timeout = float(timeout_raw)
    except ValueError as e:
        raise ConfigError(f"GTASKS_TIMEOUT must be a number, got {timeout_raw!r}") from e

    return ServerConfig(
        credentials=credentials,
        base_url=os.getenv("GTASKS_API_BASE_URL", DEFAULT_BASE_URL),
        timeout=timeout,
        log_level=os.getenv("GTASKS_LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("GTASKS_LOG_FILE") or None,
    )


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure root logging (never stdout, which carries the stdio transport)."""
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)
