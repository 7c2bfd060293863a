"""Google OAuth credentials for the Tasks API.

Saved credentials are loaded with google-auth and refreshed once they expire,
both at startup and before any request made with stale credentials. Two file
layouts are accepted:
- google-auth's authorized-user JSON (``token``, ``refresh_token``,
  ``client_id``, ``client_secret``, ``expiry``), as written by
  ``Credentials.to_json()``
- a googleapis token file (``access_token``, ``refresh_token``, ``expiry_date``
  in epoch milliseconds), paired with the OAuth client keys file downloaded
  from Google Cloud Console
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

logger = logging.getLogger(__name__)

TASKS_SCOPES = ["https://www.googleapis.com/auth/tasks"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class CredentialsError(ValueError):
    """Saved credentials cannot be loaded or refreshed."""


def read_oauth_client(path: Path) -> dict[str, Optional[str]]:
    """Read the OAuth client id and secret from a Google Cloud keys file."""
    try:
        keys = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CredentialsError(f"OAuth keys file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CredentialsError(f"Invalid OAuth keys file {path}: {e}") from e

    client = keys.get("installed") or keys.get("web")
    if not client:
        raise CredentialsError(
            f"Invalid OAuth keys file {path}: missing 'installed' or 'web' key"
        )
    return {"client_id": client.get("client_id"), "client_secret": client.get("client_secret")}


def credentials_from_saved(saved: dict[str, Any], oauth_keys_path: Path) -> Credentials:
    """Build credentials from either saved layout.

    Raises:
        ValueError: An authorized-user file is missing required fields.
        CredentialsError: The OAuth keys file is needed and unreadable.
    """
    if "client_id" in saved:
        return Credentials.from_authorized_user_info(saved, TASKS_SCOPES)

    client: dict[str, Optional[str]] = {}
    if saved.get("refresh_token"):
        client = read_oauth_client(oauth_keys_path)

    expiry = None
    if saved.get("expiry_date"):
        # google-auth compares against naive UTC
        expiry = datetime.fromtimestamp(saved["expiry_date"] / 1000, tz=timezone.utc)
        expiry = expiry.replace(tzinfo=None)

    return Credentials(
        token=saved.get("access_token") or saved.get("token"),
        refresh_token=saved.get("refresh_token"),
        token_uri=GOOGLE_TOKEN_URI,
        client_id=client.get("client_id"),
        client_secret=client.get("client_secret"),
        scopes=TASKS_SCOPES,
        expiry=expiry,
    )


def refresh_credentials(credentials: Credentials) -> None:
    """Refresh credentials in place (blocking)."""
    try:
        credentials.refresh(Request())
    except GoogleAuthError as e:
        raise CredentialsError(f"Could not refresh Google credentials: {e}") from e


def load_credentials(path: Path, oauth_keys_path: Path) -> Optional[Credentials]:
    """Load saved credentials, refreshing and re-saving them when expired.

    Args:
        path: The saved credentials file.
        oauth_keys_path: OAuth client keys, needed to refresh a googleapis
            token file.

    Returns:
        Valid credentials, or None when ``path`` does not exist.

    Raises:
        CredentialsError: The file is unreadable, or its token is no longer
            valid and cannot be refreshed.
    """
    if not path.exists():
        return None
    try:
        saved = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CredentialsError(f"Invalid credentials file {path}: {e}") from e

    try:
        credentials = credentials_from_saved(saved, oauth_keys_path)
    except CredentialsError:
        raise
    except ValueError as e:
        raise CredentialsError(f"Invalid credentials file {path}: {e}") from e

    if not credentials.valid:
        if not credentials.refresh_token:
            raise CredentialsError(
                f"Credentials in {path} hold no valid access token and no refresh token"
            )
        logger.info(f"Refreshing expired credentials from {path}")
        refresh_credentials(credentials)
        path.write_text(credentials.to_json(), encoding="utf-8")

    return credentials


class CredentialsAuth(httpx.Auth):
    """httpx auth that sends the bearer token, refreshing it first if stale."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials
        self._refresh_lock = asyncio.Lock()

    async def async_auth_flow(self, request: httpx.Request):
        if not self.credentials.valid:
            async with self._refresh_lock:
                if not self.credentials.valid:
                    logger.info("Refreshing expired Google credentials")
                    await asyncio.to_thread(refresh_credentials, self.credentials)
        self.credentials.apply(request.headers)
        yield request
