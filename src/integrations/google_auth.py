"""
Farm Care Tracker: Google authentication.

Two credential kinds are used:

- A service account for every Sheets read/write and Drive search. It comes
  from GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_SHEETS_PRIVATE_KEY, or from a
  key file at GOOGLE_SERVICE_ACCOUNT_FILE.
- An installed-app OAuth token, only for copying the treatment template
  when a new animal is added. Files copied by a service account count
  against its own (zero) storage quota, so the copy runs as a real user.
  Run ``python -m src.integrations.google_auth`` once to create the token.
"""

from __future__ import annotations

import logging
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from src.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def get_service_account_credentials() -> service_account.Credentials:
    """Build service account credentials from settings.

    Raises:
        ConfigurationError: If neither env credentials nor a key file are set.
    """
    from src.config import settings

    if settings.GOOGLE_SERVICE_ACCOUNT_EMAIL and settings.GOOGLE_SHEETS_PRIVATE_KEY:
        info = {
            "type": "service_account",
            "client_email": settings.GOOGLE_SERVICE_ACCOUNT_EMAIL,
            "private_key": settings.GOOGLE_SHEETS_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
        logger.debug("Using service account %s", settings.GOOGLE_SERVICE_ACCOUNT_EMAIL)
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

    key_file = settings.GOOGLE_SERVICE_ACCOUNT_FILE
    if key_file:
        if not Path(key_file).exists():
            raise ConfigurationError(
                f"Service account key file not found at {key_file}",
                hint="Point GOOGLE_SERVICE_ACCOUNT_FILE at the JSON key downloaded from Google Cloud Console.",
            )
        logger.debug("Using service account key file %s", key_file)
        return service_account.Credentials.from_service_account_file(key_file, scopes=SCOPES)

    raise ConfigurationError(
        "Missing GOOGLE_SERVICE_ACCOUNT_EMAIL or GOOGLE_SHEETS_PRIVATE_KEY",
        hint=(
            "Set both in .env (escape newlines in the key as \\n) "
            "or set GOOGLE_SERVICE_ACCOUNT_FILE."
        ),
    )


def get_sheets_service(credentials=None):
    """Return a Google Sheets API v4 service object."""
    creds = credentials or get_service_account_credentials()
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def get_drive_service(credentials=None):
    """Return a Google Drive API v3 service object."""
    creds = credentials or get_service_account_credentials()
    return build("drive", "v3", credentials=creds, cache_discovery=False)


def load_oauth_credentials() -> Credentials | None:
    """Load the stored user token, refreshing it if expired.

    Returns None when no usable token exists; nothing interactive happens.
    """
    from src.config import settings

    token_path = Path(settings.GOOGLE_OAUTH_TOKEN_PATH)
    if not token_path.exists():
        logger.debug("No OAuth token at %s", token_path)
        return None

    creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            token_path.write_text(creds.to_json())
            logger.info("OAuth token refreshed")
        except Exception as exc:
            logger.warning("OAuth token refresh failed (%s)", exc)
            return None
    return creds if creds.valid else None


def authorize() -> Credentials:
    """Run the installed-app consent flow and persist the token."""
    from src.config import settings

    creds_path = Path(settings.GOOGLE_OAUTH_CLIENT_PATH)
    token_path = Path(settings.GOOGLE_OAUTH_TOKEN_PATH)
    if not creds_path.exists():
        raise ConfigurationError(
            f"OAuth client file not found at {creds_path}",
            hint="Download the desktop OAuth client JSON from Google Cloud Console.",
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(creds_path), SCOPES)
    creds = flow.run_local_server(port=0)
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    logger.info("OAuth token saved to %s", token_path)
    return creds


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    print("Running Google Drive authorization flow...")
    drive = get_drive_service(authorize())
    about = drive.about().get(fields="user(emailAddress)").execute()
    print(f"Auth successful! Authorized as {about['user']['emailAddress']}.")
