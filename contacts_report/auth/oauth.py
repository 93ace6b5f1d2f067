"""
OAuth Module

This module provides OAuth2 authentication for the People and Gmail APIs.
"""

from typing import List, Optional

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request as GoogleRequest

from contacts_report.utils.logger import get_logger
from contacts_report.utils.config import get_config
from contacts_report.auth.token_manager import get_token_manager

logger = get_logger(__name__)

USER_INFO_SCOPES = [
    "https://www.googleapis.com/auth/userinfo.email",
    "openid",
]


def get_scopes() -> List[str]:
    """
    Build the list of OAuth scopes from configuration.

    Returns:
        List[str]: The configured scopes plus the user info scopes.
    """
    config = get_config()
    scopes = list(config.get("google_auth_scopes", []))
    for scope in USER_INFO_SCOPES:
        if scope not in scopes:
            scopes.append(scope)
    return scopes


def _build_flow() -> Optional[InstalledAppFlow]:
    config = get_config()
    client_id = config.get("google_client_id")
    client_secret = config.get("google_client_secret")

    if not client_id or not client_secret:
        logger.error("Missing Google OAuth credentials")
        return None

    return InstalledAppFlow.from_client_config(
        {
            "installed": {
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uris": ["http://localhost"],
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        },
        scopes=get_scopes(),
    )


def start_oauth_process() -> bool:
    """
    Run the installed-app OAuth flow in the local browser and store the token.

    Returns:
        bool: True if authentication was successful, False otherwise.
    """
    flow = _build_flow()
    if flow is None:
        return False

    port = get_config().get("oauth_port", 8000)
    try:
        credentials = flow.run_local_server(
            port=port,
            access_type="offline",
            prompt="consent",
        )
    except Exception as e:
        logger.error(f"Authentication failed: {e}")
        return False

    get_token_manager().store_token(credentials)
    logger.info("Authentication completed successfully")
    return True


def get_credentials() -> Optional[Credentials]:
    """
    Get the stored OAuth2 credentials, refreshing them when expired.

    Returns:
        Optional[Credentials]: The credentials, or None if not authenticated.
    """
    token_manager = get_token_manager()

    if not token_manager.tokens_exist():
        logger.warning("No tokens found")
        return None

    credentials = token_manager.get_token()
    if not credentials:
        return None

    if credentials.expired:
        logger.info("Token is expired, refreshing")
        try:
            credentials.refresh(GoogleRequest())
        except RefreshError as e:
            logger.error(f"Failed to refresh token: {e}")
            return None
        token_manager.store_token(credentials)
        logger.info("Token refreshed successfully")

    return credentials
