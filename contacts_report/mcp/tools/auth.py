"""
Authentication Tools Module

Handles OAuth login, logout, and authentication status checks.
"""

import threading
from typing import Any, Dict

import httpx
from mcp.server.fastmcp import FastMCP
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request as GoogleRequest

from contacts_report.auth.oauth import start_oauth_process
from contacts_report.auth.token_manager import get_token_manager
from contacts_report.utils.logger import get_logger
from contacts_report.utils.services import clear_service_cache

logger = get_logger(__name__)

REVOKE_URL = "https://oauth2.googleapis.com/revoke"


def setup_auth_tools(mcp: FastMCP) -> None:
    """Set up authentication tools on the FastMCP application."""

    @mcp.tool()
    def authenticate() -> str:
        """
        Start the OAuth flow in a browser window.

        Returns:
            str: A message indicating that the authentication process has started.
        """
        thread = threading.Thread(target=start_oauth_process, daemon=True)
        thread.start()
        return "Authentication process started. Please check your browser to complete the process."

    @mcp.tool()
    def logout() -> str:
        """
        Revoke the access token and clear the stored credentials.

        Returns:
            str: A success or error message.
        """
        token_manager = get_token_manager()
        credentials = token_manager.get_token()
        if not credentials:
            return "No active session to log out from."

        try:
            httpx.post(
                REVOKE_URL,
                params={"token": credentials.token},
                headers={"content-type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to revoke token: {e}")
            return f"Error: Failed to revoke token: {e}"

        token_manager.clear_token()
        clear_service_cache()
        return "Logged out successfully."

    @mcp.tool()
    def check_auth_status() -> Dict[str, Any]:
        """
        Check the current authentication status.

        Returns:
            Dict[str, Any]: authenticated flag, message and status
        """
        token_manager = get_token_manager()
        credentials = token_manager.get_token()

        if not credentials:
            return {
                "authenticated": False,
                "message": "Not authenticated. Use the authenticate tool to start the authentication process.",
            }

        if credentials.expired:
            try:
                credentials.refresh(GoogleRequest())
            except RefreshError as e:
                logger.error(f"Failed to refresh token: {e}")
                return {
                    "authenticated": False,
                    "message": f"Authentication expired and could not be refreshed: {e}",
                    "status": "expired",
                }
            token_manager.store_token(credentials)
            return {
                "authenticated": True,
                "message": "Authentication is valid. Token was refreshed.",
                "status": "refreshed",
            }

        return {"authenticated": True, "message": "Authentication is valid.", "status": "valid"}
