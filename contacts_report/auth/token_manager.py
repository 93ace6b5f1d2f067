"""
Token Manager Module

This module stores the OAuth token used by report runs, encrypted at rest.
"""

import os
import json
import base64
import secrets
from typing import Any, Optional
from pathlib import Path
from datetime import datetime

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from google.oauth2.credentials import Credentials

from contacts_report.utils.logger import get_logger
from contacts_report.utils.config import get_config

logger = get_logger(__name__)

# Salt file name (stored alongside tokens)
SALT_FILE_NAME = "encryption_salt"

DEFAULT_TOKEN_DIR = ".contacts-report"

# Singleton instance
_instance: Optional["TokenManager"] = None


def get_token_manager() -> "TokenManager":
    """
    Get the singleton TokenManager instance.

    Returns:
        TokenManager: The singleton TokenManager instance.
    """
    global _instance
    if _instance is None:
        _instance = TokenManager()
    return _instance


class TokenManager:
    """
    Encrypted file storage for the OAuth token.
    """

    def __init__(self) -> None:
        self.config = get_config()

        token_path = self.config.get("token_storage_path", "")
        if not token_path:
            token_path = os.path.join(os.path.expanduser("~"), DEFAULT_TOKEN_DIR, "tokens.json")
        elif token_path.startswith("~"):
            token_path = os.path.expanduser(token_path)

        self.token_path = Path(token_path)
        self.fernet = Fernet(self._derive_key())

    def _get_or_create_salt(self) -> bytes:
        """
        Get or create the random salt used for key derivation.

        Returns:
            bytes: The 16-byte salt stored next to the token file.
        """
        salt_path = self.token_path.parent / SALT_FILE_NAME

        if salt_path.exists():
            return salt_path.read_bytes()

        salt = secrets.token_bytes(16)
        self.token_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        salt_path.write_bytes(salt)
        salt_path.chmod(0o600)

        logger.info(f"Generated new encryption salt at {salt_path}")
        return salt

    def _derive_key(self) -> bytes:
        """
        Derive the Fernet key from TOKEN_ENCRYPTION_KEY using PBKDF2.

        Raises:
            ValueError: If TOKEN_ENCRYPTION_KEY is not set.

        Returns:
            bytes: The derived key, urlsafe base64 encoded.
        """
        secret = self.config.get("token_encryption_key", "")
        if not secret:
            raise ValueError(
                "TOKEN_ENCRYPTION_KEY environment variable is required to store report credentials."
            )

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=self._get_or_create_salt(),
            iterations=100000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret.encode()))

    def store_token(self, credentials: Any) -> None:
        """
        Encrypt and persist the OAuth credentials.

        Args:
            credentials (Any): Credentials exposing token, refresh_token, token_uri,
                               client_id, client_secret, scopes and expiry.
        """
        token_data = {
            "token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "token_uri": credentials.token_uri,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "scopes": list(credentials.scopes or []),
            "expiry": credentials.expiry.isoformat() if credentials.expiry else None,
        }

        encrypted = self.fernet.encrypt(json.dumps(token_data).encode()).decode()

        self.token_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        self.token_path.write_text(encrypted)
        self.token_path.chmod(0o600)

        logger.info(f"Stored token at {self.token_path}")

    def get_token(self) -> Optional[Credentials]:
        """
        Load and decrypt the stored credentials.

        Returns:
            Optional[Credentials]: The credentials, or None if missing or unreadable.
        """
        if not self.token_path.exists():
            logger.warning(f"No token found at {self.token_path}")
            return None

        try:
            token_json = self.fernet.decrypt(self.token_path.read_text().encode()).decode()
            token_data = json.loads(token_json)
        except (OSError, InvalidToken, ValueError) as e:
            logger.error(f"Failed to read token from {self.token_path}: {e}")
            return None

        credentials = Credentials(
            token=token_data["token"],
            refresh_token=token_data["refresh_token"],
            token_uri=token_data["token_uri"],
            client_id=token_data["client_id"],
            client_secret=token_data["client_secret"],
            scopes=token_data["scopes"],
        )

        if token_data.get("expiry"):
            expiry = datetime.fromisoformat(token_data["expiry"])
            # Google OAuth expects naive UTC datetimes
            if expiry.tzinfo is not None:
                expiry = expiry.replace(tzinfo=None)
            credentials.expiry = expiry

        return credentials

    def clear_token(self) -> None:
        """Remove the stored token file."""
        if self.token_path.exists():
            try:
                self.token_path.unlink()
                logger.info(f"Cleared token at {self.token_path}")
            except OSError as e:
                logger.error(f"Failed to clear token at {self.token_path}: {e}")

    def tokens_exist(self) -> bool:
        """Return True when a token file is present."""
        return self.token_path.exists()
