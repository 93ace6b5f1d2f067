"""
Service Caching Module

This module provides cached instances of the People and Gmail services to avoid
recreating service objects on every report run.
"""

import threading
from typing import Optional
from googleapiclient.discovery import build, Resource
from google.oauth2.credentials import Credentials

from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

# Thread lock for cache access
_cache_lock = threading.Lock()

# Cached service instances
_people_service: Optional[Resource] = None
_gmail_service: Optional[Resource] = None
_people_credentials_hash: Optional[int] = None
_gmail_credentials_hash: Optional[int] = None


def _get_credentials_hash(credentials: Credentials) -> int:
    """
    Get a hash of the credentials token for cache invalidation.

    Args:
        credentials: The Google OAuth credentials.

    Returns:
        int: A hash of the credentials token.
    """
    return hash((credentials.token, credentials.refresh_token))


def get_people_service(credentials: Credentials) -> Resource:
    """
    Get a cached People API service instance.

    The service is reused until the credentials change.

    Args:
        credentials: The Google OAuth credentials.

    Returns:
        Resource: The People API service instance.
    """
    global _people_service, _people_credentials_hash

    with _cache_lock:
        cred_hash = _get_credentials_hash(credentials)
        if _people_service is None or _people_credentials_hash != cred_hash:
            logger.debug("Creating new People service instance")
            _people_service = build("people", "v1", credentials=credentials)
            _people_credentials_hash = cred_hash

        return _people_service


def get_gmail_service(credentials: Credentials) -> Resource:
    """
    Get a cached Gmail API service instance.

    The service is reused until the credentials change.

    Args:
        credentials: The Google OAuth credentials.

    Returns:
        Resource: The Gmail API service instance.
    """
    global _gmail_service, _gmail_credentials_hash

    with _cache_lock:
        cred_hash = _get_credentials_hash(credentials)
        if _gmail_service is None or _gmail_credentials_hash != cred_hash:
            logger.debug("Creating new Gmail service instance")
            _gmail_service = build("gmail", "v1", credentials=credentials)
            _gmail_credentials_hash = cred_hash

        return _gmail_service


def clear_service_cache() -> None:
    """
    Clear all cached service instances.

    This should be called when logging out or when credentials are invalidated.
    """
    global _people_service, _gmail_service, _people_credentials_hash, _gmail_credentials_hash

    with _cache_lock:
        _people_service = None
        _gmail_service = None
        _people_credentials_hash = None
        _gmail_credentials_hash = None
        logger.debug("Cleared service cache")
