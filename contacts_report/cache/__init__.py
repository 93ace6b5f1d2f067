"""
Property store backed TTL cache.
"""

from contacts_report.cache.property_store import PropertyStore
from contacts_report.cache.ttl_cache import Cache, DEFAULT_TTL

__all__ = ["PropertyStore", "Cache", "DEFAULT_TTL"]
