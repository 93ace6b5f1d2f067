"""
Property Store Module

A flat string-to-string key/value store persisted as a single JSON file.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_STORE_DIR = ".contacts-report"


def default_store_path() -> Path:
    """Return the default location of the property file."""
    return Path(os.path.expanduser("~")) / DEFAULT_STORE_DIR / "properties.json"


class PropertyStore:
    """
    Flat string-keyed property store.

    Every write rewrites the whole file; there is no locking between processes.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        if not path:
            self.path = default_store_path()
        else:
            self.path = Path(os.path.expanduser(str(path)))

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Property file {self.path} does not contain an object")
        return data

    def _write(self, properties: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(properties, f)
        self.path.chmod(0o600)

    def get_property(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_property(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("Property values must be strings")
        properties = self._read()
        properties[key] = value
        self._write(properties)

    def delete_property(self, key: str) -> None:
        properties = self._read()
        if key in properties:
            del properties[key]
            self._write(properties)

    def get_properties(self) -> Dict[str, str]:
        return dict(self._read())

    def delete_all_properties(self) -> None:
        self._write({})
        logger.debug(f"Cleared all properties in {self.path}")
