"""Local key-value cache: one JSON file per key."""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueCache:
    """Persist small JSON documents under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_CHARS_RE.sub('_', key)}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when absent or unreadable."""
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path) as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        """Store ``value``; a failed write is logged and reported as False."""
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(value, f)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.warning("Could not write cache entry %s: %s", key, e)
            return False
        return True

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete cache entry %s: %s", key, e)
