"""
File-backed key/value storage for client-local persisted state
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from config.settings import LOCAL_STORAGE_PATH

logger = logging.getLogger(__name__)


class LocalStorage:
    """JSON file holding one value per key; survives restarts like browser local storage"""

    def __init__(self, path: Optional[str] = None):
        self.path = path or LOCAL_STORAGE_PATH

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local storage at {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring local storage at {self.path}: expected an object")
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def load(self, key: str) -> Any:
        return self._read_all().get(key)

    def save(self, key: str, value: Any):
        data = self._read_all()
        data[key] = value
        self._write_all(data)
