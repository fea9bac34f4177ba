# vistas_addons/core_helpers/app_settings.py

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class AppSettings:
    """
    Application settings grouped by section, read from ``MyFiles/settings.yaml``::

        default:
          codpais: ESP
          decimals: 2
        email:
          host: smtp.example.com

    A missing file means no settings.
    """

    def __init__(self, data: Optional[Dict[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = {
            str(group): dict(values or {}) for group, values in (data or {}).items()
        }

    @classmethod
    def from_file(cls, path: Path) -> "AppSettings":
        if not path.is_file():
            logger.debug(f"No settings file at '{path}'.")
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Settings file '{path}' must contain a mapping of groups.")
        return cls(content)

    def get(self, name: str, group: str = "default", default: Any = None) -> Any:
        return self._data.get(group, {}).get(name, default)

    def group(self, group: str = "default") -> Dict[str, Any]:
        return dict(self._data.get(group, {}))
