# vistas/core/plugin_manager.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from vistas.core.contracts import PluginManagerInterface

logger = logging.getLogger(__name__)


class PluginManager(PluginManagerInterface):
    """
    Reads the FacturaScripts plugin list from ``MyFiles/plugins.json``.

    The file holds a list of entries like
    ``{"name": "Crm", "enabled": true, "order": 3}``. Enabled plugins are
    returned sorted by ``order`` and then by their position in the file.
    Plugins whose directory is missing under ``Plugins/`` are still reported;
    the view engine skips their directories on its own.
    """

    def __init__(self, folder: Path):
        self.folder = Path(folder)
        self.list_file = self.folder / "MyFiles" / "plugins.json"

    def _read_entries(self) -> List[Dict[str, Any]]:
        if not self.list_file.is_file():
            return []

        try:
            content = json.loads(self.list_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            # 插件列表损坏时宁可报错，也不要静默地渲染出缺少插件的页面
            raise ValueError(f"Invalid plugin list '{self.list_file}': {e}") from e

        if not isinstance(content, list):
            raise ValueError(f"Invalid plugin list '{self.list_file}': expected a JSON list.")
        return [entry for entry in content if isinstance(entry, dict) and entry.get("name")]

    def installed_plugins(self) -> List[Dict[str, Any]]:
        return self._read_entries()

    def enabled_plugins(self) -> List[str]:
        entries = self._read_entries()
        enabled = [
            (int(entry.get("order") or 0), index, str(entry["name"]))
            for index, entry in enumerate(entries)
            if entry.get("enabled", False)
        ]
        enabled.sort(key=lambda item: (item[0], item[1]))
        names = [name for _, _, name in enabled]
        logger.debug(f"Enabled plugins: {names}")
        return names


class StaticPluginManager(PluginManagerInterface):
    """A fixed plugin list, for embedding the engine without a plugins.json file."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = list(names)

    def enabled_plugins(self) -> List[str]:
        return list(self._names)
