# vistas/core/loader.py

import importlib
import importlib.resources
import json
import logging
import traceback
from typing import Dict, List

from vistas.core.contracts import Container, HookManager, PluginRegisterFunc

logger = logging.getLogger(__name__)

ADDONS_PACKAGE = "vistas_addons"


class AddonLoader:
    """
    Discovers the Python addons shipped in ``vistas_addons`` and registers them.

    Every addon is a sub-package with a ``manifest.json`` (``name``,
    ``priority``) and a ``register_plugin(container, hook_manager)`` entry
    point. Addons are registered by ascending priority, then by name.
    """

    def __init__(self, container: Container, hook_manager: HookManager, package: str = ADDONS_PACKAGE):
        self._container = container
        self._hook_manager = hook_manager
        self._package = package

    def load_addons(self) -> List[Dict]:
        # 此时日志系统可能还未配置 (core_logging 也是一个插件)，所以用 print
        print("\n--- Vistas addons: loading ---")

        discovered = self._discover_addons()
        if not discovered:
            print("Warning: no addons discovered.")
            print("--- Vistas addons: done ---\n")
            return []

        ordered = sorted(discovered, key=lambda a: (a["manifest"].get("priority", 100), a["name"]))
        print("Addon registration order:")
        for i, info in enumerate(ordered):
            print(f"  {i + 1}. {info['name']} (priority: {info['manifest'].get('priority', 100)})")

        self._register_addons(ordered)
        manifests = [info["manifest"] for info in ordered]
        self._container.register("loaded_addon_manifests", lambda: manifests)

        logger.info(f"{len(ordered)} addon(s) loaded and registered.")
        print("--- Vistas addons: done ---\n")
        return manifests

    def _discover_addons(self) -> List[Dict]:
        discovered = []
        try:
            package_root = importlib.resources.files(self._package)
        except ModuleNotFoundError:
            return discovered

        for addon_path in package_root.iterdir():
            if not addon_path.is_dir() or addon_path.name.startswith(("__", ".")):
                continue

            manifest_path = addon_path / "manifest.json"
            if not manifest_path.is_file():
                continue

            try:
                manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                print(f"Warning: skipping addon '{addon_path.name}', unreadable manifest.json: {e}")
                continue

            discovered.append({
                "name": manifest.get("name", addon_path.name),
                "manifest": manifest,
                "import_path": f"{self._package}.{addon_path.name}",
            })
        return discovered

    def _register_addons(self, addons: List[Dict]) -> None:
        for info in addons:
            try:
                module = importlib.import_module(info["import_path"])
                register_func: PluginRegisterFunc = getattr(module, "register_plugin")
                register_func(self._container, self._hook_manager)
            except Exception as e:
                # 插件之间存在依赖，任何一个失败都应终止启动
                print("\n" + "=" * 80)
                print(f"!!! FATAL: failed to load addon '{info['name']}' ({info['import_path']}) !!!")
                print("=" * 80)
                traceback.print_exc()
                print("=" * 80)
                raise RuntimeError(f"Could not load addon {info['name']}") from e
