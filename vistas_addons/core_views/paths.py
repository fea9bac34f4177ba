# vistas_addons/core_views/paths.py

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from jinja2 import BaseLoader, Environment, TemplateNotFound
from jinja2.loaders import split_template_path

from vistas.core.config import ViewSettings
from vistas.core.contracts import PluginManagerInterface
from .contracts import (
    CORE_NAMESPACE,
    PLUGIN_EXTENSION_NAMESPACE_PREFIX,
    PLUGIN_NAMESPACE_PREFIX,
    PathsReport,
    TemplatePath,
    ViewConfigurationError,
)

logger = logging.getLogger(__name__)

MAIN_NAMESPACE = "__main__"


class ViewPathResolver(BaseLoader):
    """
    Jinja2 loader over an ordered, named set of template directories.

    Names like ``@PluginCrm/Edit.html.twig`` are looked up only in the
    directories registered under ``PluginCrm``; plain names are looked up in
    the default search list. Directories are searched in order and the first
    existing file wins.
    """

    def __init__(self, search_path: Iterable[Path] = (), encoding: str = "utf-8"):
        self.encoding = encoding
        self._paths: Dict[str, List[Path]] = {MAIN_NAMESPACE: [Path(p) for p in search_path]}

    # --- 注册 ---

    def register_path(self, name: str, directory: Path) -> None:
        """Appends ``directory`` to the namespace ``name``."""
        self._paths.setdefault(name, []).append(Path(directory))

    def add_path(self, directory: Path) -> None:
        self._paths[MAIN_NAMESPACE].append(Path(directory))

    def prepend_path(self, directory: Path) -> None:
        """Gives ``directory`` the highest priority in the default search list."""
        self._paths[MAIN_NAMESPACE].insert(0, Path(directory))

    # --- 查询 ---

    @property
    def search_order(self) -> List[Path]:
        return list(self._paths[MAIN_NAMESPACE])

    def namespaces(self) -> List[str]:
        return [name for name in self._paths if name != MAIN_NAMESPACE]

    def get_paths(self, name: str) -> List[Path]:
        return list(self._paths.get(name, []))

    def registrations(self) -> List[TemplatePath]:
        return [
            TemplatePath(name=name, directory=directory)
            for name in self.namespaces()
            for directory in self._paths[name]
        ]

    def report(self) -> PathsReport:
        return PathsReport(
            search_order=self.search_order,
            namespaces={name: self.get_paths(name) for name in self.namespaces()},
        )

    @staticmethod
    def _split_name(template: str) -> Tuple[str, str]:
        if template.startswith("@"):
            namespace, sep, rest = template[1:].partition("/")
            if not sep or not namespace or not rest:
                raise TemplateNotFound(template)
            return namespace, rest
        return MAIN_NAMESPACE, template

    def resolve(self, template: str) -> Path:
        """Returns the physical file that answers to the logical name ``template``."""
        namespace, short_name = self._split_name(template)
        # split_template_path 拒绝 '..'，防止越出注册目录
        pieces = split_template_path(short_name)
        for directory in self._paths.get(namespace, []):
            candidate = directory.joinpath(*pieces)
            if candidate.is_file():
                return candidate
        raise TemplateNotFound(template)

    # --- jinja2 BaseLoader ---

    def get_source(self, environment: Environment, template: str) -> Tuple[str, str, Callable[[], bool]]:
        path = self.resolve(template)
        source = path.read_text(encoding=self.encoding)
        mtime = os.path.getmtime(path)

        def uptodate() -> bool:
            try:
                return os.path.getmtime(path) == mtime
            except OSError:
                return False

        return source, str(path), uptodate

    def list_templates(self) -> List[str]:
        found = set()
        for name, directories in self._paths.items():
            prefix = "" if name == MAIN_NAMESPACE else f"@{name}/"
            for directory in directories:
                if not directory.is_dir():
                    continue
                for file in directory.rglob("*"):
                    if file.is_file():
                        found.add(prefix + file.relative_to(directory).as_posix())
        return sorted(found)


def build_view_paths(settings: ViewSettings, plugin_manager: PluginManagerInterface) -> ViewPathResolver:
    """
    Builds the search paths for one render.

    Debug builds search ``Core/View`` and let plugin and custom directories
    override it (they are prepended); other builds search only the
    precompiled ``Dinamic/View`` tree.
    """
    if not settings.folder.is_dir():
        raise ViewConfigurationError(f"FacturaScripts folder '{settings.folder}' does not exist.")

    main_dir = settings.core_view_dir if settings.debug else settings.dinamic_view_dir
    resolver = ViewPathResolver()

    if main_dir.is_dir():
        resolver.add_path(main_dir)
    else:
        logger.warning(f"Template directory '{main_dir}' does not exist.")

    if settings.core_view_dir.is_dir():
        resolver.register_path(CORE_NAMESPACE, settings.core_view_dir)

    if settings.plugins_enabled:
        for plugin_name in plugin_manager.enabled_plugins():
            candidates = (
                (PLUGIN_NAMESPACE_PREFIX + plugin_name, settings.plugin_view_dir(plugin_name)),
                (PLUGIN_EXTENSION_NAMESPACE_PREFIX + plugin_name, settings.plugin_extension_view_dir(plugin_name)),
            )
            for namespace, directory in candidates:
                if not directory.is_dir():
                    continue
                resolver.register_path(namespace, directory)
                if settings.debug:
                    resolver.prepend_path(directory)

    for name, directory in settings.custom_paths.items():
        if not directory.is_dir():
            logger.warning(f"Custom template path '{name}' ({directory}) does not exist. Skipping.")
            continue
        resolver.register_path(name, directory)
        if settings.debug:
            resolver.prepend_path(directory)

    logger.debug(f"Template search order: {[str(p) for p in resolver.search_order]}")
    return resolver
