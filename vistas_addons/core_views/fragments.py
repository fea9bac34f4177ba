# vistas_addons/core_views/fragments.py

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from vistas.core.config import ViewSettings
from vistas.core.contracts import PluginManagerInterface
from .contracts import (
    DEFAULT_FRAGMENT_ORDER,
    ORDER_KEY_WIDTH,
    PLUGIN_EXTENSION_NAMESPACE_PREFIX,
    FragmentName,
    FragmentScanError,
    SkippedFragment,
    SkipReason,
    ViewFragment,
)

logger = logging.getLogger(__name__)


def strip_extension(name: str, extension: str) -> Optional[str]:
    if not name.endswith(extension):
        return None
    return name[: -len(extension)]


def parent_base_name(file_parent: str, extension: str) -> str:
    """'Master/MenuTemplate.html.twig' -> 'MenuTemplate'."""
    last_segment = file_parent.split("/")[-1]
    stripped = strip_extension(last_segment, extension)
    return last_segment if stripped is None else stripped


def order_key(raw: Optional[str]) -> str:
    """
    Left-pads the order token with zeros to a fixed width.

    Keys are compared as strings, so the padding is what makes '00002' sort
    before '00010'. Tokens longer than the width are returned unchanged.
    """
    value = DEFAULT_FRAGMENT_ORDER if raw is None else raw
    return value.rjust(ORDER_KEY_WIDTH, "0")


def parse_fragment_name(filename: str, extension: str) -> Union[FragmentName, SkippedFragment]:
    """Splits '{base}_{position}[_{order}]{extension}' into its tokens."""
    stem = strip_extension(filename, extension)
    if stem is None:
        return SkippedFragment(filename, SkipReason.NOT_A_TEMPLATE)

    tokens = stem.split("_")
    if len(tokens) < 2:
        return SkippedFragment(filename, SkipReason.MALFORMED)

    return FragmentName(
        base=tokens[0],
        position=tokens[1],
        order=tokens[2] if len(tokens) > 2 else None,
    )


def match_fragment(
    filename: str, base: str, position: str, extension: str
) -> Union[FragmentName, SkippedFragment]:
    parsed = parse_fragment_name(filename, extension)
    if isinstance(parsed, SkippedFragment):
        return parsed
    if parsed.base != base:
        return SkippedFragment(filename, SkipReason.OTHER_PARENT)
    if parsed.position != position:
        return SkippedFragment(filename, SkipReason.OTHER_POSITION)
    return parsed


def _sort_key(fragment: ViewFragment) -> Tuple[str, str, str]:
    return fragment.file, fragment.position, fragment.order


class FragmentCollector:
    """
    Finds the partial views that enabled plugins contribute to an insertion
    point of a template.

    Fragments live in ``Plugins/{Name}/Extension/View`` and follow the naming
    convention ``{base}_{position}[_{order}]{extension}``. A fresh scan is done
    for every call; nothing is cached.
    """

    def __init__(self, settings: ViewSettings, plugin_manager: PluginManagerInterface):
        self.settings = settings
        self.plugin_manager = plugin_manager

    def _walk_files(self, plugin: str, root: Path) -> Iterator[Path]:
        def _fail(error: OSError):
            raise FragmentScanError(plugin, root, error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
            # 排序保证同一插件内的扫描顺序稳定
            dirnames.sort()
            for filename in sorted(filenames):
                yield Path(dirpath) / filename

    def collect(self, file_parent: str, position: str) -> List[ViewFragment]:
        """
        Fragments of ``file_parent`` at ``position``, sorted by order key.

        ``path`` keeps the location relative to ``Extension/View`` (files in
        sub-directories become ``@PluginExtensionX/Sub/Name...``, not the bare
        filename), and files without the template extension are never
        tokenized.
        """
        if not self.settings.plugins_enabled:
            return []

        extension = self.settings.template_extension
        base = parent_base_name(file_parent, extension)
        fragments: List[ViewFragment] = []

        for plugin in self.plugin_manager.enabled_plugins():
            root = self.settings.plugin_extension_view_dir(plugin)
            if not root.exists():
                continue

            for file in self._walk_files(plugin, root):
                matched = match_fragment(file.name, base, position, extension)
                if isinstance(matched, SkippedFragment):
                    if matched.reason in (SkipReason.MALFORMED, SkipReason.NOT_A_TEMPLATE):
                        logger.debug(f"Ignoring '{file}' in plugin '{plugin}': {matched.reason.value}.")
                    continue

                relative = file.relative_to(root).as_posix()
                fragments.append(ViewFragment(
                    path=f"@{PLUGIN_EXTENSION_NAMESPACE_PREFIX}{plugin}/{relative}",
                    file=matched.base,
                    position=matched.position,
                    order=order_key(matched.order),
                    plugin=plugin,
                    source=file,
                ))

        if not fragments:
            return fragments

        # 按 (file, position, order) 做字符串比较；sorted() 稳定，平局保持插件顺序
        fragments = sorted(fragments, key=_sort_key)
        logger.debug(f"{len(fragments)} fragment(s) for '{base}' at '{position}': {[f.path for f in fragments]}")
        return fragments
