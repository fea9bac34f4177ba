# vistas_addons/core_views/contracts.py

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# 命名空间前缀：@Core/..., @PluginXxx/..., @PluginExtensionXxx/...
CORE_NAMESPACE = "Core"
PLUGIN_NAMESPACE_PREFIX = "Plugin"
PLUGIN_EXTENSION_NAMESPACE_PREFIX = "PluginExtension"

DEFAULT_FRAGMENT_ORDER = "10"
ORDER_KEY_WIDTH = 5


# --- 错误类型 ---

class ViewError(Exception):
    """Base class for view-engine errors raised outside the template language."""


class ViewConfigurationError(ViewError):
    """Settings that cannot produce a usable search path."""


class FragmentScanError(ViewError):
    """A plugin extension directory could not be read. Always fatal for the render."""

    def __init__(self, plugin: str, directory: Path, cause: OSError):
        super().__init__(f"Cannot scan view fragments of plugin '{plugin}' in '{directory}': {cause}")
        self.plugin = plugin
        self.directory = directory
        self.cause = cause


# --- 数据模型 ---

class TemplatePath(BaseModel):
    """A named search directory."""
    model_config = ConfigDict(frozen=True)

    name: str
    directory: Path


class ViewFragment(BaseModel):
    """A plugin partial view to splice into an insertion point of a parent template."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Logical template name, e.g. '@PluginExtensionCrm/Edit_top_5.html.twig'.")
    file: str = Field(..., description="Base name of the parent template.")
    position: str
    order: str = Field(..., description="Zero-padded order key used for sorting.")
    plugin: str
    source: Path = Field(..., description="Physical file that provides the fragment.")


class SkipReason(str, Enum):
    NOT_A_TEMPLATE = "not_a_template"
    MALFORMED = "malformed"
    OTHER_PARENT = "other_parent"
    OTHER_POSITION = "other_position"


@dataclass(frozen=True)
class FragmentName:
    """A fragment filename split into its tokens."""
    base: str
    position: str
    order: Optional[str] = None


@dataclass(frozen=True)
class SkippedFragment:
    filename: str
    reason: SkipReason


@dataclass(frozen=True)
class TemplateFunction:
    """A callable exposed to templates under ``name``."""
    name: str
    func: Callable[..., Any]


class PathsReport(BaseModel):
    search_order: List[Path]
    namespaces: Dict[str, List[Path]]
