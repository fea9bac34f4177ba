# vistas/core/config.py

import os
from pathlib import Path
from typing import Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

TRUE_VALUES = ("1", "true", "yes", "on")

DEFAULT_CURRENCIES: Dict[str, str] = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "MXN": "$",
    "ARS": "$",
    "CLP": "$",
    "COP": "$",
    "PEN": "S/",
}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


class ViewSettings(BaseModel):
    """
    Process-wide configuration of the view engine.

    The object is immutable: code that needs extra template paths or wants to
    render without plugins asks for a modified copy instead of mutating shared
    state.
    """
    model_config = ConfigDict(frozen=True)

    folder: Path = Field(default_factory=Path.cwd, description="FacturaScripts root folder (FS_FOLDER).")
    route: str = Field(default="", description="Public URL prefix used by asset() (FS_ROUTE).")
    debug: bool = True
    plugins_enabled: bool = True
    template_extension: str = ".html.twig"
    custom_paths: Dict[str, Path] = Field(default_factory=dict)

    lang: str = "es_ES"
    currency: str = "EUR"
    currencies: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CURRENCIES))
    decimals: int = Field(default=2, ge=0)
    decimal_separator: str = ","
    thousands_separator: str = " "
    currency_position: Literal["left", "right"] = "right"
    token_seed: str = ""

    @field_validator("template_extension")
    @classmethod
    def _extension_starts_with_dot(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("template_extension must start with '.'")
        return v

    @field_validator("route")
    @classmethod
    def _strip_route(cls, v: str) -> str:
        return v.rstrip("/")

    # --- 目录布局 ---

    @property
    def core_view_dir(self) -> Path:
        return self.folder / "Core" / "View"

    @property
    def dinamic_view_dir(self) -> Path:
        return self.folder / "Dinamic" / "View"

    @property
    def plugins_dir(self) -> Path:
        return self.folder / "Plugins"

    @property
    def myfiles_dir(self) -> Path:
        return self.folder / "MyFiles"

    @property
    def cache_dir(self) -> Path:
        return self.myfiles_dir / "Cache" / "Jinja"

    def plugin_view_dir(self, plugin_name: str) -> Path:
        return self.plugins_dir / plugin_name / "View"

    def plugin_extension_view_dir(self, plugin_name: str) -> Path:
        return self.plugins_dir / plugin_name / "Extension" / "View"

    # --- 派生副本 ---

    def with_path(self, name: str, directory: Path) -> "ViewSettings":
        paths = dict(self.custom_paths)
        paths[name] = Path(directory)
        return self.model_copy(update={"custom_paths": paths})

    def without_plugins(self, disable: bool = True) -> "ViewSettings":
        return self.model_copy(update={"plugins_enabled": not disable})

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> "ViewSettings":
        """Builds the settings from FS_* / VISTAS_* environment variables (and a .env file)."""
        load_dotenv(env_file)

        values = {
            "folder": Path(os.getenv("FS_FOLDER") or Path.cwd()),
            "route": os.getenv("FS_ROUTE", ""),
            "debug": _env_flag("FS_DEBUG", True),
            "plugins_enabled": not _env_flag("VISTAS_DISABLE_PLUGINS", False),
            "template_extension": os.getenv("VISTAS_TEMPLATE_EXTENSION", ".html.twig"),
            "lang": os.getenv("FS_LANG", "es_ES"),
            "currency": os.getenv("FS_CURRENCY", "EUR"),
            "decimals": int(os.getenv("FS_NF0", "2")),
            "decimal_separator": os.getenv("FS_NF1", ","),
            "thousands_separator": os.getenv("FS_NF2", " "),
            "currency_position": os.getenv("FS_CURRENCY_POS", "right"),
            "token_seed": os.getenv("VISTAS_TOKEN_SEED", ""),
        }
        values.update(overrides)
        return cls(**values)
