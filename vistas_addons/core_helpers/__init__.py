# vistas_addons/core_helpers/__init__.py

import logging
from typing import Any, Dict, List

from vistas.core.config import ViewSettings
from vistas.core.contracts import Container, HookManager
from vistas_addons.core_views.contracts import TemplateFunction
from .app_settings import AppSettings
from .assets import AssetManager
from .currency import CurrencyFormatter
from .functions import default_functions
from .minilog import MiniLog
from .tokens import MultiRequestProtection
from .translator import Translator

logger = logging.getLogger(__name__)


# --- 服务工厂 ---
def _create_app_settings(container: Container) -> AppSettings:
    settings: ViewSettings = container.resolve("view_settings")
    return AppSettings.from_file(settings.myfiles_dir / "settings.yaml")


def _create_translator(container: Container) -> Translator:
    return Translator(container.resolve("view_settings"), container.resolve("plugin_manager"))


def _create_currency_formatter(container: Container) -> CurrencyFormatter:
    return CurrencyFormatter(container.resolve("view_settings"))


def _create_multireq_protection(container: Container) -> MultiRequestProtection:
    settings: ViewSettings = container.resolve("view_settings")
    return MultiRequestProtection(seed=settings.token_seed or str(settings.folder))


# --- 钩子实现 ---
async def provide_template_functions(functions: List[TemplateFunction], container: Container) -> List[TemplateFunction]:
    functions.extend(default_functions(
        settings=container.resolve("view_settings"),
        app_settings=container.resolve("app_settings"),
        translator=container.resolve("translator"),
        formatter=container.resolve("currency_formatter"),
        tokens=container.resolve("multireq_protection"),
    ))
    logger.debug("Provided the default template functions.")
    return functions


async def provide_template_vars(template_vars: Dict[str, Any], container: Container) -> Dict[str, Any]:
    """每次渲染都创建新的 AssetManager 和 MiniLog，避免请求之间共享状态。"""
    template_vars.update({
        "appSettings": container.resolve("app_settings"),
        "assetManager": AssetManager(),
        "i18n": container.resolve("translator"),
        "log": MiniLog(),
    })
    return template_vars


# --- 主注册函数 ---
def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> Registering [core_helpers] addon...")

    container.register("app_settings", _create_app_settings, singleton=True)
    container.register("translator", _create_translator, singleton=True)
    container.register("currency_formatter", _create_currency_formatter, singleton=True)
    container.register("multireq_protection", _create_multireq_protection, singleton=True)

    hook_manager.add_implementation(
        "collect_template_functions",
        provide_template_functions,
        plugin_name="core_helpers"
    )
    hook_manager.add_implementation(
        "collect_template_vars",
        provide_template_vars,
        plugin_name="core_helpers"
    )

    logger.info("Addon [core_helpers] registered.")
