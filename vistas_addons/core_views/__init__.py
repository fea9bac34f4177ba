# vistas_addons/core_views/__init__.py

import logging
from typing import List

from vistas.core.contracts import Container, HookManager
from .contracts import TemplateFunction
from .functions import FunctionRegistry
from .renderer import ViewRenderer

logger = logging.getLogger(__name__)


# --- 服务工厂 ---
def _create_view_renderer(container: Container) -> ViewRenderer:
    return ViewRenderer(
        settings=container.resolve("view_settings"),
        plugin_manager=container.resolve("plugin_manager"),
        functions=container.resolve("template_functions"),
        hook_manager=container.resolve("hook_manager"),
    )


# --- 钩子实现 ---
async def populate_template_functions(container: Container, hook_manager: HookManager):
    """在所有插件注册完毕后，收集它们提供的模板函数。"""
    registry: FunctionRegistry = container.resolve("template_functions")
    functions: List[TemplateFunction] = await hook_manager.filter("collect_template_functions", [])
    for function in functions:
        registry.add(function)
    logger.info(f"Template function registry populated: {registry.names()}")


# --- 主注册函数 ---
def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> Registering [core_views] addon...")

    container.register("template_functions", lambda: FunctionRegistry(), singleton=True)
    container.register("view_renderer", _create_view_renderer, singleton=True)

    hook_manager.add_implementation(
        "services_post_register",
        populate_template_functions,
        plugin_name="core_views"
    )

    logger.info("Addon [core_views] registered.")
