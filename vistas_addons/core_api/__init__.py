# vistas_addons/core_api/__init__.py
import logging
from typing import List

from fastapi import APIRouter

from vistas.core.contracts import Container, HookManager

logger = logging.getLogger(__name__)


async def provide_own_routers(routers: List[APIRouter]) -> List[APIRouter]:
    """钩子实现：在收集阶段才导入路由模块。"""
    from .system_router import system_api_router
    from .views_router import views_router

    routers.append(system_api_router)
    routers.append(views_router)
    logger.debug(f"[core_api] Provided {len(system_api_router.routes) + len(views_router.routes)} routes.")
    return routers


def register_plugin(container: Container, hook_manager: HookManager):
    logger.info("--> Registering [core_api] addon...")

    hook_manager.add_implementation(
        "collect_api_routers",
        provide_own_routers,
        priority=100,
        plugin_name="core_api"
    )
    logger.info("Addon [core_api] registered.")
