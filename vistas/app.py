# vistas/app.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vistas.container import Container
from vistas.core.config import ViewSettings
from vistas.core.contracts import PluginManagerInterface
from vistas.core.hooks import HookManager
from vistas.core.loader import AddonLoader
from vistas.core.plugin_manager import PluginManager


def register_core_services(
    container: Container,
    hook_manager: HookManager,
    settings: ViewSettings,
    plugin_manager: PluginManagerInterface,
) -> None:
    """平台核心服务：应用和命令行共用同一套注册。"""
    container.register("container", lambda: container)
    container.register("hook_manager", lambda: hook_manager)
    container.register("view_settings", lambda: settings)
    container.register("plugin_manager", lambda: plugin_manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- 启动阶段 ---
    container = Container()
    hook_manager = HookManager(container)

    settings: ViewSettings = getattr(app.state, "settings", None) or ViewSettings.from_env()
    plugin_manager = getattr(app.state, "plugin_manager", None) or PluginManager(settings.folder)

    # 1. 平台核心服务
    register_core_services(container, hook_manager, settings, plugin_manager)

    # 2. 加载插件 (同步注册)
    AddonLoader(container, hook_manager).load_addons()

    logger = logging.getLogger(__name__)
    logger.info("--- Assembling FastAPI application ---")

    app.state.container = container
    hook_manager.add_shared_context("app", app)

    # 3. 所有服务注册完毕后的异步初始化 (例如填充模板函数注册表)
    await hook_manager.trigger("services_post_register")

    # 4. 收集各插件提供的 API 路由
    routers: List[APIRouter] = await hook_manager.filter("collect_api_routers", [])
    if routers:
        logger.info(f"Collected {len(routers)} router(s) from addons.")
        for router in routers:
            app.include_router(router)
            logger.debug(f"Included router: prefix='{router.prefix}', tags={router.tags}")
    else:
        logger.warning("No API routers were provided by the addons.")

    await hook_manager.trigger("app_startup_complete")
    logger.info("--- Vistas view engine ready ---")
    yield
    # --- 关闭阶段 ---
    logger.info("--- Vistas view engine shutting down ---")
    await hook_manager.trigger("app_shutdown")


def create_app(settings: Optional[ViewSettings] = None, plugin_manager=None) -> FastAPI:
    """应用工厂函数。settings / plugin_manager 为空时在启动阶段从环境变量构建。"""
    app = FastAPI(
        title="Vistas view engine",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.plugin_manager = plugin_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
