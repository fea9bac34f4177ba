# vistas_addons/core_api/system_router.py

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from vistas.core.dependencies import Service
from vistas.core.contracts import PluginManagerInterface
from vistas.core.hooks import HookManager

logger = logging.getLogger(__name__)

system_api_router = APIRouter(
    prefix="/api",
    tags=["System Platform API"]
)


@system_api_router.get("/addons/manifest", response_model=List[Dict[str, Any]], summary="Get All Addon Manifests")
async def get_all_addon_manifests(
    manifests: List[Dict[str, Any]] = Depends(Service("loaded_addon_manifests"))
):
    """Manifests of the addons registered at startup, in registration order."""
    return manifests


@system_api_router.get("/system/hooks/manifest", response_model=Dict[str, List[str]], summary="Get Backend Hooks Manifest")
async def get_hooks_manifest(
    hook_manager: HookManager = Depends(Service("hook_manager"))
):
    return {"hooks": hook_manager.hook_names()}


@system_api_router.get("/system/plugins", response_model=Dict[str, List[str]], summary="Enabled FacturaScripts plugins")
async def get_enabled_plugins(
    plugin_manager: PluginManagerInterface = Depends(Service("plugin_manager"))
):
    return {"enabled": plugin_manager.enabled_plugins()}
