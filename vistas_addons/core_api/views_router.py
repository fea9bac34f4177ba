# vistas_addons/core_api/views_router.py

import logging
from typing import Any, Dict, List

import jinja2
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from vistas.core.dependencies import Service
from vistas_addons.core_views.contracts import PathsReport, ViewError, ViewFragment
from vistas_addons.core_views.renderer import ViewRenderer

logger = logging.getLogger(__name__)

views_router = APIRouter(
    prefix="/api/views",
    tags=["Views"]
)


class RenderRequest(BaseModel):
    template: str = Field(..., description="Logical template name, e.g. 'Master/MenuTemplate.html.twig'.")
    params: Dict[str, Any] = Field(default_factory=dict)


# 扫描文件系统的处理函数是同步的：FastAPI 在线程池中执行它们，不阻塞事件循环
@views_router.get("/paths", response_model=PathsReport, summary="Template search order and namespaces")
def get_view_paths(renderer: ViewRenderer = Depends(Service("view_renderer"))):
    try:
        return renderer.build_resolver().report()
    except ViewError as e:
        logger.error(f"Cannot build the template search paths: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@views_router.get("/fragments", response_model=List[ViewFragment], summary="Plugin fragments for an insertion point")
def get_view_fragments(
    template: str = Query(..., description="Parent template name."),
    position: str = Query(..., description="Insertion point, e.g. 'top'."),
    renderer: ViewRenderer = Depends(Service("view_renderer")),
):
    try:
        return renderer.build_collector().collect(template, position)
    except ViewError as e:
        logger.error(f"Fragment collection failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@views_router.post("/render", response_class=HTMLResponse, summary="Render a template by logical name")
async def render_view(
    request_body: RenderRequest,
    renderer: ViewRenderer = Depends(Service("view_renderer")),
):
    try:
        html = await renderer.render(request_body.template, request_body.params)
    except jinja2.TemplateNotFound as e:
        raise HTTPException(status_code=404, detail=f"Template '{e.name}' not found.")
    except jinja2.TemplateSyntaxError as e:
        raise HTTPException(status_code=422, detail=f"Syntax error in '{e.name}' line {e.lineno}: {e.message}")
    except (jinja2.TemplateError, ViewError) as e:
        logger.error(f"Rendering '{request_body.template}' failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Rendering failed: {e}")
    return HTMLResponse(content=html)
