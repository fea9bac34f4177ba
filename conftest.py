# conftest.py

import json
from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from vistas.app import create_app
from vistas.core.config import ViewSettings
from vistas.core.plugin_manager import PluginManager

# Edit 模板在 top 插入点引入插件片段
EDIT_TEMPLATE = (
    "<h1>{{ title }}</h1>"
    "{% for view in getIncludeViews('Edit.html.twig', 'top') %}{% include view.path %}{% endfor %}"
)

SAMPLE_TREE = {
    "Core/View/Edit.html.twig": EDIT_TEMPLATE,
    "Core/View/Master/Base.html.twig": "core base",
    "Dinamic/View/Edit.html.twig": "dinamic edit",
    "Plugins/Crm/View/Master/Base.html.twig": "crm base",
    "Plugins/Crm/Extension/View/Edit_top_5.html.twig": "[crm-5]",
    "Plugins/Crm/Extension/View/Edit_top.html.twig": "[crm-10]",
    "Plugins/Sales/Extension/View/Edit_top_2.html.twig": "[sales-2]",
    "Plugins/Sales/Extension/View/Edit_bottom.html.twig": "[sales-bottom]",
}

SAMPLE_PLUGINS = [
    {"name": "Crm", "enabled": True, "order": 1},
    {"name": "Sales", "enabled": True, "order": 2},
    {"name": "Legacy", "enabled": False, "order": 3},
]


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Writes a file relative to the temporary FacturaScripts root."""
    def _write(relative: str, content: str = "") -> Path:
        target = tmp_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target
    return _write


@pytest.fixture
def fs_root(tmp_path: Path, write_file) -> Path:
    """A small FacturaScripts tree with two enabled plugins (Crm, Sales) and a disabled one."""
    for relative, content in SAMPLE_TREE.items():
        write_file(relative, content)
    write_file("MyFiles/plugins.json", json.dumps(SAMPLE_PLUGINS))
    return tmp_path


@pytest.fixture
def settings(fs_root: Path) -> ViewSettings:
    return ViewSettings(folder=fs_root, route="/fs")


@pytest.fixture
def plugin_manager(fs_root: Path) -> PluginManager:
    return PluginManager(fs_root)


@pytest.fixture
async def client(settings: ViewSettings, plugin_manager: PluginManager) -> AsyncGenerator[AsyncClient, None]:
    """启动完整的应用生命周期 (插件加载、钩子、路由收集) 的 AsyncClient。"""
    app = create_app(settings=settings, plugin_manager=plugin_manager)
    async with LifespanManager(app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
