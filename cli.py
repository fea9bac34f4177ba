# cli.py
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jinja2
import typer

import vistas_addons.core_helpers as core_helpers
import vistas_addons.core_views as core_views
from vistas.app import register_core_services
from vistas.container import Container
from vistas.core.config import ViewSettings
from vistas.core.hooks import HookManager
from vistas.core.plugin_manager import PluginManager
from vistas_addons.core_views.contracts import ViewError
from vistas_addons.core_views.renderer import ViewRenderer

app = typer.Typer(name="vistas", help="Vistas view engine command-line interface.")
plugin_app = typer.Typer(name="plugins", help="Inspect the FacturaScripts plugin list.")
app.add_typer(plugin_app)

FolderOption = typer.Option(None, "--folder", "-f", help="FacturaScripts root folder. Defaults to FS_FOLDER or the current directory.")
DebugOption = typer.Option(None, "--debug/--no-debug", help="Override FS_DEBUG.")

# 命令行只需要渲染相关的插件：不配置日志 (避免污染输出)，也不挂载 HTTP 路由
CLI_ADDONS = (core_views, core_helpers)


def _settings(folder: Optional[Path], debug: Optional[bool], no_plugins: bool = False) -> ViewSettings:
    overrides = {}
    if folder is not None:
        overrides["folder"] = folder
    if debug is not None:
        overrides["debug"] = debug
    if no_plugins:
        overrides["plugins_enabled"] = False
    return ViewSettings.from_env(**overrides)


async def _build_renderer(settings: ViewSettings) -> ViewRenderer:
    """与应用启动相同的装配：核心服务、插件注册、services_post_register。"""
    container = Container()
    hook_manager = HookManager(container)
    register_core_services(container, hook_manager, settings, PluginManager(settings.folder))

    for addon in CLI_ADDONS:
        addon.register_plugin(container, hook_manager)
    await hook_manager.trigger("services_post_register")
    return container.resolve("view_renderer")


def _renderer(settings: ViewSettings) -> ViewRenderer:
    return asyncio.run(_build_renderer(settings))


async def _render(settings: ViewSettings, template: str, params: Dict[str, Any]) -> str:
    renderer = await _build_renderer(settings)
    return await renderer.render(template, params)


@app.command("paths")
def show_paths(folder: Optional[Path] = FolderOption, debug: Optional[bool] = DebugOption):
    """Prints the template search order and the registered namespaces."""
    try:
        report = _renderer(_settings(folder, debug)).build_resolver().report()
    except ViewError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho("Search order:", bold=True)
    for i, directory in enumerate(report.search_order, start=1):
        typer.echo(f"  {i}. {directory}")
    typer.secho("Namespaces:", bold=True)
    for name, directories in report.namespaces.items():
        for directory in directories:
            typer.echo(f"  @{name} -> {directory}")


@app.command("fragments")
def show_fragments(
    template: str = typer.Argument(..., help="Parent template, e.g. 'Master/MenuTemplate.html.twig'."),
    position: str = typer.Argument(..., help="Insertion point, e.g. 'top'."),
    folder: Optional[Path] = FolderOption,
    debug: Optional[bool] = DebugOption,
):
    """Lists the plugin fragments that would be included at an insertion point."""
    try:
        fragments = _renderer(_settings(folder, debug)).build_collector().collect(template, position)
    except ViewError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not fragments:
        typer.echo("No fragments.")
        return
    for fragment in fragments:
        typer.echo(f"{fragment.order}  {fragment.path}")


@app.command("render")
def render_template(
    template: str = typer.Argument(..., help="Logical template name."),
    param: List[str] = typer.Option([], "--param", "-p", help="Template parameter as key=value (value parsed as JSON when possible)."),
    folder: Optional[Path] = FolderOption,
    debug: Optional[bool] = DebugOption,
    no_plugins: bool = typer.Option(False, "--no-plugins", help="Render with plugins disabled."),
):
    """Renders a template and prints the result."""
    params = {}
    for item in param:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            typer.secho(f"Error: invalid parameter '{item}', expected key=value.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        try:
            params[key] = json.loads(raw)
        except json.JSONDecodeError:
            params[key] = raw

    settings = _settings(folder, debug, no_plugins)
    try:
        html = asyncio.run(_render(settings, template, params))
    except jinja2.TemplateNotFound as e:
        typer.secho(f"Error: template '{e.name}' not found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except (jinja2.TemplateError, ViewError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(html)


@plugin_app.command("list")
def list_plugins(folder: Optional[Path] = FolderOption):
    """Lists the enabled plugins in load order."""
    settings = _settings(folder, None)
    try:
        names = PluginManager(settings.folder).enabled_plugins()
    except ValueError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not names:
        typer.echo("No enabled plugins.")
        return
    for i, name in enumerate(names, start=1):
        exists = (settings.plugins_dir / name).is_dir()
        marker = "" if exists else typer.style("  (missing folder)", fg=typer.colors.YELLOW)
        typer.echo(f"{i}. {name}{marker}")


if __name__ == "__main__":
    app()
