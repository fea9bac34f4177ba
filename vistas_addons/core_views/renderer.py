# vistas_addons/core_views/renderer.py

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import jinja2
from jinja2 import Environment, FileSystemBytecodeCache, StrictUndefined, select_autoescape

from vistas.core.config import ViewSettings
from vistas.core.contracts import HookManager, PluginManagerInterface
from .contracts import ViewFragment
from .fragments import FragmentCollector
from .functions import FunctionRegistry
from .paths import ViewPathResolver, build_view_paths

logger = logging.getLogger(__name__)

INCLUDE_VIEWS_FUNCTION = "getIncludeViews"


class ViewRenderer:
    """
    Renders templates by logical name.

    Every call builds its own search paths, fragment collector and Jinja2
    environment from the immutable settings, so concurrent renders share
    nothing mutable. Template functions come from the registry handed over at
    construction; template variables are collected per render through the
    ``collect_template_vars`` hook.
    """

    def __init__(
        self,
        settings: ViewSettings,
        plugin_manager: PluginManagerInterface,
        functions: Optional[FunctionRegistry] = None,
        hook_manager: Optional[HookManager] = None,
    ):
        self.settings = settings
        self.plugin_manager = plugin_manager
        self.functions = functions if functions is not None else FunctionRegistry()
        self._hook_manager = hook_manager

    def build_resolver(self) -> ViewPathResolver:
        return build_view_paths(self.settings, self.plugin_manager)

    def build_collector(self) -> FragmentCollector:
        return FragmentCollector(self.settings, self.plugin_manager)

    def _bytecode_cache(self) -> Optional[FileSystemBytecodeCache]:
        # 调试模式下不缓存编译结果，方便实时修改模板
        if self.settings.debug or not self.settings.plugins_enabled:
            return None
        cache_dir = self.settings.cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)
        return FileSystemBytecodeCache(str(cache_dir))

    def build_environment(
        self,
        resolver: Optional[ViewPathResolver] = None,
        collector: Optional[FragmentCollector] = None,
    ) -> Environment:
        resolver = resolver or self.build_resolver()
        collector = collector or self.build_collector()

        env = Environment(
            loader=resolver,
            enable_async=True,
            undefined=StrictUndefined,
            autoescape=select_autoescape(enabled_extensions=("html", "twig"), default_for_string=True),
            auto_reload=True,
            bytecode_cache=self._bytecode_cache(),
            extensions=["jinja2.ext.debug"] if self.settings.debug else [],
        )

        def get_include_views(file_parent: str, position: str) -> List[ViewFragment]:
            return collector.collect(file_parent, position)

        env.globals[INCLUDE_VIEWS_FUNCTION] = get_include_views
        env.globals.update(self.functions.as_dict())
        return env

    async def template_vars(self, template: str) -> Dict[str, Any]:
        if self._hook_manager is None:
            return {}
        return await self._hook_manager.filter("collect_template_vars", {}, template_name=template)

    async def render(self, template: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Renders ``template`` with ``params``.

        Raises ``jinja2.TemplateNotFound`` when no search path provides the
        template, ``jinja2.TemplateSyntaxError`` and other ``TemplateError``
        subclasses when it fails to evaluate, and ``FragmentScanError`` when a
        plugin extension directory cannot be read.
        """
        env = self.build_environment()
        # 读取并编译模板是同步的文件操作，放到工作线程中
        compiled = await asyncio.to_thread(env.get_template, template)

        context: Dict[str, Any] = dict(params or {})
        # 模板变量覆盖同名参数
        context.update(await self.template_vars(template))

        try:
            return await compiled.render_async(context)
        except jinja2.TemplateError:
            logger.debug(f"Template '{template}' failed to render.", exc_info=True)
            raise
