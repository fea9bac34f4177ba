# vistas/core/hooks.py
import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from vistas.core.contracts import Container, HookManager as HookManagerInterface

logger = logging.getLogger(__name__)

T = TypeVar('T')

HookCallable = Callable[..., Awaitable[Any]]


@dataclass(order=True)
class HookImplementation:
    """一个钩子实现及其元数据。priority 越小越先执行。"""
    priority: int
    func: HookCallable = field(compare=False)
    plugin_name: str = field(compare=False, default="<unknown>")


class HookManager(HookManagerInterface):
    """
    Central registry and dispatcher for addon hooks.

    Two dispatch styles are supported:

    * ``trigger``: notification hooks, run concurrently, results ignored;
    * ``filter``: a processing chain where each implementation receives the
      previous result as its first argument and returns the new value.

    Implementations only receive the keyword arguments they declare. Shared
    context (the container, the hook manager itself and anything added with
    ``add_shared_context``) is merged with the per-call keyword arguments.
    """

    def __init__(self, container: Optional[Container] = None):
        self._hooks: Dict[str, List[HookImplementation]] = defaultdict(list)
        self._shared_context: Dict[str, Any] = {"hook_manager": self}
        if container is not None:
            self._shared_context["container"] = container
        logger.debug("HookManager initialized.")

    def add_shared_context(self, name: str, service: Any) -> None:
        if name in self._shared_context:
            logger.warning(f"Overwriting shared hook context '{name}'.")
        self._shared_context[name] = service

    def hook_names(self) -> List[str]:
        return list(self._hooks.keys())

    def _prepare_kwargs(self, func: HookCallable, call_context: Dict[str, Any], skip_first: bool) -> Dict[str, Any]:
        params = list(inspect.signature(func).parameters.values())
        if skip_first and params:
            # filter 钩子的第一个参数是被处理的数据
            params = params[1:]

        if any(p.kind == p.VAR_KEYWORD for p in params):
            return dict(call_context)

        return {
            p.name: call_context[p.name]
            for p in params
            if p.name in call_context and p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        }

    def add_implementation(
        self,
        hook_name: str,
        implementation: HookCallable,
        priority: int = 10,
        plugin_name: str = "<core>"
    ):
        if not asyncio.iscoroutinefunction(implementation):
            raise TypeError(f"Hook implementation for '{hook_name}' must be an async function.")

        self._hooks[hook_name].append(
            HookImplementation(priority=priority, func=implementation, plugin_name=plugin_name)
        )
        # sort() 是稳定的：相同优先级保持注册顺序
        self._hooks[hook_name].sort()
        logger.debug(f"Registered hook '{hook_name}' from '{plugin_name}' (priority {priority}).")

    async def trigger(self, hook_name: str, **kwargs: Any) -> None:
        implementations = self._hooks.get(hook_name)
        if not implementations:
            return

        call_context = {**self._shared_context, **kwargs}
        scheduled: List[Tuple[HookImplementation, Awaitable[Any]]] = []
        for impl in implementations:
            try:
                scheduled.append((impl, impl.func(**self._prepare_kwargs(impl.func, call_context, skip_first=False))))
            except Exception as e:
                logger.error(
                    f"Could not call NOTIFICATION hook '{hook_name}' from '{impl.plugin_name}': {e}",
                    exc_info=e
                )

        results = await asyncio.gather(*(coro for _, coro in scheduled), return_exceptions=True)
        for (impl, _), result in zip(scheduled, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Error in NOTIFICATION hook '{hook_name}' from '{impl.plugin_name}': {result}",
                    exc_info=result
                )

    async def filter(self, hook_name: str, data: T, **kwargs: Any) -> T:
        implementations = self._hooks.get(hook_name)
        if not implementations:
            return data

        call_context = {**self._shared_context, **kwargs}
        current = data
        for impl in implementations:
            try:
                prepared = self._prepare_kwargs(impl.func, call_context, skip_first=True)
                current = await impl.func(current, **prepared)
            except Exception as e:
                logger.error(
                    f"Error in FILTER hook '{hook_name}' from '{impl.plugin_name}'. Skipping. Error: {e}",
                    exc_info=e
                )
        return current
