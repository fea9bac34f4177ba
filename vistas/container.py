# vistas/container.py

import logging
import threading
from typing import Any, Callable, Dict, List, Set

from vistas.core.contracts import Container as ContainerInterface

logger = logging.getLogger(__name__)


class Container(ContainerInterface):
    """线程安全的依赖注入容器：按名称注册工厂，支持单例与瞬态服务，并检测循环依赖。"""

    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, bool] = {}
        self._instances: Dict[str, Any] = {}
        # 工厂内部会再次 resolve，所以必须是可重入锁
        self._lock = threading.RLock()
        self._local = threading.local()

    def _resolution_stack(self) -> List[str]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def register(self, name: str, factory: Callable, singleton: bool = True) -> None:
        with self._lock:
            if name in self._factories:
                logger.warning(f"Service '{name}' is being re-registered; the previous factory is replaced.")
                self._instances.pop(name, None)
            self._factories[name] = factory
            self._singletons[name] = singleton

    def is_registered(self, name: str) -> bool:
        return name in self._factories

    def registered_names(self) -> Set[str]:
        return set(self._factories)

    def _build(self, name: str) -> Any:
        factory = self._factories[name]
        try:
            return factory(self)
        except TypeError:
            # 不接收容器参数的工厂 (lambda: ...)
            return factory()

    def resolve(self, name: str) -> Any:
        stack = self._resolution_stack()
        if name in stack:
            chain = " -> ".join(stack + [name])
            raise RuntimeError(f"Circular dependency detected: {chain}")

        stack.append(name)
        try:
            if name not in self._factories:
                raise ValueError(f"Service '{name}' not found in container.")

            if not self._singletons.get(name, True):
                return self._build(name)

            if name in self._instances:
                return self._instances[name]

            with self._lock:
                # double-checked: another thread may have built it meanwhile
                if name not in self._instances:
                    self._instances[name] = self._build(name)
                    logger.debug(f"Resolved singleton service '{name}'.")
                return self._instances[name]
        finally:
            stack.pop()
