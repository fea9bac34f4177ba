# vistas_addons/core_views/functions.py

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from .contracts import TemplateFunction

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """Named callables installed as globals in every template environment."""

    def __init__(self, functions: Iterable[TemplateFunction] = ()):
        self._functions: Dict[str, TemplateFunction] = {}
        for function in functions:
            self.add(function)

    def add(self, function: TemplateFunction) -> None:
        if function.name in self._functions:
            logger.warning(f"Template function '{function.name}' is being replaced.")
        self._functions[function.name] = function
        logger.debug(f"Template function '{function.name}' registered.")

    def register(self, name: str, func: Callable[..., Any]) -> None:
        self.add(TemplateFunction(name=name, func=func))

    def get(self, name: str) -> Optional[TemplateFunction]:
        return self._functions.get(name)

    def names(self):
        return list(self._functions)

    def as_dict(self) -> Dict[str, Callable[..., Any]]:
        return {name: function.func for name, function in self._functions.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[TemplateFunction]:
        return iter(list(self._functions.values()))

    def __len__(self) -> int:
        return len(self._functions)
