# vistas_addons/core_helpers/assets.py

from typing import Dict, List, Tuple

ASSET_TYPES = ("css", "js", "mjs")


class AssetManager:
    """CSS / JS files a page asks the master template to include."""

    def __init__(self):
        self._assets: Dict[str, List[Tuple[int, int, str]]] = {kind: [] for kind in ASSET_TYPES}
        self._counter = 0

    def add(self, kind: str, asset: str, priority: int = 1) -> None:
        if kind not in self._assets:
            raise ValueError(f"Unknown asset type '{kind}'. Expected one of {ASSET_TYPES}.")
        self._counter += 1
        self._assets[kind].append((priority, self._counter, asset))

    def get(self, kind: str) -> List[str]:
        """Unique assets of ``kind``, highest priority first, then insertion order."""
        ordered = sorted(self._assets.get(kind, []), key=lambda item: (-item[0], item[1]))
        result: List[str] = []
        for _, _, asset in ordered:
            if asset not in result:
                result.append(asset)
        return result

    def clear(self) -> None:
        for kind in self._assets:
            self._assets[kind] = []
