# vistas_addons/core_helpers/translator.py

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from vistas.core.config import ViewSettings
from vistas.core.contracts import PluginManagerInterface

logger = logging.getLogger(__name__)


class Translator:
    """
    JSON dictionary translator.

    For a language code the dictionaries are merged in this order, later
    files overriding earlier keys: ``Core/Translation/{lang}.json`` and then
    ``Plugins/{Name}/Translation/{lang}.json`` for every enabled plugin.
    Unknown keys are returned untranslated.
    """

    def __init__(self, settings: ViewSettings, plugin_manager: PluginManagerInterface):
        self.settings = settings
        self.plugin_manager = plugin_manager
        self.lang = settings.lang
        self._dictionaries: Dict[str, Dict[str, str]] = {}

    def _sources(self, lang: str) -> List[Path]:
        sources = [self.settings.folder / "Core" / "Translation" / f"{lang}.json"]
        if self.settings.plugins_enabled:
            for plugin in self.plugin_manager.enabled_plugins():
                sources.append(self.settings.plugins_dir / plugin / "Translation" / f"{lang}.json")
        return sources

    def _dictionary(self, lang: str) -> Dict[str, str]:
        if lang not in self._dictionaries:
            merged: Dict[str, str] = {}
            for source in self._sources(lang):
                if not source.is_file():
                    continue
                try:
                    merged.update(json.loads(source.read_text(encoding="utf-8")))
                except json.JSONDecodeError as e:
                    logger.error(f"Invalid translation file '{source}': {e}")
            self._dictionaries[lang] = merged
        return self._dictionaries[lang]

    @staticmethod
    def _replace(text: str, parameters: Optional[Mapping[str, object]]) -> str:
        for key, value in (parameters or {}).items():
            text = text.replace(str(key), str(value))
        return text

    def trans(self, txt: str, parameters: Optional[Mapping[str, object]] = None) -> str:
        return self.custom_trans(self.lang, txt, parameters)

    def custom_trans(self, lang: str, txt: str, parameters: Optional[Mapping[str, object]] = None) -> str:
        translated = self._dictionary(lang).get(txt, txt)
        return self._replace(translated, parameters)

    def get_lang(self) -> str:
        return self.lang
