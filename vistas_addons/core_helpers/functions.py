# vistas_addons/core_helpers/functions.py

from typing import Any, List, Mapping, Optional, Union

from markupsafe import Markup

from vistas.core.config import ViewSettings
from vistas_addons.core_views.contracts import TemplateFunction
from .app_settings import AppSettings
from .currency import CurrencyFormatter, Number
from .tokens import MultiRequestProtection
from .translator import Translator


def asset_function(settings: ViewSettings) -> TemplateFunction:
    def asset(path: str) -> str:
        prefix = settings.route + "/"
        if path.startswith(prefix):
            return path
        return (prefix + path).replace("//", "/")
    return TemplateFunction("asset", asset)


def icon_function() -> TemplateFunction:
    def icon(icon: str, title: str = "") -> Markup:
        title_attr = Markup(' title="{}"').format(title) if title else Markup("")
        return Markup('<i class="{}"{}></i>').format(icon, title_attr)
    return TemplateFunction("icon", icon)


def form_token_function(tokens: MultiRequestProtection) -> TemplateFunction:
    def form_token(input: bool = True) -> Union[Markup, str]:
        token = tokens.new_token()
        if not input:
            return token
        return Markup('<input type="hidden" name="multireqtoken" value="{}"/>').format(token)
    return TemplateFunction("formToken", form_token)


def money_function(formatter: CurrencyFormatter) -> TemplateFunction:
    def money(number: Number, currency: str = "") -> str:
        return formatter.format(number, currency)
    return TemplateFunction("money", money)


def settings_function(app_settings: AppSettings) -> TemplateFunction:
    def settings(name: str, group: str = "default") -> Any:
        return app_settings.get(name, group)
    return TemplateFunction("settings", settings)


def trans_function(translator: Translator) -> TemplateFunction:
    def trans(txt: str, parameters: Optional[Mapping[str, Any]] = None, lang_code: str = "") -> str:
        if lang_code:
            return translator.custom_trans(lang_code, txt, parameters)
        return translator.trans(txt, parameters)
    return TemplateFunction("trans", trans)


def default_functions(
    settings: ViewSettings,
    app_settings: AppSettings,
    translator: Translator,
    formatter: CurrencyFormatter,
    tokens: MultiRequestProtection,
) -> List[TemplateFunction]:
    return [
        asset_function(settings),
        icon_function(),
        form_token_function(tokens),
        money_function(formatter),
        settings_function(app_settings),
        trans_function(translator),
    ]
