# vistas_addons/core_helpers/tests/test_helpers.py

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from markupsafe import Markup

from vistas.core.config import ViewSettings
from vistas.core.plugin_manager import StaticPluginManager
from vistas_addons.core_helpers.app_settings import AppSettings
from vistas_addons.core_helpers.assets import AssetManager
from vistas_addons.core_helpers.currency import CurrencyFormatter, number_format
from vistas_addons.core_helpers.functions import (
    asset_function,
    default_functions,
    form_token_function,
    icon_function,
    trans_function,
)
from vistas_addons.core_helpers.minilog import MiniLog
from vistas_addons.core_helpers.tokens import MultiRequestProtection
from vistas_addons.core_helpers.translator import Translator


class FrozenClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


class TestNumberFormat:

    @pytest.mark.parametrize("number, decimals, expected", [
        (1234.5, 2, "1 234,50"),
        (2.675, 2, "2,68"),
        (Decimal("0.005"), 2, "0,01"),
        (-1234567.891, 2, "-1 234 567,89"),
        (1234.5, 0, "1 235"),
        (999, 3, "999,000"),
    ])
    def test_rounds_half_up_and_groups_thousands(self, number, decimals, expected):
        assert number_format(number, decimals, ",", " ") == expected

    def test_custom_separators(self):
        assert number_format(1234567.5, 1, ".", ",") == "1,234,567.5"


class TestCurrencyFormatter:

    def test_symbol_on_the_right_by_default(self, tmp_path: Path):
        formatter = CurrencyFormatter(ViewSettings(folder=tmp_path))
        assert formatter.format(1234.5) == "1 234,50 €"

    def test_symbol_on_the_left(self, tmp_path: Path):
        formatter = CurrencyFormatter(ViewSettings(folder=tmp_path, currency_position="left", decimal_separator="."))
        assert formatter.format(10, "USD") == "$10.00"

    def test_unknown_currency_falls_back_to_default(self, tmp_path: Path):
        formatter = CurrencyFormatter(ViewSettings(folder=tmp_path))
        assert formatter.exists("GBP")
        assert not formatter.exists("XXX")
        assert formatter.format(1, "XXX") == "1,00 €"

    def test_explicit_decimals(self, tmp_path: Path):
        formatter = CurrencyFormatter(ViewSettings(folder=tmp_path))
        assert formatter.format(3.14159, decimals=4) == "3,1416 €"


class TestMultiRequestProtection:

    def test_token_is_valid_once(self):
        tokens = MultiRequestProtection(seed="s", clock=FrozenClock(datetime(2024, 5, 1, 10, tzinfo=timezone.utc)))
        token = tokens.new_token()

        digest, _, random_part = token.partition("|")
        assert len(digest) == 40
        assert len(random_part) == 6
        assert tokens.validate(token) is True
        assert tokens.validate(token) is False

    def test_token_expires_after_four_hours(self):
        clock = FrozenClock(datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc))
        tokens = MultiRequestProtection(seed="s", clock=clock)
        still_valid = tokens.new_token()
        expired = tokens.new_token()

        clock.moment += timedelta(hours=3)
        assert tokens.validate(still_valid) is True

        clock.moment += timedelta(hours=1)
        assert tokens.validate(expired) is False

    def test_used_tokens_outside_the_window_are_forgotten(self):
        clock = FrozenClock(datetime(2024, 5, 1, 0, 15, tzinfo=timezone.utc))
        tokens = MultiRequestProtection(seed="s", clock=clock)

        for _ in range(48):
            for _ in range(10):
                assert tokens.validate(tokens.new_token())
            clock.moment += timedelta(hours=1)

        # 最后一次 validate 时只保留有效期内的四个小时
        assert tokens.used_count() == 40

        clock.moment += timedelta(hours=5)
        tokens.validate("garbage|abcdef")
        assert tokens.used_count() == 40
        tokens.validate(tokens.new_token())
        assert tokens.used_count() == 1

    def test_other_seed_or_garbage_is_rejected(self):
        clock = FrozenClock(datetime(2024, 5, 1, 10, tzinfo=timezone.utc))
        foreign = MultiRequestProtection(seed="other", clock=clock).new_token()
        tokens = MultiRequestProtection(seed="s", clock=clock)

        assert tokens.validate(foreign) is False
        assert tokens.validate("garbage") is False
        assert tokens.validate(tokens.new_token().split("|")[0] + "|") is False


class TestTranslator:

    @pytest.fixture
    def translator(self, tmp_path: Path, write_file) -> Translator:
        write_file("Core/Translation/es_ES.json", json.dumps({"save": "Guardar", "hello": "Hola %name%"}))
        write_file("Plugins/Crm/Translation/es_ES.json", json.dumps({"save": "Grabar"}))
        write_file("Plugins/Crm/Translation/en_EN.json", json.dumps({"save": "Save"}))
        return Translator(ViewSettings(folder=tmp_path), StaticPluginManager(["Crm"]))

    def test_plugins_override_core(self, translator: Translator):
        assert translator.trans("save") == "Grabar"

    def test_parameters_are_replaced(self, translator: Translator):
        assert translator.trans("hello", {"%name%": "Ana"}) == "Hola Ana"

    def test_unknown_keys_are_returned_as_is(self, translator: Translator):
        assert translator.trans("missing-key") == "missing-key"

    def test_custom_language(self, translator: Translator):
        assert translator.custom_trans("en_EN", "save") == "Save"
        assert translator.get_lang() == "es_ES"

    def test_invalid_dictionary_is_ignored(self, tmp_path: Path, write_file):
        write_file("Core/Translation/es_ES.json", "{broken")
        translator = Translator(ViewSettings(folder=tmp_path), StaticPluginManager([]))
        assert translator.trans("save") == "save"


class TestAppSettings:

    def test_reads_groups_from_yaml(self, tmp_path: Path, write_file):
        path = write_file("MyFiles/settings.yaml", "default:\n  codpais: ESP\nemail:\n  host: smtp.local\n")
        app_settings = AppSettings.from_file(path)

        assert app_settings.get("codpais") == "ESP"
        assert app_settings.get("host", "email") == "smtp.local"
        assert app_settings.get("missing", default="x") == "x"

    def test_missing_file_means_empty(self, tmp_path: Path):
        assert AppSettings.from_file(tmp_path / "nope.yaml").group() == {}

    def test_non_mapping_file_is_an_error(self, write_file):
        with pytest.raises(ValueError):
            AppSettings.from_file(write_file("MyFiles/settings.yaml", "- a\n- b\n"))


class TestAssetManager:

    def test_priority_then_insertion_order_without_duplicates(self):
        assets = AssetManager()
        assets.add("css", "a.css")
        assets.add("css", "b.css", priority=5)
        assets.add("css", "a.css")
        assets.add("js", "app.js")

        assert assets.get("css") == ["b.css", "a.css"]
        assert assets.get("js") == ["app.js"]

        assets.clear()
        assert assets.get("css") == []

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            AssetManager().add("png", "x.png")


class TestMiniLog:

    def test_read_filters_by_level(self):
        log = MiniLog()
        log.info("saved")
        log.error("failed", {"id": 3})

        assert [m.message for m in log.read()] == ["saved", "failed"]
        assert [m.context for m in log.read(["error"])] == [{"id": 3}]

        log.clear()
        assert log.read() == []

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            MiniLog().log("loud", "x")


class TestTemplateFunctions:

    @pytest.mark.parametrize("route, path, expected", [
        ("/fs", "css/app.css", "/fs/css/app.css"),
        ("/fs", "/css/app.css", "/fs/css/app.css"),
        ("/fs", "/fs/css/app.css", "/fs/css/app.css"),
        ("", "css/app.css", "/css/app.css"),
    ])
    def test_asset(self, tmp_path: Path, route, path, expected):
        asset = asset_function(ViewSettings(folder=tmp_path, route=route)).func
        assert asset(path) == expected

    def test_icon_escapes_its_arguments(self):
        icon = icon_function().func
        assert icon("fa-solid fa-save") == Markup('<i class="fa-solid fa-save"></i>')
        assert icon("fa-x", "<b>") == Markup('<i class="fa-x" title="&lt;b&gt;"></i>')

    def test_form_token(self):
        tokens = MultiRequestProtection(seed="s")
        form_token = form_token_function(tokens).func

        field = form_token()
        raw = form_token(False)

        assert field.startswith('<input type="hidden" name="multireqtoken" value="')
        assert isinstance(field, Markup)
        assert tokens.validate(raw)

    def test_trans_with_language(self, tmp_path: Path, write_file):
        write_file("Core/Translation/en_EN.json", json.dumps({"save": "Save %n%"}))
        translator = Translator(ViewSettings(folder=tmp_path), StaticPluginManager([]))
        trans = trans_function(translator).func
        assert trans("save", {"%n%": "1"}, "en_EN") == "Save 1"
        assert trans("save") == "save"

    def test_default_function_names(self, tmp_path: Path):
        settings = ViewSettings(folder=tmp_path)
        functions = default_functions(
            settings=settings,
            app_settings=AppSettings({"default": {"codpais": "ESP"}}),
            translator=Translator(settings, StaticPluginManager([])),
            formatter=CurrencyFormatter(settings),
            tokens=MultiRequestProtection(),
        )
        by_name = {f.name: f.func for f in functions}

        assert sorted(by_name) == ["asset", "formToken", "icon", "money", "settings", "trans"]
        assert by_name["money"](5) == "5,00 €"
        assert by_name["settings"]("codpais") == "ESP"
