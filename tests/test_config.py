"""
Tests for TOML configuration loading.
"""

from pathlib import Path

import pytest

from timegrid.config import ColorsConfig, Config, LocalizationConfig

SAMPLE = """
[General]
timezone = "Asia/Shanghai"
locale = "zh"
first_day_of_week = 1
events_file = "~/events.json"

[Layout]
hour_height = 120
snap_minutes = 30

[Bindings]
today = "Home"

[Colors]
current_time_line = "#FF0000"

[Colors.events]
"bg-blue-500" = "#0000FF"
"bg-brand" = "#123456"

[Localization]
all_day = "Whole day"
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "timegrid.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_sample(tmp_path):
    config = Config.load(_write(tmp_path, SAMPLE))
    assert config.timezone == "Asia/Shanghai"
    assert config.locale == "zh"
    assert config.first_day_of_week == 1
    assert config.events_file.name == "events.json"
    assert "~" not in str(config.events_file)
    assert config.layout.hour_height == 120
    assert config.layout.minute_height == 2.0
    assert config.layout.snap_minutes == 30
    assert config.layout.min_event_height == 20
    assert config.bindings.today == "Home"
    assert config.bindings.next == "Right"
    assert config.colors.current_time_line == "#FF0000"
    assert config.colors.fill_for("bg-blue-500") == "#0000FF"
    assert config.colors.fill_for("bg-brand") == "#123456"
    assert config.colors.fill_for("bg-red-500") == "#EF4444"
    assert config.localization.label("all_day") == "Whole day"
    assert config.localization.label("menu_edit") == "修改"


def test_defaults_when_no_default_file(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    config = Config.load()
    assert config.timezone == "UTC"
    assert config.first_day_of_week == 0
    assert config.layout.long_press_ms == 300
    assert config.layout.tick_interval_ms == 60000


def test_default_path_is_used(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    path = Config.get_default_config_path()
    assert path == tmp_path / "timegrid" / "timegrid.toml"
    path.parent.mkdir()
    path.write_text('[General]\ntimezone = "Europe/Paris"\n', encoding="utf-8")
    assert Config.load().timezone == "Europe/Paris"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "missing.toml")


@pytest.mark.parametrize("text", [
    '[General]\ntimezone = "Mars/Olympus"\n',
    '[General]\nfirst_day_of_week = 7\n',
    '[Layout]\nsnap_minutes = 7\n',
    '[Layout]\ndefault_duration_minutes = 0\n',
])
def test_invalid_values_raise(tmp_path, text):
    with pytest.raises(ValueError):
        Config.load(_write(tmp_path, text))


def test_day_names_override_from_string():
    config = Config.from_dict({"Localization": {"day_names": "Su Mo Tu We Th Fr Sa"}})
    assert config.localization.get_day_name(0) == "Su"
    assert config.localization.get_day_name(6) == "Sa"
    assert config.localization.get_day_name(7) == ""


class TestLocalization:

    def test_unsupported_locale_falls_back_to_english(self):
        localization = LocalizationConfig(locale="fr")
        assert localization.locale == "en"
        assert localization.label("continues") == " (continues...)"

    def test_month_names(self):
        localization = LocalizationConfig(locale="zh")
        assert localization.get_month_name(1) == "一月"
        assert localization.get_month_name(13) == ""


class TestColors:

    def test_raw_hex_passes_through(self):
        assert ColorsConfig().fill_for("#abcdef") == "#abcdef"

    def test_unknown_token_uses_fallback(self):
        colors = ColorsConfig()
        assert colors.fill_for("bg-unknown") == colors.fallback_fill
        assert colors.accent_for("bg-unknown") == colors.fallback_accent
