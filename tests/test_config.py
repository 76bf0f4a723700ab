import json
from pathlib import Path

import pytest

from config.data import DEFAULT_CONFIG, load_config, parse_timeout_string


def write_config(tmp_path: Path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(str(tmp_path / "missing.json"))
    assert config == DEFAULT_CONFIG


def test_values_override_defaults(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        {
            "max_results": 25,
            "disabled_plugins": ["Calculator"],
            "search_workers": 4,
            "plugin_timeout": "500ms",
        },
    )
    config = load_config(path)

    assert config["max_results"] == 25
    assert config["disabled_plugins"] == ["calculator"]
    assert config["search_workers"] == 4
    assert config["plugin_timeout"] == pytest.approx(0.5)
    assert config["search_debounce_ms"] == DEFAULT_CONFIG["search_debounce_ms"]


def test_malformed_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config(str(path)) == DEFAULT_CONFIG


def test_non_object_file_is_ignored(tmp_path: Path) -> None:
    assert load_config(write_config(tmp_path, ["a", "b"])) == DEFAULT_CONFIG


def test_single_disabled_plugin_name_is_accepted(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path, {"disabled_plugins": "Calculator"}))
    assert config["disabled_plugins"] == ["calculator"]


def test_plugin_sections_are_keyed_by_lowercase_name(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        {"plugins": {"Calculator": {"enabled": False}, "applications": "broken"}},
    )
    assert load_config(path)["plugins"] == {"calculator": {"enabled": False}}


def test_non_object_plugins_section_is_ignored(tmp_path: Path) -> None:
    assert load_config(write_config(tmp_path, {"plugins": ["calculator"]}))["plugins"] == {}


def test_invalid_numbers_fall_back_to_defaults(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path, {"max_results": "many"}))
    assert config["max_results"] == DEFAULT_CONFIG["max_results"]


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        ("2s", 2.0),
        ("250ms", 0.25),
        ("1m", 60.0),
        ("3", 3.0),
        (1.5, 1.5),
        (0, None),
        ("soon", None),
        (True, None),
    ],
)
def test_parse_timeout_string(value, expected) -> None:
    assert parse_timeout_string(value) == expected
