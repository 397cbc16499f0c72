import json

import pytest

from visidiff.config import ComparerConfig, ConfigError


def test_json_roundtrip(tmp_path):
    path = tmp_path / "config.json"
    ComparerConfig(default_sensitivity=20, highlight_rgba=(0, 255, 0, 255)).to_json(path)

    loaded = ComparerConfig.from_json(path)

    assert loaded.default_sensitivity == 20
    assert loaded.highlight_rgba == (0, 255, 0, 255)


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_opacity": 50, "theme": "dark"}))

    assert ComparerConfig.from_json(path).default_opacity == 50


@pytest.mark.parametrize("content", ["not json", "[1, 2]", json.dumps({"zoom_step": 0})])
def test_invalid_files(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        ComparerConfig.from_json(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        ComparerConfig.from_json(tmp_path / "absent.json")


def test_zoom_limits_must_match_step():
    with pytest.raises(ConfigError):
        ComparerConfig(zoom_min=30)


@pytest.mark.parametrize(
    "values",
    [
        {"highlight_rgba": None},
        {"highlight_rgba": 7},
        {"highlight_rgba": "pink"},
        {"default_sensitivity": "high"},
        {"default_opacity": 50.5},
        {"default_zoom": True},
    ],
)
def test_wrong_value_types_are_config_errors(tmp_path, values):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(values))
    with pytest.raises(ConfigError):
        ComparerConfig.from_json(path)
