"""Tests for tracker.config helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import SimpleNamespace

import pytest
import typer

from tracker import config


def test_load_config_missing_file_returns_empty(tmp_path: Path) -> None:
    """Missing config should return empty config without error."""
    missing = tmp_path / "missing.json"
    data, malformed = config.load_config(str(missing))

    assert data == {}
    assert malformed is False


def test_load_config_directory_path_is_malformed(tmp_path: Path) -> None:
    """Directory path should be treated as malformed config."""
    config_dir = tmp_path / "cfgdir"
    config_dir.mkdir()
    data, malformed = config.load_config(str(config_dir))

    assert data == {}
    assert malformed is True


def test_load_config_non_dict_is_malformed(tmp_path: Path) -> None:
    """Non-object JSON should be marked malformed."""
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2, 3]", encoding="utf-8")

    data, malformed = config.load_config(str(config_path))

    assert data == {}
    assert malformed is True


def test_parse_color_defaults_conflict() -> None:
    """Conflicting color flags should be rejected."""
    defaults, valid = config.parse_color_defaults({"--color": True, "--no-color": True})

    assert defaults == {}
    assert valid is False


def test_parse_color_defaults_invalid_value() -> None:
    """Non-boolean color flags should be rejected."""
    defaults, valid = config.parse_color_defaults({"--color": "yes"})

    assert defaults == {}
    assert valid is False


def test_build_config_defaults_applies_values() -> None:
    """Valid entries should be keyed by command parameter name."""
    defaults = config.build_config_defaults(
        {
            "--vault": "~/notes",
            "--date-format": "DD.MM.YYYY",
            "--search-type": ["tag", "dvField"],
            "--search-target": "weight",
            "--const-value": 2,
            "--x-dataset": [0],
            "--ignore-zero-value": True,
            "--no-color": True,
        }
    )

    assert defaults == {
        "vault": "~/notes",
        "date_format": "DD.MM.YYYY",
        "search_types": ["tag", "dvField"],
        "search_targets": ["weight"],
        "const_values": [2.0],
        "x_datasets": [0],
        "ignore_zero_value": True,
        "color_flag": False,
    }


@pytest.mark.parametrize(
    "entry",
    [
        {"--unknown": 1},
        {"--out": "yaml"},
        {"--date-format": "HH:mm"},
        {"--vault": "  "},
        {"--search-type": ["tag", "chart"]},
        {"--separator": [""]},
        {"--search-target": []},
        {"--const-value": ["1"]},
        {"--const-value": True},
        {"--x-dataset": -1},
        {"--x-dataset": [True]},
        {"--include-subfolders": "no"},
    ],
)
def test_build_config_defaults_rejects_invalid_entry(entry: dict[str, object]) -> None:
    """Any invalid entry should make the whole config malformed."""
    assert config.build_config_defaults(entry) is None


def test_parse_config_sections_only_defaults() -> None:
    """Only a defaults section should be accepted."""
    assert config.parse_config_sections({"defaults": {"--out": "json"}}) == {"--out": "json"}
    assert config.parse_config_sections({}) == {}
    assert config.parse_config_sections({"filter": {}}) is None
    assert config.parse_config_sections({"defaults": []}) is None


def test_parse_config_argument_prefers_cli_value() -> None:
    """--config should select the config file."""
    assert config.parse_config_argument(["tracker", "series", "--config", "x.json"]) == "x.json"


def test_parse_config_argument_supports_equals_form() -> None:
    """--config=value should be supported."""
    assert config.parse_config_argument(["tracker", "--config=y.json"]) == "y.json"


def test_parse_config_argument_default() -> None:
    """Without --config the default name should be used."""
    assert config.parse_config_argument(["tracker", "series"]) == ".tracker.json"


def test_load_cli_config_reads_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The config file in the working directory should be loaded."""
    (tmp_path / ".tracker.json").write_text(
        json.dumps({"defaults": {"--folder": "journal", "--verbose": True}}), encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    defaults = config.load_cli_config(["tracker", "series"])

    assert defaults == {"folder": "journal", "verbose": True}


@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        json.dumps({"other": {}}),
        json.dumps({"defaults": {"--out": "xml"}}),
    ],
)
def test_load_cli_config_malformed(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content: str
) -> None:
    """Malformed config files should raise BadParameter."""
    (tmp_path / ".tracker.json").write_text(content, encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    with pytest.raises(typer.BadParameter, match="Malformed config"):
        config.load_cli_config(["tracker", "series"])


def test_build_default_map_excludes_verbose() -> None:
    """verbose belongs to the app callback, not to the series command."""
    default_map = config.build_default_map({"verbose": True, "out": "json"})

    assert default_map == {"series": {"out": "json"}}


def test_log_applied_config_defaults_logs_all_config_values(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Config defaults should be logged with their option names."""
    config.CONFIG_DEFAULTS.update(
        {"date_format": "DD.MM.YYYY", "search_targets": ["weight"], "color_flag": False}
    )

    with caplog.at_level(logging.INFO, logger="tracker"):
        config.log_applied_config_defaults("series")

    assert "Config defaults applied (series):" in caplog.text
    assert "--date-format='DD.MM.YYYY'" in caplog.text
    assert "--search-target=['weight']" in caplog.text
    assert "--color/--no-color=False" in caplog.text


def test_log_applied_config_defaults_silent_without_info(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Nothing should be logged unless INFO is enabled."""
    config.CONFIG_DEFAULTS.update({"out": "json"})

    with caplog.at_level(logging.WARNING, logger="tracker"):
        config.log_applied_config_defaults("series")

    assert caplog.text == ""


def test_log_command_arguments_logs_all_values(caplog: pytest.LogCaptureFixture) -> None:
    """Every argument should be logged sorted by name."""
    args = SimpleNamespace(vault="notes", search_targets=["weight"], ignore_zero_value=False)

    with caplog.at_level(logging.INFO, logger="tracker"):
        config.log_command_arguments(args, "series")

    assert "Command arguments (series):" in caplog.text
    assert "ignore_zero_value=False, search_targets=['weight'], vault='notes'" in caplog.text
