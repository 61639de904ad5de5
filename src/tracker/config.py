"""Configuration handling for the tracker CLI."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeGuard, cast

import typer

from tracker.dates import has_date_tokens
from tracker.errors import QueryDefinitionError
from tracker.output_format import OutputFormat
from tracker.query_builder import parse_search_type


CONFIG_FILE_NAME = ".tracker.json"

CONFIG_DEFAULTS: dict[str, object] = {}


@dataclass
class ConfigOptions:
    """Config option mapping metadata: option name to command parameter name."""

    str_options: dict[str, str] = field(default_factory=dict)
    bool_options: dict[str, str] = field(default_factory=dict)
    list_options: dict[str, str] = field(default_factory=dict)
    float_list_options: dict[str, str] = field(default_factory=dict)
    int_list_options: dict[str, str] = field(default_factory=dict)


SERIES_OPTIONS = ConfigOptions(
    str_options={
        "--vault": "vault",
        "--folder": "folder",
        "--date-format": "date_format",
        "--date-prefix": "date_prefix",
        "--date-suffix": "date_suffix",
        "--start-date": "start_date",
        "--end-date": "end_date",
        "--out": "out",
        "--config": "config",
    },
    bool_options={
        "--ignore-attached-value": "ignore_attached_value",
        "--ignore-zero-value": "ignore_zero_value",
        "--include-subfolders": "include_subfolders",
        "--verbose": "verbose",
    },
    list_options={
        "--search-type": "search_types",
        "--search-target": "search_targets",
        "--separator": "separators",
    },
    float_list_options={"--const-value": "const_values"},
    int_list_options={"--x-dataset": "x_datasets"},
)


DEST_TO_OPTION_NAME: dict[str, str] = {
    dest: option
    for options in (
        SERIES_OPTIONS.str_options,
        SERIES_OPTIONS.bool_options,
        SERIES_OPTIONS.list_options,
        SERIES_OPTIONS.float_list_options,
        SERIES_OPTIONS.int_list_options,
    )
    for option, dest in options.items()
} | {"color_flag": "--color/--no-color"}


logger = logging.getLogger("tracker")


def load_config(filepath: str) -> tuple[dict[str, object], bool]:
    """Load config from JSON file.

    Args:
        filepath: Path to config file

    Returns:
        Tuple of (config dict, malformed flag)
    """
    try:
        with open(filepath, encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return ({}, False)
    except PermissionError:
        return ({}, True)
    except OSError:
        return ({}, True)
    except json.JSONDecodeError:
        return ({}, True)

    if not isinstance(config, dict):
        return ({}, True)

    return (config, False)


def is_string_list(value: object) -> TypeGuard[list[str]]:
    """Check if value is list[str]."""
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _as_string_list(value: object) -> list[str] | None:
    if isinstance(value, str):
        return [value]
    if is_string_list(value):
        return list(value)
    return None


def _is_number(value: object) -> TypeGuard[int | float]:
    return isinstance(value, int | float) and not isinstance(value, bool)


def parse_color_defaults(config: dict[str, object]) -> tuple[dict[str, object], bool]:
    """Parse color-related config defaults."""
    defaults: dict[str, object] = {}
    color_value = config.get("--color")
    no_color_value = config.get("--no-color")

    if "--color" in config and not isinstance(color_value, bool):
        return ({}, False)
    if "--no-color" in config and not isinstance(no_color_value, bool):
        return ({}, False)
    if color_value is True and no_color_value is True:
        return ({}, False)

    if color_value is True:
        defaults["color_flag"] = True
    if no_color_value is True:
        defaults["color_flag"] = False

    return (defaults, True)


def validate_str_option(key: str, value: object) -> str | None:
    """Validate string option value."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if key in ("--vault", "--config", "--out", "--date-format") and not stripped:
        return None

    invalid_out = key == "--out" and stripped.lower() not in {item.value for item in OutputFormat}
    invalid_format = key == "--date-format" and not has_date_tokens(value)
    if invalid_out or invalid_format:
        return None
    return value


def validate_list_option(key: str, value: object) -> list[str] | None:
    """Validate list option value; a single string counts as a one-element list."""
    values = _as_string_list(value)
    if values is None or not values:
        return None
    if key == "--search-type":
        try:
            for item in values:
                parse_search_type(item)
        except QueryDefinitionError:
            return None
    if key == "--separator" and any(not item for item in values):
        return None
    if key == "--search-target" and any(not item.strip() for item in values):
        return None
    return values


def validate_float_list_option(value: object) -> list[float] | None:
    """Validate a number or a list of numbers."""
    if _is_number(value):
        return [float(value)]
    if isinstance(value, list) and value and all(_is_number(item) for item in value):
        return [float(item) for item in value]
    return None


def validate_int_list_option(value: object) -> list[int] | None:
    """Validate a non-negative integer or a list of them."""
    items = value if isinstance(value, list) else [value]
    if not items:
        return None
    for item in items:
        if not isinstance(item, int) or isinstance(item, bool) or item < 0:
            return None
    return cast(list[int], list(items))


def apply_config_entry(
    key: str,
    value: object,
    defaults: dict[str, object],
    options: ConfigOptions,
) -> bool:
    """Apply a config entry to defaults if valid."""
    validated: object | None
    if key in options.str_options:
        dest = options.str_options[key]
        validated = validate_str_option(key, value)
    elif key in options.bool_options:
        dest = options.bool_options[key]
        validated = value if isinstance(value, bool) else None
    elif key in options.list_options:
        dest = options.list_options[key]
        validated = validate_list_option(key, value)
    elif key in options.float_list_options:
        dest = options.float_list_options[key]
        validated = validate_float_list_option(value)
    elif key in options.int_list_options:
        dest = options.int_list_options[key]
        validated = validate_int_list_option(value)
    else:
        return False

    if validated is None:
        return False
    defaults[dest] = validated
    return True


def parse_config_sections(raw_config: dict[str, object]) -> dict[str, object] | None:
    """Parse top-level config sections.

    Accepted shape:
      {
        "defaults": { "--date-format": "YYYY-MM-DD", ... }
      }
    """
    if any(key != "defaults" for key in raw_config):
        return None

    defaults_section = raw_config.get("defaults", {})
    if not isinstance(defaults_section, dict):
        return None
    return cast(dict[str, object], defaults_section)


def build_config_defaults(config: dict[str, object]) -> dict[str, object] | None:
    """Validate config values and build defaults keyed by parameter name.

    Args:
        config: Raw "defaults" section

    Returns:
        Defaults dict, or None if any entry is malformed
    """
    defaults, color_valid = parse_color_defaults(config)
    if not color_valid:
        return None

    for key, value in config.items():
        if key in ("--color", "--no-color"):
            continue
        if not apply_config_entry(key, value, defaults, SERIES_OPTIONS):
            return None

    return defaults


def parse_config_argument(argv: list[str]) -> str:
    """Parse only the --config argument from argv."""
    default = CONFIG_FILE_NAME
    for idx, arg in enumerate(argv[1:], start=1):
        if arg == "--config" and idx + 1 < len(argv):
            return argv[idx + 1]
        if arg.startswith("--config="):
            return arg.split("=", 1)[1]
    return default


def load_cli_config(argv: list[str]) -> dict[str, object]:
    """Load config defaults from the configured file path.

    Raises:
        typer.BadParameter: If the config file is malformed
    """
    config_name = parse_config_argument(argv)
    config_path = Path(config_name)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_name
    config, load_error = load_config(str(config_path))

    if load_error:
        raise typer.BadParameter("Malformed config")

    defaults_config = parse_config_sections(config)
    if defaults_config is None:
        raise typer.BadParameter("Malformed config")

    defaults = build_config_defaults(defaults_config)
    if defaults is None:
        raise typer.BadParameter("Malformed config")

    return defaults


def build_default_map(defaults: dict[str, object]) -> dict[str, dict[str, object]]:
    """Build Click default_map for Typer commands."""
    series_defaults = {key: value for key, value in defaults.items() if key != "verbose"}
    return {"series": series_defaults}


def _format_log_entry(name: str, value: object) -> str:
    """Format one option/value pair for logging."""
    return f"{name}={value!r}"


def log_applied_config_defaults(command_name: str) -> None:
    """Log config defaults loaded from config file."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entries: list[str] = []
    for dest, default_value in sorted(CONFIG_DEFAULTS.items(), key=lambda item: item[0]):
        option_name = DEST_TO_OPTION_NAME.get(dest)
        if option_name is None:
            continue
        entries.append(_format_log_entry(option_name, default_value))

    if entries:
        logger.info("Config defaults applied (%s): %s", command_name, ", ".join(entries))


def log_command_arguments(args: object, command_name: str) -> None:
    """Log all final argument values used to run a command."""
    if not logger.isEnabledFor(logging.INFO):
        return

    try:
        arg_items = vars(args).items()
    except TypeError:
        return

    entries = [
        _format_log_entry(arg_name, arg_value)
        for arg_name, arg_value in sorted(arg_items, key=lambda item: item[0])
    ]
    logger.info("Command arguments (%s): %s", command_name, ", ".join(entries))
