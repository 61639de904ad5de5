#!/usr/bin/env python
"""CLI interface for tracker - numeric series from markdown notes."""

from __future__ import annotations

import sys

import typer

from tracker import config, logging_config
from tracker.commands import series


app = typer.Typer(
    help="Extract date-aligned numeric series from a folder of markdown notes.",
    no_args_is_help=True,
)


DEFAULT_VERBOSE: dict[str, bool] = {"value": False}


def _resolve_verbose(verbose: bool | None) -> bool:
    if verbose is None:
        return DEFAULT_VERBOSE["value"]
    return verbose


@app.callback()
def main_callback(
    verbose: bool | None = typer.Option(
        None,
        "--verbose",
        "-v",
        help="Enable verbose logging output",
    ),
) -> None:
    """Global CLI options."""
    logging_config.configure_logging(_resolve_verbose(verbose))


series.register(app)


def main() -> None:
    """Main CLI entry point."""
    defaults = config.load_cli_config(sys.argv)
    DEFAULT_VERBOSE["value"] = bool(defaults.pop("verbose", False))
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update(defaults)

    command = typer.main.get_command(app)
    default_map = config.build_default_map(defaults) if defaults else None
    command.main(
        args=sys.argv[1:],
        prog_name="tracker",
        standalone_mode=True,
        default_map=default_map,
    )


if __name__ == "__main__":
    main()
