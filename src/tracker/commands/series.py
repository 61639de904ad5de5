"""Series command: build date-aligned datasets from a vault of notes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from tracker import config as config_module
from tracker.aggregate import aggregate
from tracker.data import DEFAULT_DATE_FORMAT, DEFAULT_SEPARATOR, AggregationConfig
from tracker.errors import AggregationError, QueryDefinitionError
from tracker.output_format import (
    OutputFormat,
    OutputFormatError,
    get_series_formatter,
    print_prepared_output,
)
from tracker.query_builder import QueryOptions, build_queries
from tracker.tui import build_console, processing_status, setup_output
from tracker.validation import (
    parse_bound_date,
    parse_search_types,
    validate_date_format,
    validate_output_format,
    validate_separators,
    validate_x_datasets,
)
from tracker.vault import Vault


@dataclass
class SeriesArgs:
    """Arguments for the series command."""

    vault: str
    search_types: list[str] | None
    search_targets: list[str] | None
    x_datasets: list[int] | None
    date_format: str
    date_prefix: str
    date_suffix: str
    start_date: str | None
    end_date: str | None
    folder: str
    separators: list[str] | None
    const_values: list[float] | None
    ignore_attached_value: bool
    ignore_zero_value: bool
    include_subfolders: bool
    out: str
    color_flag: bool | None
    config: str


def build_query_options(args: SeriesArgs) -> QueryOptions:
    """Collect per-target query settings from command arguments."""
    separators = validate_separators(args.separators) if args.separators else [DEFAULT_SEPARATOR]
    return QueryOptions(
        separator=tuple(separators),
        const_value=tuple(args.const_values) if args.const_values else (1.0,),
        ignore_attached_value=(args.ignore_attached_value,),
        ignore_zero_value=(args.ignore_zero_value,),
        x_dataset=tuple(args.x_datasets or ()),
    )


def build_aggregation_config(args: SeriesArgs) -> AggregationConfig:
    """Validate date settings and build the aggregation config."""
    date_format = validate_date_format(args.date_format)
    return AggregationConfig(
        date_format=date_format,
        date_format_prefix=args.date_prefix,
        date_format_suffix=args.date_suffix,
        start_date=parse_bound_date(args.start_date, date_format, "--start-date"),
        end_date=parse_bound_date(args.end_date, date_format, "--end-date"),
    )


def run_series(args: SeriesArgs) -> None:
    """Run the series command."""
    color_enabled = setup_output(args)
    console = build_console(color_enabled)
    try:
        formatter = get_series_formatter(validate_output_format(args.out))
    except OutputFormatError as exc:
        raise click.UsageError(str(exc)) from exc

    if not args.search_types:
        raise typer.BadParameter("--search-type is required")
    if not args.search_targets:
        raise typer.BadParameter("--search-target is required")

    search_types = parse_search_types(args.search_types)
    validate_x_datasets(args.x_datasets or [], len(args.search_targets))
    aggregation_config = build_aggregation_config(args)

    try:
        queries = build_queries(search_types, args.search_targets, build_query_options(args))
    except QueryDefinitionError as exc:
        raise typer.BadParameter(str(exc)) from exc

    vault_path = Path(args.vault)
    if not vault_path.is_dir():
        raise typer.BadParameter(f"Vault '{args.vault}' not found")
    vault = Vault(vault_path)

    with processing_status(console, color_enabled):
        documents = vault.list_candidate_documents(args.folder, args.include_subfolders)
        outcome = aggregate(vault, documents, queries, aggregation_config)
        if isinstance(outcome, AggregationError):
            raise click.UsageError(str(outcome))

        try:
            prepared_output = formatter.prepare(outcome, color_enabled)
        except OutputFormatError as exc:
            raise click.UsageError(str(exc)) from exc

    print_prepared_output(console, prepared_output)


def register(app: typer.Typer) -> None:
    """Register the series command."""

    @app.command("series")
    def series_command(  # noqa: PLR0913
        vault: str = typer.Option(
            ".",
            "--vault",
            metavar="DIR",
            help="Directory holding the markdown notes",
        ),
        search_types: list[str] | None = typer.Option(  # noqa: B008
            None,
            "--search-type",
            metavar="TYPE",
            help="frontmatter, tag, wiki, text, dvField or table; once, or once per target",
        ),
        search_targets: list[str] | None = typer.Option(  # noqa: B008
            None,
            "--search-target",
            metavar="TARGET",
            help="Tag, key, link, regex or table to search (repeatable)",
        ),
        x_datasets: list[int] | None = typer.Option(  # noqa: B008
            None,
            "--x-dataset",
            metavar="N",
            help="Index of a table target holding the dates (repeatable)",
        ),
        date_format: str = typer.Option(
            DEFAULT_DATE_FORMAT,
            "--date-format",
            metavar="FORMAT",
            help="Date format of note names and table dates",
        ),
        date_prefix: str = typer.Option(
            "",
            "--date-prefix",
            metavar="TEXT",
            help="Literal text before the date in note names",
        ),
        date_suffix: str = typer.Option(
            "",
            "--date-suffix",
            metavar="TEXT",
            help="Literal text after the date in note names",
        ),
        start_date: str | None = typer.Option(
            None,
            "--start-date",
            metavar="DATE",
            help="First day of the series",
        ),
        end_date: str | None = typer.Option(
            None,
            "--end-date",
            metavar="DATE",
            help="Last day of the series",
        ),
        folder: str = typer.Option(
            "/",
            "--folder",
            metavar="PATH",
            help="Folder inside the vault to scan",
        ),
        separators: list[str] | None = typer.Option(  # noqa: B008
            None,
            "--separator",
            metavar="SEP",
            help="Separator between multiple values; once, or once per target",
        ),
        const_values: list[float] | None = typer.Option(  # noqa: B008
            None,
            "--const-value",
            metavar="N",
            help="Value added per match without attached value; once, or once per target",
        ),
        ignore_attached_value: bool = typer.Option(
            False,
            "--ignore-attached-value",
            help="Count tag and field matches instead of reading their values",
        ),
        ignore_zero_value: bool = typer.Option(
            False,
            "--ignore-zero-value",
            help="Drop values that are exactly zero",
        ),
        include_subfolders: bool = typer.Option(
            True,
            "--include-subfolders/--no-include-subfolders",
            help="Scan folders below --folder too",
        ),
        out: str = typer.Option(
            OutputFormat.TEXT,
            "--out",
            help="Output format: text or json",
        ),
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        config: str = typer.Option(
            config_module.CONFIG_FILE_NAME,
            "--config",
            metavar="FILE",
            help="Config file name to load from current directory",
        ),
    ) -> None:
        """Build one date-aligned series per search target."""
        args = SeriesArgs(
            vault=vault,
            search_types=search_types,
            search_targets=search_targets,
            x_datasets=x_datasets,
            date_format=date_format,
            date_prefix=date_prefix,
            date_suffix=date_suffix,
            start_date=start_date,
            end_date=end_date,
            folder=folder,
            separators=separators,
            const_values=const_values,
            ignore_attached_value=ignore_attached_value,
            ignore_zero_value=ignore_zero_value,
            include_subfolders=include_subfolders,
            out=out,
            color_flag=color_flag,
            config=config,
        )
        config_module.log_applied_config_defaults("series")
        config_module.log_command_arguments(args, "series")
        run_series(args)
