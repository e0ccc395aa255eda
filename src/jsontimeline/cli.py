# src/jsontimeline/cli.py
"""jsontimeline Command Line Interface.

Entry point for the jsontimeline CLI tool.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path
from uuid import UUID

import typer
from pydantic import ValidationError

from jsontimeline import __version__
from jsontimeline.contracts.events import ImportSummary
from jsontimeline.core.config import (
    AttrKeyRename,
    JsonTimelineSettings,
    TimestampUnit,
    load_settings,
    merge_cli_overrides,
)

__all__ = ["app"]


class OutputFormat(StrEnum):
    """Summary output formats."""

    CONSOLE = "console"
    JSON = "json"


# sysexits.h EX_SOFTWARE, the exit code for any import failure
EXIT_SOFTWARE = 70
# 128 + SIGINT, for an interrupted import (partial or second Ctrl-C)
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="jsontimeline",
    help="Import JSON and text logs as timeline events.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"jsontimeline version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


def _echo_error_chain(error: BaseException) -> None:
    """Print an error and each of its causes."""
    typer.echo(str(error), err=True)
    cause = error.__cause__
    while cause is not None:
        typer.echo(f"Caused by: {cause}", err=True)
        cause = cause.__cause__


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """jsontimeline: import JSON and text logs as timeline events."""
    from jsontimeline.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_config(config: Path | None) -> JsonTimelineSettings:
    if config is None:
        return JsonTimelineSettings()
    try:
        return load_settings(config.expanduser())
    except FileNotFoundError:
        typer.echo(f"Error: Config file not found: {config}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        # TOML/YAML syntax errors surface as ValueError subclasses
        typer.echo(f"Config syntax error in {config}: {e}", err=True)
        raise typer.Exit(1) from None


def _parse_cli_values(
    timestamp_attr_units: str | None,
    rename_timeline_attr: list[str] | None,
    rename_event_attr: list[str] | None,
) -> tuple[TimestampUnit | None, list[AttrKeyRename], list[AttrKeyRename]]:
    try:
        units = TimestampUnit.parse(timestamp_attr_units) if timestamp_attr_units is not None else None
        tl_renames = [AttrKeyRename.parse(r) for r in rename_timeline_attr or []]
        ev_renames = [AttrKeyRename.parse(r) for r in rename_event_attr or []]
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None
    return units, tl_renames, ev_renames


def _echo_summary(summary: ImportSummary, output_format: OutputFormat) -> None:
    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(summary.to_dict()), err=True)
        return
    status = "interrupted" if summary.interrupted else "complete"
    typer.echo(
        f"Import {status}: {summary.events_sent} events on {summary.timelines} timelines "
        f"({summary.records_skipped} skipped, {summary.metadata_updates} metadata updates)",
        err=True,
    )


@app.command("import")
def import_(
    inputs: list[Path] | None = typer.Argument(None, help="Input files, processed in order."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="JSONTIMELINE_CONFIG",
        help="Use configuration from this TOML/YAML file.",
    ),
    event_name: list[str] | None = typer.Option(
        None,
        "--event-name",
        help="JSON path naming an event. Repeatable; the first present path wins.",
    ),
    event_name_prefix: str | None = typer.Option(None, "--event-name-prefix", help="Prefix for each event name."),
    timeline_name: list[str] | None = typer.Option(
        None,
        "--timeline-name",
        help="JSON path naming (and identifying) a timeline. Repeatable; the first present path wins.",
    ),
    timeline_name_prefix: str | None = typer.Option(
        None, "--timeline-name-prefix", help="Prefix for each timeline name."
    ),
    timeline_attr: list[str] | None = typer.Option(
        None, "--timeline-attr", help="JSON path to add as a timeline attribute. Repeatable."
    ),
    rename_timeline_attr: list[str] | None = typer.Option(
        None,
        "--rename-timeline-attr",
        help="Rename a timeline attribute key: 'original,new'. Repeatable.",
    ),
    rename_event_attr: list[str] | None = typer.Option(
        None,
        "--rename-event-attr",
        help="Rename an event attribute key: 'original,new'. Repeatable.",
    ),
    timestamp_attr: str | None = typer.Option(None, "--timestamp-attr", help="JSON path of the event timestamp."),
    timestamp_attr_units: str | None = typer.Option(
        None, "--timestamp-attr-units", help="Units of --timestamp-attr: s, ms, us or ns."
    ),
    non_json_regex: str | None = typer.Option(
        None, "--non-json-regex", help="Regex for lines that are not JSON."
    ),
    non_json_attr: list[str] | None = typer.Option(
        None,
        "--non-json-attr",
        help="Attribute name for a --non-json-regex capture group, positionally. Repeatable.",
    ),
    run_id: str | None = typer.Option(None, "--run-id", help="Use this UUID as the run ID."),
    skip_bad_records: bool = typer.Option(
        False,
        "--skip-bad-records",
        help="Log and skip records that cannot be assembled instead of aborting.",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write sink output (JSON lines) to this path; '-' for stdout.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Perform all input processing, but don't send anything.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.CONSOLE,
        "--format",
        "-f",
        help="Summary format: 'console' (human-readable) or 'json'.",
    ),
) -> None:
    """Import JSON / text log files as timeline events."""
    from jsontimeline.core.logging import get_logger
    from jsontimeline.engine.importer import Importer, shutdown_handler_context
    from jsontimeline.plugins.sinks import NullSink, create_sink

    logger = get_logger(__name__)

    units, tl_renames, ev_renames = _parse_cli_values(timestamp_attr_units, rename_timeline_attr, rename_event_attr)
    try:
        parsed_run_id = UUID(run_id) if run_id is not None else None
    except ValueError:
        raise typer.BadParameter(f"invalid run id {run_id!r}", param_hint="--run-id") from None

    settings = _load_config(config)
    try:
        settings = merge_cli_overrides(
            settings,
            inputs=inputs,
            event_names=event_name,
            timeline_names=timeline_name,
            timeline_attrs=timeline_attr,
            timeline_name_prefix=timeline_name_prefix,
            event_name_prefix=event_name_prefix,
            timestamp_attr=timestamp_attr,
            timestamp_attr_units=units,
            non_json_regex=non_json_regex,
            non_json_attrs=non_json_attr,
            rename_timeline_attrs=tl_renames,
            rename_event_attrs=ev_renames,
            run_id=parsed_run_id,
            on_record_error="skip" if skip_bad_records else None,
            sink_kind="jsonl" if output is not None else None,
            sink_path=output,
        )
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    if not settings.metadata.inputs:
        logger.error("no_inputs")
        typer.echo("No input files provided.", err=True)
        return

    sink = NullSink() if dry_run else create_sink(settings.sink)
    importer = Importer(settings.metadata, sink)
    try:
        with shutdown_handler_context() as shutdown_event:
            summary = importer.run(shutdown_event)
    except KeyboardInterrupt:
        typer.echo("Interrupted.", err=True)
        raise typer.Exit(EXIT_INTERRUPTED) from None
    except Exception as e:
        _echo_error_chain(e)
        raise typer.Exit(EXIT_SOFTWARE) from None
    finally:
        importer.close()

    _echo_summary(summary, output_format)
    if summary.interrupted:
        raise typer.Exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    app()
