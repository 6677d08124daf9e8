"""CLI for codetag."""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from codetag.config import AppConfig, LoggingConfig, config_search_paths, load_app_config
from codetag.constants import PACKAGE_VERSION
from codetag.observability.logging_setup import configure_logging
from codetag.scanner.path_filter import PathFilter
from codetag.scanner.sink import SinkFailureError, build_sink
from codetag.scanner.walker import Walker
from codetag.schemas.walk_models import WalkStats
from codetag.security.redaction import redact_text
from codetag.taggers import TaggerPipeline, default_registry

LOGGER = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help=(
        "codetag: index code files, tagging them by SCM, language and remote host.\n\n"
        "Without --config, the config file is looked up in $CODETAG_CONFIG, "
        "then <argv0>.yaml, ~/.codetag.yaml and /etc/codetag.yaml."
    ),
)
console = Console()


@app.command()
def version() -> None:
    """Print the codetag version."""
    typer.echo(PACKAGE_VERSION)


@app.command("taggers")
def list_taggers() -> None:
    """List available tagger types."""
    registry = default_registry()
    table = Table(title="Tagger Types")
    table.add_column("Name")
    table.add_column("Description")
    for name in registry.names():
        table.add_row(name, registry.describe(name))
    console.print(table)


@app.command("validate-config")
def validate_config(
    config: Path | None = typer.Option(None, "--config", help="Configuration file to use."),
) -> None:
    """Validate configuration and print the resulting tagger pipeline."""
    configure_logging(LoggingConfig())
    cfg = _load_or_exit(config)
    pipeline = TaggerPipeline.from_config(cfg.taggers, default_registry())
    path_filter = PathFilter.from_config(cfg.filter)

    table = Table(title="Namespaces")
    table.add_column("Namespace")
    table.add_column("Taggers")
    for namespace, taggers in pipeline.describe().items():
        table.add_row(namespace or "(none)", ", ".join(taggers))
    console.print(table)
    console.print(f"paths: {', '.join(str(path) for path in cfg.root_paths())}")
    console.print(f"filter rules: {len(path_filter.rules)}/{len(cfg.filter)} usable")


@app.command("run")
def run(
    config: Path | None = typer.Option(None, "--config", help="Configuration file to use."),
    paths: list[Path] | None = typer.Option(
        None, "--path", help="Root path to walk instead of configured 'paths' (repeatable)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Compute and log tags without calling the sink."
    ),
    on_failure: str | None = typer.Option(
        None, "--on-failure", help="Sink failure policy: abort or skip."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override log level."),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress the run summary."),
) -> None:
    """Walk configured paths and tag every file."""
    configure_logging(LoggingConfig())
    cfg = _load_or_exit(
        config,
        cli_overrides={
            "paths": paths,
            "dry_run": dry_run,
            "on_failure": on_failure,
            "log_level": log_level,
        },
    )
    configure_logging(cfg.logging, extra_levels=_dry_run_levels(cfg))

    pipeline = TaggerPipeline.from_config(cfg.taggers, default_registry())
    if not pipeline:
        LOGGER.warning("No 'taggers' defined, nothing to do")
        raise typer.Exit(code=0)

    stop_requested = threading.Event()
    walker = Walker(
        path_filter=PathFilter.from_config(cfg.filter),
        pipeline=pipeline,
        sink=build_sink(cfg.sink),
        should_stop=stop_requested.is_set,
    )
    previous_handler = signal.signal(signal.SIGINT, lambda *_: stop_requested.set())
    try:
        stats = walker.walk_all(cfg.root_paths())
    except SinkFailureError as exc:
        console.print(f"[red]Tagging failed:[/red] {redact_text(str(exc))}")
        raise typer.Exit(code=1) from exc
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        walker.sink.close()

    if not quiet:
        _render_stats(stats, dry_run=cfg.sink.dry_run)
    if stats.cancelled:
        raise typer.Exit(code=130)


def _load_or_exit(
    config: Path | None, *, cli_overrides: dict[str, object] | None = None
) -> AppConfig:
    try:
        return load_app_config(config, cli_overrides=cli_overrides)
    except Exception as exc:  # noqa: BLE001
        console.print(
            f"[red]Failed to process configuration file:[/red] {redact_text(str(exc))}"
        )
        if config is None:
            searched = ", ".join(str(path) for path in config_search_paths())
            console.print(f"Searched: {searched}")
        raise typer.Exit(code=1) from exc


def _dry_run_levels(cfg: AppConfig) -> dict[str, str] | None:
    if not cfg.sink.dry_run:
        return None
    if logging.getLevelNamesMapping()[cfg.logging.level] <= logging.INFO:
        return None
    return {"codetag.scanner.sink": "INFO"}


def _render_stats(stats: WalkStats, *, dry_run: bool) -> None:
    table = Table(title="Run Summary (dry run)" if dry_run else "Run Summary")
    table.add_column("Counter")
    table.add_column("Value", justify="right")
    for name, value in stats.model_dump().items():
        table.add_row(name.replace("_", " "), str(value))
    console.print(table)
