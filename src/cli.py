from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from config import load_config
from errors import AppError, ConfigError
from logging_config import setup_logging
from reporter import ConsoleReporter
from tail_session import TailSession

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command()
def tail(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="File to tail."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", dir_okay=False, help="YAML config file."
    ),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between polls (polling backend)."
    ),
    backend: Optional[str] = typer.Option(None, "--backend", help="polling or watchdog."),
    on_truncate: Optional[str] = typer.Option(
        None, "--on-truncate", help="reset (reread from start) or resync (skip to end)."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Diagnostic log level."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log diagnostics here."),
) -> None:
    """Print PATH, then every chunk of text appended to it, until Ctrl-C."""
    overrides = {
        "poll_interval": poll_interval,
        "backend": backend,
        "on_truncate": on_truncate,
        "log_level": log_level,
        "log_file": log_file,
    }
    try:
        cfg = load_config(config_file, overrides)
    except ConfigError as e:
        typer.echo(f"[tailwatch] {e}", err=True)
        raise typer.Exit(code=2)

    setup_logging(log_file=cfg.log_file, level=cfg.log_level)

    session = TailSession(path, ConsoleReporter(), cfg)
    try:
        session.start()
    except AppError as e:
        logger.error("Could not start tailing %s: %s", path, e)
        raise typer.Exit(code=1)

    try:
        # short waits keep Ctrl-C responsive on every platform
        while not session.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        session.stop()


def main() -> None:
    app()


if __name__ == '__main__':
    main()
