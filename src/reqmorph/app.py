"""Typer application and CLI entry point for reqmorph.

Registers the sub-command groups (``render``, ``schema``, ``inspect``,
``config``) on the root application and installs the global output
manager and logging from the root flags.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~reqmorph.exceptions.ReqmorphError` ends the
process with the error's exit code; any other exception is written to a
crash log under the data directory.

See Also:
    :mod:`reqmorph.config`: Configuration resolution.
    :mod:`reqmorph.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from reqmorph import __version__
from reqmorph.commands.config import config_app
from reqmorph.commands.inspect import inspect_app
from reqmorph.commands.render import render_app
from reqmorph.commands.schema import schema_app
from reqmorph.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="reqmorph",
    help="Turn sample API requests into Go code, curl, and gcloud commands.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(render_app, name="render", help="Render a request as code or a command.")
app.add_typer(schema_app, name="schema", help="Export request JSON Schemas.")
app.add_typer(inspect_app, name="inspect", help="Inspect an API descriptor.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reqmorph {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~reqmorph.output.OutputManager` and, with
    ``--verbose``, routes the ``reqmorph`` loggers to stderr at DEBUG level.
    The resolved output format is stored in ``ctx.obj["format"]`` so that
    commands can pass it on to :func:`~reqmorph.config.resolve_config`.
    """
    from reqmorph.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose, no_color)

    ctx.ensure_object(dict)
    ctx.obj["format"] = None if fmt == OutputFormat.AUTO else fmt.value
    ctx.obj["verbose"] = verbose


def _configure_logging(verbose: bool, no_color: bool) -> None:
    """Attach a Rich stderr handler to the ``reqmorph`` logger.

    Without ``--verbose`` only warnings (values skipped during the tree
    build) are shown.
    """
    logger = logging.getLogger("reqmorph")
    for handler in list(logger.handlers):
        if getattr(handler, "_reqmorph_cli", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_time=False,
        show_path=verbose,
    )
    handler._reqmorph_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to ``<data_dir>/logs`` and return its path."""
    from reqmorph.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``reqmorph`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from reqmorph.exceptions import ReqmorphError
        from reqmorph.output import error

        if isinstance(exc, ReqmorphError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
