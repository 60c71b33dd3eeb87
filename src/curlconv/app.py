"""Typer application factory and CLI entry point for curlconv.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``convert``, ``parse``, ``languages``, ``examples``,
``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, and
invokes the Typer app. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`curlconv.config`: Global and project configuration resolution.
    :mod:`curlconv.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from curlconv import __version__
from curlconv.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="curlconv",
    help="Convert curl commands into code for 14 languages.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"curlconv {__version__}")
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
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~curlconv.output.OutputManager` from CLI
    flags, falling back to the ``output`` section of the global config for
    the format and theme.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from curlconv.config import load_global_config
    from curlconv.exceptions import ConfigError
    from curlconv.models import GlobalConfig
    from curlconv.output import OutputFormat, OutputManager, set_output, warning

    config_problem: Optional[str] = None
    try:
        config = load_global_config()
    except ConfigError as exc:
        config = GlobalConfig()
        config_problem = str(exc)

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
        theme=config.output.theme,
    )
    set_output(output)
    if config_problem is not None:
        warning(f"{config_problem}; using defaults.")

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from curlconv.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app`.

    Safe to call more than once; commands are only registered the first
    time.
    """
    if getattr(app, "_curlconv_registered", False):
        return
    from curlconv.commands.config import config_app
    from curlconv.commands.convert import convert_command
    from curlconv.commands.examples import examples_command
    from curlconv.commands.languages import languages_command
    from curlconv.commands.parse import parse_command_cli

    app.command("convert")(convert_command)
    app.command("parse")(parse_command_cli)
    app.command("languages")(languages_command)
    app.command("examples")(examples_command)
    app.add_typer(config_app, name="config", help="Configuration management.")
    app._curlconv_registered = True  # type: ignore[attr-defined]


def main() -> None:
    """CLI entry point invoked by the ``curlconv`` console script.

    Performs the following sequence:

    1. Install signal handlers for clean Ctrl-C behaviour.
    2. Register built-in sub-commands.
    3. Invoke the Typer application.

    Unhandled :class:`~curlconv.exceptions.CurlconvError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from curlconv.exceptions import CurlconvError
        from curlconv.output import error

        if isinstance(exc, CurlconvError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
