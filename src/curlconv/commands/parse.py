"""Parse command -- show the request model a curl command produces."""

from __future__ import annotations

from typing import Optional

import typer

from curlconv.exceptions import CurlconvError
from curlconv.output import error, format_response


def parse_command_cli(
    curl: Optional[str] = typer.Argument(
        None, help="The curl command (use '-' or omit it to read stdin)."
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the curl command from a file ('-' for stdin)."
    ),
) -> None:
    """Print the parsed request as JSON.

    Fields are serialised under their wire names (``json`` rather than
    ``json_data``), which is the shape generators consume.

    Example::

        curlconv parse "curl -u me:secret https://example.com" --json
    """
    from curlconv.commands.source import parse_or_raise, read_command_text

    try:
        request = parse_or_raise(read_command_text(curl, file))
    except CurlconvError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(request.model_dump(mode="json", by_alias=True))
