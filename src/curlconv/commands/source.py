"""Where the curl command text comes from: an argument, a file, or stdin."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from curlconv.exceptions import CommandParseError, InvalidUsageError
from curlconv.models import Request
from curlconv.output import debug
from curlconv.parser import parse_command

STDIN_MARKER = "-"


def read_command_text(command: Optional[str], file: Optional[str]) -> str:
    """Return the curl command to convert.

    *file* wins over *command*; ``-`` in either place, or no command at
    all, reads standard input.

    Raises:
        InvalidUsageError: If the file cannot be read or no text was given.
    """
    if file is not None and file != STDIN_MARKER:
        try:
            text = Path(file).read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read {file}: {exc.strerror or exc}") from exc
        debug(f"Read command from {file}")
    elif command is not None and command != STDIN_MARKER:
        text = command
    else:
        if sys.stdin.isatty():
            raise InvalidUsageError(
                "No curl command given. Pass it as an argument, with -f FILE, or on stdin."
            )
        text = sys.stdin.read()
        debug("Read command from stdin")

    if not text.strip():
        raise InvalidUsageError("No curl command given.")
    return text


def parse_or_raise(text: str) -> Request:
    """Parse *text*, turning a parse error into :class:`CommandParseError`."""
    result = parse_command(text)
    if result.request is None:
        raise CommandParseError(result.error or "Parse error")
    return result.request
