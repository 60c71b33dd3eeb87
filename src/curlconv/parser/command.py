"""Boundary entry point that turns raw command text into a parse result.

:func:`parse_command` is the only function callers outside the parser need.
It chains :func:`~curlconv.parser.tokenizer.normalize_command`,
:func:`~curlconv.parser.tokenizer.tokenize` and
:func:`~curlconv.parser.interpreter.parse_tokens`, and folds every failure
into :attr:`ParseResult.error` so nothing ever propagates to the caller.
"""

from __future__ import annotations

from curlconv.exceptions import CommandParseError, CurlconvError
from curlconv.models import ParseResult
from curlconv.output import debug
from curlconv.parser.interpreter import parse_tokens
from curlconv.parser.tokenizer import normalize_command, tokenize

_PROGRAM_NAMES = frozenset({"curl", "curl.exe"})

INVALID_START_MESSAGE = 'Command must start with "curl" or "curl.exe"'


def _program_name(token: str) -> str:
    """Lower-cased base name of the program token (``/usr/bin/curl`` -> ``curl``)."""
    return token.replace("\\", "/").rsplit("/", 1)[-1].lower()


def parse_command(command: str) -> ParseResult:
    """Parse a curl command line into a :class:`~curlconv.models.ParseResult`.

    Exactly one of ``result.request`` and ``result.error`` is set. A
    command that does not start with ``curl`` (or ``curl.exe``) yields the
    error ``Command must start with "curl" or "curl.exe"``.

    Example::

        >>> result = parse_command("curl -X PUT https://example.com")
        >>> result.request.method
        'PUT'
        >>> parse_command("wget https://example.com").error
        'Command must start with "curl" or "curl.exe"'
    """
    try:
        tokens = tokenize(normalize_command(command))
        debug(f"Tokens: {tokens}")
        if not tokens or _program_name(tokens[0]) not in _PROGRAM_NAMES:
            raise CommandParseError(INVALID_START_MESSAGE)
        return ParseResult(request=parse_tokens(tokens))
    except CurlconvError as exc:
        return ParseResult(error=str(exc))
    except Exception as exc:  # noqa: BLE001 - the boundary never raises
        debug(f"Unexpected parse failure: {exc!r}")
        return ParseResult(error=f"Parse error: {exc}" if str(exc) else "Parse error")
