"""Exception hierarchy for curlconv.

All exceptions inherit from :class:`CurlconvError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`curlconv.exit_codes`.
The top-level error handler in :func:`curlconv.app.main` catches
``CurlconvError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The conversion core itself never lets these escape to library callers:
:func:`~curlconv.parser.parse_command` turns them into an error string.

Subclass hierarchy::

    CurlconvError (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- CommandParseError     (exit 3)
    +-- UnknownLanguageError  (exit 4)
    +-- ConfigError           (exit 1)
"""

from curlconv.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_UNKNOWN_LANGUAGE,
)


class CurlconvError(Exception):
    """Base exception for all curlconv errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`curlconv.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CurlconvError):
    """Raised for invalid CLI arguments such as an unknown generator variant."""

    exit_code = EXIT_INVALID_USAGE


class CommandParseError(CurlconvError):
    """Raised when the input is not a curl command or cannot be interpreted."""

    exit_code = EXIT_PARSE_ERROR


class UnknownLanguageError(CurlconvError):
    """Raised by the CLI when a target language key is not registered."""

    exit_code = EXIT_UNKNOWN_LANGUAGE


class ConfigError(CurlconvError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
