"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~curlconv.exceptions.CurlconvError` subclass.
Shell wrappers can inspect the exit code to tell a malformed curl command
apart from an unsupported target language without parsing stderr.

Example::

    $ curlconv convert "wget https://example.com"
    $ echo $?
    3   # EXIT_PARSE_ERROR -- input is not a curl command
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. an unknown variant)."""

EXIT_PARSE_ERROR = 3
"""The curl command could not be parsed."""

EXIT_UNKNOWN_LANGUAGE = 4
"""The requested target language is not supported."""
