"""Built-in CLI sub-commands for curlconv.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~curlconv.commands.convert` -- turn a curl command into code.
* :mod:`~curlconv.commands.parse` -- show the parsed request model.
* :mod:`~curlconv.commands.languages` -- list target languages and variants.
* :mod:`~curlconv.commands.examples` -- list or print the sample commands.
* :mod:`~curlconv.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or a plain callback function
registered directly on the root app (for single commands like
``convert``).
"""
