"""Examples command -- list or print the built-in sample commands."""

from __future__ import annotations

from typing import Optional

import typer

from curlconv.exit_codes import EXIT_INVALID_USAGE
from curlconv.output import error, get_output, print_data, suggest


def examples_command(
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Print one example by name, e.g. 'POST JSON'."
    ),
) -> None:
    """List the sample curl commands, or print one.

    A printed example can be piped straight into ``curlconv convert``.

    Example::

        curlconv examples
        curlconv examples --name "Form Data" | curlconv convert --to php
    """
    from curlconv.examples import EXAMPLE_CURL, QUICK_EXAMPLES, get_example

    if name is None:
        rows = [["Default", "POST", EXAMPLE_CURL]]
        rows.extend([example.name, example.method, example.command] for example in QUICK_EXAMPLES)
        get_output().print_table(["Name", "Method", "Command"], rows, title="Examples")
        return

    if name.strip().lower() == "default":
        print_data(EXAMPLE_CURL)
        return

    example = get_example(name)
    if example is None:
        error(f"Unknown example: {name}")
        suggest("Available: " + ", ".join(example.name for example in QUICK_EXAMPLES))
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    print_data(example.command)
