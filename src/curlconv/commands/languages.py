"""Languages command -- list target languages and their generator variants."""

from __future__ import annotations

from curlconv.output import get_output


def languages_command() -> None:
    """List supported languages.

    The first variant of each language is the default.

    Example::

        curlconv languages
        curlconv --json languages
    """
    from curlconv.generators import get_generators, language_label, supported_languages

    rows: list[list[str]] = []
    for key in supported_languages():
        variants = get_generators(key) or {}
        rows.append([key, language_label(key) or key, ", ".join(variants)])

    get_output().print_table(
        ["Language", "Label", "Variants"], rows, title=f"Languages ({len(rows)})"
    )
