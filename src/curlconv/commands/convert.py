"""Convert command -- render a curl command as code in a target language.

Implements the ``curlconv convert`` top-level command. The command text is
parsed once and handed to one generator variant (or to every variant with
``--all``). The target language and variant follow the precedence chain in
:func:`~curlconv.config.resolve_config`.
"""

from __future__ import annotations

from typing import Optional

import typer

from curlconv.exceptions import CurlconvError, InvalidUsageError, UnknownLanguageError
from curlconv.output import debug, error, info, print_code, suggest


def _select_variants(
    language: str,
    generators: dict,
    variant: Optional[str],
    all_variants: bool,
) -> list[str]:
    """Pick the variant names to render, matching *variant* case-insensitively."""
    if all_variants:
        return list(generators)
    if variant is None:
        return [next(iter(generators))]
    for name in generators:
        if name.lower() == variant.lower():
            return [name]
    available = ", ".join(generators)
    raise InvalidUsageError(
        f"Unknown variant '{variant}' for {language}. Available: {available}"
    )


def convert_command(
    curl: Optional[str] = typer.Argument(
        None, help="The curl command (use '-' or omit it to read stdin)."
    ),
    language: Optional[str] = typer.Option(
        None, "--language", "--to", "-l", help="Target language key (see 'curlconv languages')."
    ),
    variant: Optional[str] = typer.Option(
        None, "--variant", "-V", help="Generator variant, e.g. 'Requests' or 'Axios'."
    ),
    all_variants: bool = typer.Option(
        False, "--all", help="Render every variant of the language."
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the curl command from a file ('-' for stdin)."
    ),
) -> None:
    """Convert a curl command into code.

    Parses the command, looks up the generators for the resolved language,
    and prints the generated snippet to stdout.

    Args:
        curl: Command text. ``-`` or omitted reads standard input.
        language: Language key override (highest precedence).
        variant: Variant name override (highest precedence).
        all_variants: Render every variant instead of one.
        file: Path to a file holding the command.

    Raises:
        typer.Exit: With code 3 for a parse error, 4 for an unknown
            language, 2 for an unknown variant or missing input.

    Example::

        curlconv convert "curl -d 'a=1' https://example.com" --to go
        pbpaste | curlconv convert -l nodejs -V Axios
    """
    from curlconv.commands.source import parse_or_raise, read_command_text
    from curlconv.config import resolve_config
    from curlconv.generators import get_generators, language_label, supported_languages

    try:
        _, target = resolve_config(cli_language=language, cli_variant=variant)
        debug(f"Target: {target.language} / {target.variant or 'default variant'}")

        generators = get_generators(target.language)
        if generators is None:
            raise UnknownLanguageError(f"Unknown language: {target.language}")

        names = _select_variants(target.language, generators, target.variant, all_variants)
        request = parse_or_raise(read_command_text(curl, file))
    except UnknownLanguageError as exc:
        error(str(exc))
        suggest(f"Supported languages: {', '.join(supported_languages())}")
        raise typer.Exit(code=exc.exit_code) from None
    except CurlconvError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    label = language_label(target.language)
    for name in names:
        if len(names) > 1:
            info(f"{label} ({name})")
        print_code(generators[name](request), target.language, name)
