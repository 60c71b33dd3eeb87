"""Generator registry -- language key to ``{variant name: generator}``.

Language modules are imported on first request, so converting to one
language never loads the other thirteen. Each module exposes a
``GENERATORS`` dict; :func:`get_generators` hands out a copy so callers
cannot change what later lookups see.

Example::

    from curlconv.generators import get_generators

    generators = get_generators("python")
    code = generators["Requests"](request)
"""

from __future__ import annotations

import importlib
from typing import Callable, Optional

from curlconv.models import Request
from curlconv.output import debug

Generator = Callable[[Request], str]

LANGUAGE_LABELS: dict[str, str] = {
    "curl": "cURL (Windows)",
    "javascript": "JavaScript",
    "nodejs": "Node.js",
    "python": "Python",
    "php": "PHP",
    "go": "Go",
    "java": "Java",
    "csharp": "C#",
    "perl": "Perl",
    "powershell": "PowerShell",
    "wget": "Wget",
    "dart": "Dart",
    "swift": "Swift",
    "rust": "Rust",
}
"""Display label per supported language key, in registry order."""

_PACKAGE = "curlconv.generators"


def supported_languages() -> list[str]:
    """Return every recognised language key."""
    return list(LANGUAGE_LABELS)


def language_label(key: str) -> Optional[str]:
    """Return the display label for *key*, or ``None`` if it is unknown."""
    return LANGUAGE_LABELS.get(key)


def get_generators(key: str) -> Optional[dict[str, Generator]]:
    """Return the variant generators for language *key*.

    Args:
        key: A language key such as ``"python"`` or ``"csharp"``.

    Returns:
        A new ``{variant name: generator}`` dict in display order, or
        ``None`` when *key* is not a supported language.
    """
    if key not in LANGUAGE_LABELS:
        debug(f"No generators registered for {key!r}")
        return None
    module = importlib.import_module(f"{_PACKAGE}.{key}")
    return dict(module.GENERATORS)


def default_variant(key: str) -> Optional[str]:
    """First variant of *key*, the one used when none is chosen."""
    generators = get_generators(key)
    if not generators:
        return None
    return next(iter(generators))
