"""Code generators -- render a parsed :class:`~curlconv.models.Request` as source code.

One module per target language, each exposing a ``GENERATORS`` dict of
variant name to ``generate(request) -> str`` function. Every generator is
pure: it never touches the network or the file system, and code that
reads files or standard input is emitted rather than executed.

Sub-modules:

* :mod:`~curlconv.generators.registry` -- language key lookup with lazy
  imports.
* :mod:`~curlconv.generators.common` -- body-source precedence, data items
  and template helpers shared by the language modules.
"""

from curlconv.generators.registry import (
    LANGUAGE_LABELS,
    default_variant,
    get_generators,
    language_label,
    supported_languages,
)

__all__ = [
    "LANGUAGE_LABELS",
    "default_variant",
    "get_generators",
    "language_label",
    "supported_languages",
]
