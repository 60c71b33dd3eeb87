"""curl command parser -- normalize, tokenize, and interpret into a Request.

This sub-package is the first half of the curlconv pipeline: turning the
text of a curl invocation (possibly spanning several lines) into a
:class:`~curlconv.models.Request` that the generators can render.

Typical usage::

    from curlconv.parser import parse_command

    result = parse_command("curl -H 'Accept: application/json' https://api.example.com")
    if result.ok:
        print(result.request.method, result.request.url)
    else:
        print(result.error)

Sub-modules:

* :mod:`~curlconv.parser.tokenizer` -- line-continuation folding and
  shell-like tokenization.
* :mod:`~curlconv.parser.interpreter` -- option dispatch that builds the
  :class:`~curlconv.models.Request`.
* :mod:`~curlconv.parser.command` -- the :func:`parse_command` boundary,
  which never raises.
"""

from curlconv.parser.command import parse_command
from curlconv.parser.interpreter import parse_tokens
from curlconv.parser.tokenizer import normalize_command, tokenize

__all__ = ["parse_command", "parse_tokens", "normalize_command", "tokenize"]
