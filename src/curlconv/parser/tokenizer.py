"""Split a curl command line into shell-like tokens.

The tokenizer is a single left-to-right scan that honours the quoting rules
of a POSIX shell closely enough for pasted commands:

* Outside quotes a backslash escapes the next character (the backslash is
  dropped). Unquoted whitespace separates tokens; runs of whitespace
  collapse.
* Inside single quotes every character is literal.
* Inside double quotes a backslash only escapes ``"``, ``\\``, ``$`` and
  the backtick; any other backslash is kept.
* An unterminated quote silently closes at end of input.

Before scanning, :func:`normalize_command` folds line continuations
(backslash, caret, or backtick followed by a newline) into a single space
so that multi-line commands copied from docs or browser dev-tools parse as
one line. Caret and backtick continuations are only recognised outside
quotes, so a quoted body keeps them.
"""

from __future__ import annotations

import re

_POSIX_CONTINUATION = re.compile(r"\\\s*\n\s*")

# CMD (caret) and PowerShell (backtick) continuations only count outside
# quotes; inside quotes both characters are literal.
_WINDOWS_CONTINUATION = re.compile(r"[\^`]\s*\n\s*")

_QUOTES = ("'", '"')

# Characters a backslash escapes inside double quotes.
_DOUBLE_QUOTE_ESCAPABLE = frozenset('"\\$`')


def _fold_unquoted(command: str, pattern: re.Pattern[str]) -> str:
    """Replace matches of *pattern* that start outside quotes with a space."""
    out: list[str] = []
    quote = ""
    i = 0
    length = len(command)
    while i < length:
        if not quote:
            match = pattern.match(command, i)
            if match:
                out.append(" ")
                i = match.end()
                continue
        char = command[i]
        if char == "\\" and quote != "'":
            out.append(command[i : i + 2])
            i += 2
            continue
        if quote and char == quote:
            quote = ""
        elif not quote and char in _QUOTES:
            quote = char
        out.append(char)
        i += 1
    return "".join(out)


def normalize_command(command: str) -> str:
    """Strip surrounding whitespace and collapse line continuations.

    Example::

        >>> normalize_command("curl \\\\\\n  -X POST \\\\\\n  https://x")
        'curl -X POST https://x'
    """
    normalized = _POSIX_CONTINUATION.sub(" ", command.strip())
    return _fold_unquoted(normalized, _WINDOWS_CONTINUATION)


def tokenize(command: str) -> list[str]:
    """Split *command* into tokens.

    Quote characters are not part of the resulting tokens. A quoted empty
    string (``''`` or ``""``) yields an empty token, so ``-d ''`` keeps its
    value slot.

    Args:
        command: A single logical command line (see :func:`normalize_command`).

    Returns:
        The list of tokens, program name first.

    Example::

        >>> tokenize('curl "a b" \\'c"d\\'')
        ['curl', 'a b', 'c"d']
    """
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    quote = ""
    escape_next = False

    i = 0
    length = len(command)
    while i < length:
        char = command[i]
        i += 1

        if escape_next:
            current.append(char)
            escape_next = False
            continue

        if quote == "'":
            if char == "'":
                quote = ""
            else:
                current.append(char)
            continue

        if quote == '"':
            if char == '"':
                quote = ""
            elif char == "\\" and i < length and command[i] in _DOUBLE_QUOTE_ESCAPABLE:
                current.append(command[i])
                i += 1
            else:
                current.append(char)
            continue

        if char == "\\":
            escape_next = True
            in_token = True
            continue

        if char in _QUOTES:
            quote = char
            in_token = True
            continue

        if char.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
            continue

        current.append(char)
        in_token = True

    if in_token:
        tokens.append("".join(current))

    return tokens
