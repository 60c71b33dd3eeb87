"""Browser JavaScript generators: the Fetch API and ``XMLHttpRequest``.

Browser code cannot read local files or standard input, so file-backed
data and uploads render as commented placeholders.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    header_lookup,
    headers_without,
    is_stdin,
    json_is_raw,
    json_text,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def repr_str(value: str) -> str:
    """Single-quoted JavaScript string literal for *value*."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return "'" + "".join(out) + "'"


def object_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else repr_str(key)


def js_object(entries: list[tuple[str, str]], level: int = 0) -> str:
    """Render ``(key_source, value_source)`` pairs as an object literal.

    An empty value source emits the key alone, for spreads such as
    ``...form.getHeaders()``.
    """
    if not entries:
        return "{}"
    pad = "  " * (level + 1)
    lines = "".join(
        f"{pad}{key}: {value},\n" if value else f"{pad}{key},\n" for key, value in entries
    )
    return "{\n" + lines + "  " * level + "}"


def literal(value: Any, level: int = 0) -> str:
    """JavaScript source for a decoded JSON value, indented two spaces per level."""
    if isinstance(value, dict):
        return js_object(
            [(object_key(str(k)), literal(v, level + 1)) for k, v in value.items()], level
        )
    if isinstance(value, list):
        if not value:
            return "[]"
        pad = "  " * (level + 1)
        items = "".join(f"{pad}{literal(v, level + 1)},\n" for v in value)
        return "[\n" + items + "  " * level + "]"
    if isinstance(value, str):
        return repr_str(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
    return json.dumps(value)


def header_entries(headers: dict[str, str]) -> list[tuple[str, str]]:
    return [(repr_str(name), repr_str(value)) for name, value in headers.items()]


def _comment_safe(text: str) -> str:
    """Make *text* safe inside a ``/* */`` or ``//`` comment."""
    return comment_text(text).replace("*/", "* /")


def _source_name(filename: str) -> str:
    return "standard input" if is_stdin(filename) else _comment_safe(filename)


def _placeholder(item: FileDataParam) -> str:
    expr = f"'' /* contents of {_source_name(item.filename)} */"
    if item.filetype == FileParamType.URLENCODE:
        expr = f"encodeURIComponent({expr})"
        if item.name:
            expr = f"{repr_str(item.name + '=')} + {expr}"
    return expr


def _data_body(request: Request) -> tuple[str, list[str]]:
    """Body expression plus the comment lines that explain placeholders."""
    items = data_items(request)
    notes = []
    parts = []
    for item in items:
        if isinstance(item, FileDataParam):
            notes.append(
                f"// Browsers cannot read {_source_name(item.filename)}; "
                "paste its contents into the placeholder below."
            )
            parts.append(_placeholder(item))
        else:
            parts.append(repr_str(item))
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items)), notes  # type: ignore[arg-type]
    if len(parts) == 1:
        return parts[0], notes
    return "[\n  " + ",\n  ".join(parts) + ",\n].join('&')", notes


def _form_lines(request: Request) -> list[str]:
    lines = ["const form = new FormData();"]
    for field in request.multipart_uploads:
        if field.is_file:
            source = _source_name(field.content_file or field.content)
            lines.append(
                f"// form.append({repr_str(field.name)}, fileInput.files[0]); "
                f"// upload of {source}: pick the file with <input type=\"file\">"
            )
        else:
            lines.append(f"form.append({repr_str(field.name)}, {repr_str(field.content)});")
    return lines


class _Body:
    """Body rendering shared by both browser generators."""

    def __init__(self, request: Request) -> None:
        self.setup: list[str] = []
        self.expr: Optional[str] = None
        self.headers = dict(request.headers)
        kind = body_kind(request)
        if kind == BodyKind.MULTIPART:
            self.setup = _form_lines(request)
            self.expr = "form"
            self.headers = headers_without(self.headers, "Content-Type")
        elif kind == BodyKind.JSON:
            if json_is_raw(request):
                self.expr = repr_str(json_text(request))
            else:
                self.expr = f"JSON.stringify({literal(request.json_data)})"
        elif kind == BodyKind.DATA:
            self.expr, self.setup = _data_body(request)


def _auth_lines(request: Request) -> tuple[Optional[str], list[str]]:
    """Authorization header expression and notes for unsupported schemes."""
    auth = request.auth
    if auth is None:
        return None, []
    if auth.type == AuthType.BASIC:
        creds = repr_str(f"{auth.username}:{auth.password}")
        return f"'Basic ' + btoa({creds})", []
    return None, [f"// {auth.type.value} authentication is negotiated by the browser."]


_env = template_environment(q=repr_str)

_FETCH_TEMPLATE = _env.from_string(
    """\
{% for line in notes %}
{{ line }}
{% endfor %}
{% for line in setup %}
{{ line }}
{% endfor %}
{% if notes or setup %}

{% endif %}
{% if options %}
fetch({{ url|q }}, {{ options }});
{% else %}
fetch({{ url|q }});
{% endif %}
"""
)


def generate_fetch(request: Request) -> str:
    """Render *request* as a ``fetch()`` call."""
    body = _Body(request)
    auth_header, notes = _auth_lines(request)
    headers = header_entries(body.headers)
    if auth_header is not None:
        headers.append(("'Authorization'", auth_header))

    options = []
    if request.method != "GET":
        options.append(("method", repr_str(request.method)))
    if headers:
        options.append(("headers", js_object(headers, 1)))
    if body.expr is not None:
        options.append(("body", body.expr))
    if request.cookies or header_lookup(request.headers, "Cookie"):
        options.append(("credentials", "'include'"))

    return render(
        _FETCH_TEMPLATE,
        notes=notes,
        setup=body.setup,
        url=request.url,
        options=js_object(options) if options else "",
    )


_XHR_TEMPLATE = _env.from_string(
    """\
{% for line in notes %}
{{ line }}
{% endfor %}
{% for line in setup %}
{{ line }}
{% endfor %}
{% if notes or setup %}

{% endif %}
const xhr = new XMLHttpRequest();
xhr.open({{ method|q }}, {{ url|q }});
{% for name, value in headers %}
xhr.setRequestHeader({{ name }}, {{ value }});
{% endfor %}
{% if timeout %}
xhr.timeout = {{ timeout }};
{% endif %}

xhr.onload = function () {
  console.log(xhr.status);
  console.log(xhr.responseText);
};

{% if body %}
xhr.send({{ body }});
{% else %}
xhr.send();
{% endif %}
"""
)


def generate_xhr(request: Request) -> str:
    """Render *request* with ``XMLHttpRequest``."""
    body = _Body(request)
    auth_header, notes = _auth_lines(request)
    headers = header_entries(body.headers)
    if auth_header is not None:
        headers.append(("'Authorization'", auth_header))
    timeout = int(request.timeout * 1000) if request.timeout is not None else None
    return render(
        _XHR_TEMPLATE,
        notes=notes,
        setup=body.setup,
        method=request.method,
        url=request.url,
        headers=headers,
        timeout=timeout,
        body=body.expr,
    )


GENERATORS = {
    "Fetch API": generate_fetch,
    "XMLHttpRequest": generate_xhr,
}
