"""Python generators: ``requests`` and the standard library ``http.client``."""

from __future__ import annotations

import math
from typing import Any, Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    format_number,
    header_lookup,
    headers_without,
    is_stdin,
    json_as_text,
    json_is_raw,
    json_text,
    render,
    split_url,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def repr_str(value: str) -> str:
    """Single-quoted Python string literal for *value*.

    Other control characters use ``\\xNN`` escapes, so the result always
    fits on one line and ``ast.literal_eval`` returns *value*.
    """
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return "'" + "".join(out) + "'"


def literal(value: Any, level: int = 0) -> str:
    """Python source for a decoded JSON value, indented four spaces per level."""
    pad = "    " * (level + 1)
    closing = "    " * level
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [f"{pad}{repr_str(str(k))}: {literal(v, level + 1)}," for k, v in value.items()]
        return "{\n" + "\n".join(items) + "\n" + closing + "}"
    if isinstance(value, list):
        if not value:
            return "[]"
        items = [f"{pad}{literal(v, level + 1)}," for v in value]
        return "[\n" + "\n".join(items) + "\n" + closing + "]"
    if isinstance(value, str):
        return repr_str(value)
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float) and not math.isfinite(value):
        return f"float({repr_str(repr(value))})"
    return repr(value)


_env = template_environment(q=repr_str)


# --- Body expressions ---


class _Imports:
    """Import lines collected while rendering, standard library first."""

    def __init__(self) -> None:
        self.stdlib: set[str] = set()
        self.third_party: set[str] = set()

    def lines(self) -> list[str]:
        out = sorted(self.stdlib)
        if self.stdlib and self.third_party:
            out.append("")
        return out + sorted(self.third_party)


def _read_text(item: FileDataParam, imports: _Imports) -> str:
    if is_stdin(item.filename):
        imports.stdlib.add("import sys")
        return "sys.stdin.read()"
    return f"open({repr_str(item.filename)}).read()"


def _item_expr(item: Any, imports: _Imports, single: bool) -> str:
    if not isinstance(item, FileDataParam):
        return repr_str(item)
    if item.filetype == FileParamType.BINARY:
        if is_stdin(item.filename):
            imports.stdlib.add("import sys")
            expr = "sys.stdin.buffer.read()"
        else:
            expr = f"open({repr_str(item.filename)}, 'rb').read()"
        return expr if single else f"{expr}.decode()"
    if item.filetype == FileParamType.URLENCODE:
        imports.stdlib.add("from urllib.parse import quote")
        expr = f"quote({_read_text(item, imports)}, safe='')"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    if item.filetype == FileParamType.JSON:
        return _read_text(item, imports)
    return f"{_read_text(item, imports)}.replace('\\n', '').replace('\\r', '')"


def _data_expr(request: Request, imports: _Imports) -> str:
    items = data_items(request)
    if len(items) == 1:
        return _item_expr(items[0], imports, single=True)
    parts = [_item_expr(item, imports, single=False) for item in items]
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    return "'&'.join([\n" + "".join(f"    {p},\n" for p in parts) + "])"


def _call(func: str, args: list[str]) -> str:
    one_line = f"{func}({', '.join(args)})"
    if len(one_line) <= 79:
        return one_line
    return f"{func}(\n" + "".join(f"    {arg},\n" for arg in args) + ")"


# --- requests ---

_REQUESTS_TEMPLATE = _env.from_string(
    """\
{% for line in imports %}
{{ line }}
{% endfor %}

{% if cookies %}
cookies = {
{% for name, value in cookies.items() %}
    {{ name|q }}: {{ value|q }},
{% endfor %}
}

{% endif %}
{% if headers %}
headers = {
{% for name, value in headers.items() %}
    {{ name|q }}: {{ value|q }},
{% endfor %}
}

{% endif %}
{% if files %}
files = {{ files }}

{% endif %}
{% if json_data is not none %}
json_data = {{ json_data }}

{% endif %}
{% if data is not none %}
data = {{ data }}

{% endif %}
{% if proxy %}
proxies = {
    'http': {{ proxy|q }},
    'https': {{ proxy|q }},
}

{% endif %}
response = {{ call }}
"""
)

_SHORTCUTS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


def _requests_auth(request: Request, imports: _Imports) -> Optional[str]:
    auth = request.auth
    if auth is None:
        return None
    user, password = repr_str(auth.username), repr_str(auth.password)
    if auth.type == AuthType.DIGEST:
        imports.third_party.add("from requests.auth import HTTPDigestAuth")
        return f"HTTPDigestAuth({user}, {password})"
    if auth.type == AuthType.NTLM:
        imports.third_party.add("from requests_ntlm import HttpNtlmAuth")
        return f"HttpNtlmAuth({user}, {password})"
    if auth.type == AuthType.NEGOTIATE:
        imports.third_party.add("from requests_kerberos import HTTPKerberosAuth")
        return "HTTPKerberosAuth()"
    return f"({user}, {password})"


def _files_expr(request: Request, imports: _Imports) -> str:
    entries = []
    for field in request.multipart_uploads:
        if field.is_file:
            path = field.content_file or field.content
            if is_stdin(path):
                imports.stdlib.add("import sys")
                value = "sys.stdin.buffer"
            else:
                value = f"open({repr_str(path)}, 'rb')"
        else:
            value = f"(None, {repr_str(field.content)})"
        entries.append((field.name, value))
    names = [name for name, _ in entries]
    if len(set(names)) == len(names):
        body = "".join(f"    {repr_str(n)}: {v},\n" for n, v in entries)
        return "{\n" + body + "}"
    body = "".join(f"    ({repr_str(n)}, {v}),\n" for n, v in entries)
    return "[\n" + body + "]"


def generate_requests(request: Request) -> str:
    """Render *request* as a ``requests`` call."""
    imports = _Imports()
    imports.third_party.add("import requests")

    headers = dict(request.headers)
    cookies = dict(request.cookies)
    if cookies:
        headers = headers_without(headers, "Cookie")

    files = json_data = data = None
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        files = _files_expr(request, imports)
    elif kind == BodyKind.JSON:
        if json_as_text(request):
            data = repr_str(json_text(request))
        else:
            json_data = literal(request.json_data)
            if (header_lookup(headers, "Content-Type") or "").lower() == "application/json":
                headers = headers_without(headers, "Content-Type")
    elif kind == BodyKind.DATA:
        data = _data_expr(request, imports)

    method = request.method.upper()
    if method in _SHORTCUTS:
        func, args = f"requests.{method.lower()}", [repr_str(request.url)]
    else:
        func, args = "requests.request", [repr_str(request.method), repr_str(request.url)]
    if cookies:
        args.append("cookies=cookies")
    if headers:
        args.append("headers=headers")
    if files is not None:
        args.append("files=files")
    if json_data is not None:
        args.append("json=json_data")
    if data is not None:
        args.append("data=data")
    auth = _requests_auth(request, imports)
    if auth is not None:
        args.append(f"auth={auth}")
    if request.proxy:
        args.append("proxies=proxies")
    if request.insecure:
        args.append("verify=False")
    if request.timeout is not None:
        args.append(f"timeout={format_number(request.timeout)}")

    return render(
        _REQUESTS_TEMPLATE,
        imports=imports.lines(),
        cookies=cookies,
        headers=headers,
        files=files,
        json_data=json_data,
        data=data,
        proxy=request.proxy,
        call=_call(func, args),
    )


# --- http.client ---

_HTTP_CLIENT_TEMPLATE = _env.from_string(
    """\
{% for line in imports %}
{{ line }}
{% endfor %}

# {{ summary }}
conn = {{ connection }}

{% if headers %}
headers = {
{% for name, value in headers.items() %}
    {{ name|q }}: {{ value|q }},
{% endfor %}
}
{% else %}
headers = {}
{% endif %}
{% if basic_auth %}
headers['Authorization'] = 'Basic ' + base64.b64encode({{ basic_auth|q }}.encode()).decode()
{% elif auth_note %}
# {{ auth_note }} authentication is not supported by http.client
{% endif %}

{% if form_fields %}
# http.client does not build multipart/form-data bodies. Fields:
{% for line in form_fields %}
#   {{ line }}
{% endfor %}
body = None

{% elif body is not none %}
body = {{ body }}

{% endif %}
conn.request({{ method|q }}, {{ path|q }}, {{ 'body' if body is not none or form_fields else 'None' }}, headers)
response = conn.getresponse()

print(response.status, response.reason)
print(response.read().decode())
"""
)


def generate_http_client(request: Request) -> str:
    """Render *request* with the standard library's ``http.client``."""
    imports = _Imports()
    imports.stdlib.add("import http.client")

    url = split_url(request.url)
    host = url.host if url.port is None else f"{url.host}:{url.port}"
    args = [repr_str(host)]
    if url.scheme == "https":
        cls = "http.client.HTTPSConnection"
        if request.insecure:
            imports.stdlib.add("import ssl")
            args.append("context=ssl._create_unverified_context()")
    else:
        cls = "http.client.HTTPConnection"
    if request.timeout is not None:
        args.append(f"timeout={format_number(request.timeout)}")

    headers = dict(request.headers)
    basic_auth = auth_note = None
    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            imports.stdlib.add("import base64")
            basic_auth = f"{request.auth.username}:{request.auth.password}"
        else:
            auth_note = request.auth.type.value.capitalize()

    body = None
    form_fields: list[str] = []
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        for field in request.multipart_uploads:
            source = f"@{field.content}" if field.is_file else field.content
            form_fields.append(comment_text(f"{field.name}={source}"))
    elif kind == BodyKind.JSON:
        if json_is_raw(request):
            body = repr_str(json_text(request))
        else:
            imports.stdlib.add("import json")
            body = f"json.dumps({literal(request.json_data)})"
    elif kind == BodyKind.DATA:
        body = _data_expr(request, imports)

    return render(
        _HTTP_CLIENT_TEMPLATE,
        imports=imports.lines(),
        connection=f"{cls}({', '.join(args)})",
        headers=headers,
        basic_auth=basic_auth,
        auth_note=auth_note,
        form_fields=form_fields,
        body=body,
        summary=comment_text(f"{request.method} {request.url}"),
        method=request.method,
        path=url.path,
    )


GENERATORS = {
    "Requests": generate_requests,
    "HTTP Client": generate_http_client,
}
