"""PHP generators: the cURL extension and Guzzle."""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    data_items,
    file_name_only,
    header_lookup,
    headers_without,
    is_stdin,
    json_as_text,
    json_text,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_DOUBLE_QUOTED_ESCAPES = {
    "\\": "\\\\",
    "$": "\\$",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\x1b": "\\e",
    "\f": "\\f",
}


def _has_control(value: str) -> bool:
    return any(ord(char) < 0x20 or ord(char) == 0x7F for char in value)


def repr_str(value: str) -> str:
    """PHP string literal for *value*.

    Single-quoted unless *value* holds control characters, which only a
    double-quoted string can spell on one line.
    """
    if not _has_control(value):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    out = []
    for char in value:
        if char in _DOUBLE_QUOTED_ESCAPES:
            out.append(_DOUBLE_QUOTED_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def literal(value: Any, level: int = 0) -> str:
    """PHP array/scalar source for a decoded JSON value."""
    pad = "    " * (level + 1)
    closing = "    " * level
    if isinstance(value, dict):
        if not value:
            return "new \\stdClass()"
        items = "".join(
            f"{pad}{repr_str(str(k))} => {literal(v, level + 1)},\n" for k, v in value.items()
        )
        return "[\n" + items + closing + "]"
    if isinstance(value, list):
        if not value:
            return "[]"
        items = "".join(f"{pad}{literal(v, level + 1)},\n" for v in value)
        return "[\n" + items + closing + "]"
    if isinstance(value, str):
        return repr_str(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        return "NAN" if math.isnan(value) else ("INF" if value > 0 else "-INF")
    return json.dumps(value)


_env = template_environment(q=repr_str)


def _read(filename: str) -> str:
    source = "php://stdin" if is_stdin(filename) else filename
    return f"file_get_contents({repr_str(source)})"


def _item_expr(item: FileDataParam) -> str:
    text = _read(item.filename)
    if item.filetype == FileParamType.DATA:
        return f"str_replace([\"\\r\", \"\\n\"], '', {text})"
    if item.filetype == FileParamType.URLENCODE:
        expr = f"rawurlencode({text})"
        return f"{repr_str(item.name + '=')} . {expr}" if item.name else expr
    return text


def string_body(request: Request) -> Optional[str]:
    """A PHP string expression for the JSON or data body, if any."""
    kind = body_kind(request)
    if kind == BodyKind.JSON:
        return repr_str(json_text(request))
    if kind != BodyKind.DATA:
        return None
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    parts = [
        _item_expr(item) if isinstance(item, FileDataParam) else repr_str(item)
        for item in items
    ]
    if len(parts) == 1:
        return parts[0]
    return "implode('&', [\n    " + ",\n    ".join(parts) + ",\n])"


def _file_value(path: str, stdin_expr: str, file_expr: str) -> str:
    return stdin_expr if is_stdin(path) else file_expr


# --- cURL extension ---

_CURL_TEMPLATE = _env.from_string(
    """\
<?php
$ch = curl_init();
curl_setopt($ch, CURLOPT_URL, {{ url|q }});
curl_setopt($ch, CURLOPT_RETURNTRANSFER, true);
{% if method %}
curl_setopt($ch, CURLOPT_CUSTOMREQUEST, {{ method|q }});
{% endif %}
{% if headers %}
curl_setopt($ch, CURLOPT_HTTPHEADER, [
{% for name, value in headers.items() %}
    {{ (name ~ ': ' ~ value)|q }},
{% endfor %}
]);
{% endif %}
{% if body %}
curl_setopt($ch, CURLOPT_POSTFIELDS, {{ body }});
{% endif %}
{% for option, value in options %}
curl_setopt($ch, {{ option }}, {{ value }});
{% endfor %}

$response = curl_exec($ch);
if ($response === false) {
    echo curl_error($ch);
}
curl_close($ch);

echo $response;
"""
)

_CURL_AUTH = {
    AuthType.BASIC: "CURLAUTH_BASIC",
    AuthType.DIGEST: "CURLAUTH_DIGEST",
    AuthType.NTLM: "CURLAUTH_NTLM",
    AuthType.NEGOTIATE: "CURLAUTH_NEGOTIATE",
}


def generate_curl(request: Request) -> str:
    """Render *request* with PHP's cURL extension."""
    headers = dict(request.headers)
    body: Optional[str] = None
    if body_kind(request) == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        entries = []
        for field in request.multipart_uploads:
            if field.is_file:
                path = field.content_file or field.content
                value = _file_value(
                    path,
                    "new CURLStringFile(file_get_contents('php://stdin'), 'stdin')",
                    f"new CURLFile({repr_str(path)})",
                )
            else:
                value = repr_str(field.content)
            entries.append(f"    {repr_str(field.name)} => {value},\n")
        body = "[\n" + "".join(entries) + "]"
    else:
        body = string_body(request)

    options: list[tuple[str, str]] = []
    auth = request.auth
    if auth is not None:
        options.append(("CURLOPT_USERPWD", repr_str(f"{auth.username}:{auth.password}")))
        if auth.type != AuthType.BASIC:
            options.append(("CURLOPT_HTTPAUTH", _CURL_AUTH[auth.type]))
    if request.follow_redirects:
        options.append(("CURLOPT_FOLLOWLOCATION", "true"))
    if request.max_redirs is not None:
        options.append(("CURLOPT_MAXREDIRS", str(request.max_redirs)))
    if request.insecure:
        options.append(("CURLOPT_SSL_VERIFYPEER", "false"))
        options.append(("CURLOPT_SSL_VERIFYHOST", "0"))
    if request.timeout is not None:
        options.append(("CURLOPT_TIMEOUT_MS", str(int(request.timeout * 1000))))
    if request.proxy:
        options.append(("CURLOPT_PROXY", repr_str(request.proxy)))
    if request.compressed:
        options.append(("CURLOPT_ENCODING", "''"))
    if request.http_version == "2":
        options.append(("CURLOPT_HTTP_VERSION", "CURL_HTTP_VERSION_2_0"))
    elif request.http_version == "1.1":
        options.append(("CURLOPT_HTTP_VERSION", "CURL_HTTP_VERSION_1_1"))
    elif request.http_version == "1.0":
        options.append(("CURLOPT_HTTP_VERSION", "CURL_HTTP_VERSION_1_0"))

    method = request.method
    implied = "POST" if body is not None else "GET"
    return render(
        _CURL_TEMPLATE,
        url=request.url,
        method=None if method == implied else method,
        headers=headers,
        body=body,
        options=options,
    )


# --- Guzzle ---

_GUZZLE_TEMPLATE = _env.from_string(
    """\
<?php
require 'vendor/autoload.php';

$client = new GuzzleHttp\\Client();

{% if options %}
$response = $client->request({{ method|q }}, {{ url|q }}, [
{% for key, value in options %}
    {{ key|q }} => {{ value }},
{% endfor %}
]);
{% else %}
$response = $client->request({{ method|q }}, {{ url|q }});
{% endif %}

echo $response->getStatusCode() . "\\n";
echo $response->getBody();
"""
)


def _guzzle_multipart(request: Request) -> str:
    parts = []
    for field in request.multipart_uploads:
        entries = [f"'name' => {repr_str(field.name)}"]
        if field.is_file:
            path = field.content_file or field.content
            entries.append(
                "'contents' => "
                + _file_value(path, "fopen('php://stdin', 'r')", f"fopen({repr_str(path)}, 'r')")
            )
            entries.append(f"'filename' => {repr_str(file_name_only(path))}")
        else:
            entries.append(f"'contents' => {repr_str(field.content)}")
        inner = "".join(f"            {entry},\n" for entry in entries)
        parts.append("        [\n" + inner + "        ],\n")
    return "[\n" + "".join(parts) + "    ]"


def generate_guzzle(request: Request) -> str:
    """Render *request* with the Guzzle HTTP client."""
    headers = dict(request.headers)
    options: list[tuple[str, str]] = []

    kind = body_kind(request)
    body_option: Optional[tuple[str, str]] = None
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        body_option = ("multipart", _guzzle_multipart(request))
    elif kind == BodyKind.JSON and not json_as_text(request):
        if (header_lookup(headers, "Content-Type") or "").lower() == "application/json":
            headers = headers_without(headers, "Content-Type")
        body_option = ("json", literal(request.json_data, 1))
    elif kind != BodyKind.NONE:
        body_option = ("body", string_body(request) or "''")

    if headers:
        entries = "".join(
            f"        {repr_str(name)} => {repr_str(value)},\n" for name, value in headers.items()
        )
        options.append(("headers", "[\n" + entries + "    ]"))
    if body_option is not None:
        options.append(body_option)
    auth = request.auth
    if auth is not None:
        creds = f"{repr_str(auth.username)}, {repr_str(auth.password)}"
        if auth.type == AuthType.BASIC:
            options.append(("auth", f"[{creds}]"))
        else:
            options.append(("auth", f"[{creds}, {repr_str(auth.type.value)}]"))
    if not request.follow_redirects:
        options.append(("allow_redirects", "false"))
    elif request.max_redirs is not None:
        options.append(("allow_redirects", f"['max' => {request.max_redirs}]"))
    if request.insecure:
        options.append(("verify", "false"))
    if request.timeout is not None:
        options.append(("timeout", json.dumps(request.timeout)))
    if request.proxy:
        options.append(("proxy", repr_str(request.proxy)))

    return render(
        _GUZZLE_TEMPLATE,
        method=request.method,
        url=request.url,
        options=options,
    )


GENERATORS = {
    "cURL": generate_curl,
    "Guzzle": generate_guzzle,
}
