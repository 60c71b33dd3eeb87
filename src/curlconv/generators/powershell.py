"""PowerShell generators: ``Invoke-WebRequest`` and ``Invoke-RestMethod``.

Both cmdlets take the same parameters, so one splatted ``$params``
hashtable serves both; they differ in what comes back. ``-Form``,
``-SkipCertificateCheck`` and ``-CustomMethod`` need PowerShell 6 or later.
"""

from __future__ import annotations

import math
from typing import Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    data_items,
    header_lookup,
    headers_without,
    is_stdin,
    json_text,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_ESCAPES = {
    "`": "``",
    '"': '`"',
    "$": "`$",
    "\n": "`n",
    "\r": "`r",
    "\t": "`t",
    "\0": "`0",
    # PowerShell also treats typographic double quotes as quotes.
    "“": "`“",
    "”": "`”",
    "„": "`„",
}

_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "TRACE", "OPTIONS", "MERGE", "PATCH"}
)


def repr_str(value: str) -> str:
    """Double-quoted PowerShell string with backtick escapes."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"$([char]0x{ord(char):02x})")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


_env = template_environment(q=repr_str)


def _read(filename: str) -> str:
    if is_stdin(filename):
        return "[Console]::In.ReadToEnd()"
    return f"(Get-Content -Raw -Path {repr_str(filename)})"


def _item_expr(item: FileDataParam) -> str:
    text = _read(item.filename)
    if item.filetype == FileParamType.DATA:
        return f"({text} -replace '[\\r\\n]', '')"
    if item.filetype == FileParamType.URLENCODE:
        expr = f"[uri]::EscapeDataString({text})"
        return f"({repr_str(item.name + '=')} + {expr})" if item.name else expr
    return text


def _body_expr(request: Request) -> Optional[str]:
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
    return "@(\n    " + ",\n    ".join(parts) + "\n) -join '&'"


def _single_binary_file(request: Request) -> Optional[str]:
    items = data_items(request)
    if body_kind(request) != BodyKind.DATA or len(items) != 1:
        return None
    item = items[0]
    if (
        isinstance(item, FileDataParam)
        and item.filetype == FileParamType.BINARY
        and not is_stdin(item.filename)
    ):
        return item.filename
    return None


_TEMPLATE = _env.from_string(
    """\
{% if headers %}
$headers = @{
{% for name, value in headers %}
    {{ name|q }} = {{ value }}
{% endfor %}
}

{% endif %}
{% if form %}
$form = @{
{% for name, value in form %}
    {{ name|q }} = {{ value }}
{% endfor %}
}

{% endif %}
{% if body %}
$body = {{ body }}

{% endif %}
$params = @{
{% for name, value in params %}
    {{ name }} = {{ value }}
{% endfor %}
}

$response = {{ cmdlet }} @params
{% if cmdlet == 'Invoke-WebRequest' %}
$response.StatusCode
$response.Content
{% else %}
$response | ConvertTo-Json -Depth 10
{% endif %}
"""
)


def _generate(request: Request, cmdlet: str) -> str:
    headers = dict(request.headers)
    content_type = header_lookup(headers, "Content-Type")
    headers = headers_without(headers, "Content-Type")
    header_items = [(name, repr_str(value)) for name, value in headers.items()]

    params: list[tuple[str, str]] = [("Uri", repr_str(request.url))]
    method = request.method.upper()
    if method in _METHODS:
        params.append(("Method", repr_str(method.capitalize())))
    else:
        params.append(("CustomMethod", repr_str(request.method)))

    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.BASIC:
            creds = repr_str(f"{auth.username}:{auth.password}")
            header_items.append(
                (
                    "Authorization",
                    f'"Basic " + [Convert]::ToBase64String([Text.Encoding]::UTF8.GetBytes({creds}))',
                )
            )
        else:
            params.append(
                (
                    "Credential",
                    "(New-Object System.Management.Automation.PSCredential("
                    f"{repr_str(auth.username)}, "
                    f"(ConvertTo-SecureString {repr_str(auth.password)} -AsPlainText -Force)))",
                )
            )
    if header_items:
        params.append(("Headers", "$headers"))

    form: list[tuple[str, str]] = []
    body: Optional[str] = None
    kind = body_kind(request)
    in_file = _single_binary_file(request)
    if kind == BodyKind.MULTIPART:
        for field in request.multipart_uploads:
            if field.is_file:
                path = field.content_file or field.content
                value = (
                    "[Console]::In.ReadToEnd()"
                    if is_stdin(path)
                    else f"Get-Item -Path {repr_str(path)}"
                )
            else:
                value = repr_str(field.content)
            form.append((field.name, value))
        params.append(("Form", "$form"))
    elif in_file is not None:
        params.append(("InFile", repr_str(in_file)))
    else:
        body = _body_expr(request)
        if body is not None:
            params.append(("Body", "$body"))
    if content_type is not None and kind != BodyKind.MULTIPART:
        params.append(("ContentType", repr_str(content_type)))

    if request.insecure:
        params.append(("SkipCertificateCheck", "$true"))
    if request.timeout is not None:
        params.append(("TimeoutSec", str(max(1, math.ceil(request.timeout)))))
    if request.max_redirs is not None:
        params.append(("MaximumRedirection", str(request.max_redirs)))
    if request.proxy:
        params.append(("Proxy", repr_str(request.proxy)))

    return render(
        _TEMPLATE,
        headers=header_items,
        form=form,
        body=body,
        params=params,
        cmdlet=cmdlet,
    )


def generate_web_request(request: Request) -> str:
    """Render *request* with ``Invoke-WebRequest``."""
    return _generate(request, "Invoke-WebRequest")


def generate_rest_method(request: Request) -> str:
    """Render *request* with ``Invoke-RestMethod``, which parses JSON responses."""
    return _generate(request, "Invoke-RestMethod")


GENERATORS = {
    "WebRequest": generate_web_request,
    "RestMethod": generate_rest_method,
}
