"""Windows ``curl.exe`` generators for CMD and PowerShell.

The request is written back out as a normalised curl command line, one
option per line, with the continuation character of each shell.
"""

from __future__ import annotations

import re
from typing import Callable

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    data_items,
    format_number,
    header_lookup,
    headers_without,
    json_text,
    method_of,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_FILE_OPTIONS = {
    FileParamType.DATA: "--data",
    FileParamType.BINARY: "--data-binary",
    FileParamType.URLENCODE: "--data-urlencode",
    FileParamType.JSON: "--json",
}


_CMD_METACHARACTERS = re.compile(r'([\^"&|<>%])')


def cmd_quote(value: str) -> str:
    """Double-quote *value* for ``curl.exe`` started from CMD.

    Follows the Microsoft C runtime argument rules: ``"`` becomes ``\\"``
    and backslashes are doubled only where they precede a quote. A CMD
    argument cannot hold a newline, so each one is replaced by a space.

    cmd.exe reads the line first. It toggles quoting at every ``"``,
    escaped or not, and expands ``%VAR%`` even inside quotes. A value
    with an inner quote or a ``%`` therefore gets every cmd
    metacharacter caret-escaped (``^"``, ``^&``, ``^%`` and so on).
    """
    out = []
    backslashes = 0
    for char in value.replace("\r\n", " ").replace("\n", " ").replace("\r", " "):
        if char == "\\":
            backslashes += 1
            continue
        if char == '"':
            out.append("\\" * (backslashes * 2 + 1) + '"')
        else:
            out.append("\\" * backslashes + char)
        backslashes = 0
    out.append("\\" * (backslashes * 2))
    body = "".join(out)
    quoted = '"' + body + '"'
    if '"' in body or "%" in body:
        return _CMD_METACHARACTERS.sub(r"^\1", quoted)
    return quoted


def ps_quote(value: str) -> str:
    """Single-quote *value* for PowerShell; ``'`` is doubled.

    Native argument passing needs PowerShell 7.3 or later for values
    that contain double quotes.
    """
    return "'" + value.replace("'", "''") + "'"


def _file_arg(item: FileDataParam) -> str:
    if item.filetype == FileParamType.URLENCODE and item.name:
        return f"{item.name}@{item.filename}"
    return f"@{item.filename}"


def _body_args(request: Request) -> list[tuple[str, str]]:
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        return [
            ("-F", f"{field.name}=@{field.content_file or field.content}")
            if field.is_file
            else ("--form-string", f"{field.name}={field.content}")
            for field in request.multipart_uploads
        ]
    if kind == BodyKind.JSON:
        return [("--json", json_text(request))]
    if kind == BodyKind.DATA:
        return [
            (_FILE_OPTIONS[item.filetype], _file_arg(item))
            if isinstance(item, FileDataParam)
            else ("--data-raw", item)
            for item in data_items(request)
        ]
    return []


def _arguments(request: Request, quote: Callable[[str], str]) -> list[str]:
    headers = dict(request.headers)
    body = _body_args(request)
    if any(option == "--json" for option, _ in body):
        # --json sets the header itself.
        if (header_lookup(headers, "Content-Type") or "").lower() == "application/json":
            headers = headers_without(headers, "Content-Type")

    args: list[str] = []
    method = request.method
    if method_of(request) == "HEAD" and not body:
        args.append("-I")
    elif method != ("POST" if body else "GET"):
        args.append(f"-X {method if method.isalnum() else quote(method)}")
    args.append(quote(request.url))
    for name, value in headers.items():
        args.append(f"-H {quote(f'{name}: {value}')}")
    for option, value in body:
        args.append(f"{option} {quote(value)}")

    auth = request.auth
    if auth is not None:
        args.append(f"-u {quote(f'{auth.username}:{auth.password}')}")
        if auth.type != AuthType.BASIC:
            args.append(f"--{auth.type.value}")
    for path in request.cookie_files:
        args.append(f"-b {quote(path)}")
    if request.insecure:
        args.append("-k")
    if request.follow_redirects:
        args.append("-L")
    if request.max_redirs is not None:
        args.append(f"--max-redirs {request.max_redirs}")
    if request.timeout is not None:
        args.append(f"-m {format_number(request.timeout)}")
    if request.proxy:
        args.append(f"-x {quote(request.proxy)}")
    if request.compressed:
        args.append("--compressed")
    if request.http_version:
        args.append(f"--http{request.http_version}")
    if request.output_path:
        args.append(f"-o {quote(request.output_path)}")
    return args


_TEMPLATE = template_environment().from_string(
    """\
curl.exe {{ args|join(continuation) }}
"""
)


def generate_windows_cmd(request: Request) -> str:
    """Render *request* as a ``curl.exe`` command for ``cmd.exe``."""
    return render(_TEMPLATE, args=_arguments(request, cmd_quote), continuation=" ^\n  ")


def generate_powershell(request: Request) -> str:
    """Render *request* as a ``curl.exe`` command for PowerShell.

    ``curl.exe`` is spelled out because ``curl`` is an alias of
    ``Invoke-WebRequest`` in Windows PowerShell.
    """
    return render(_TEMPLATE, args=_arguments(request, ps_quote), continuation=" `\n  ")


repr_str = ps_quote

GENERATORS = {
    "Windows CMD": generate_windows_cmd,
    "PowerShell": generate_powershell,
}
