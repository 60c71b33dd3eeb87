"""GNU Wget generators: a single request, and a site mirror.

Wget has no multipart support, so multipart fields become comments.
"""

from __future__ import annotations

import math
import shlex

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    is_stdin,
    json_text,
    method_of,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

CONTINUATION = " \\\n  "

_MIRROR_FLAGS = [
    "--mirror",
    "--convert-links",
    "--adjust-extension",
    "--page-requisites",
    "--no-parent",
]


def shell_quote(value: str) -> str:
    """Quote *value* as one POSIX shell word (``'`` becomes ``'"'"'``)."""
    return shlex.quote(value)


repr_str = shell_quote


def _double_quoted(value: str) -> str:
    """Body of a double-quoted shell word; ``$(...)`` is added by the caller."""
    return "".join("\\" + char if char in '\\"$`' else char for char in value)


_env = template_environment(q=shell_quote)


def _substitution(item: FileDataParam) -> str:
    source = "" if is_stdin(item.filename) else f" < {shell_quote(item.filename)}"
    if item.filetype == FileParamType.DATA:
        command = f"tr -d '\\r\\n'{source}"
    elif item.filetype == FileParamType.URLENCODE:
        command = f"jq -sRr @uri{source}"
    else:
        command = f"cat{source}"
    if item.filetype == FileParamType.URLENCODE and item.name:
        return _double_quoted(item.name + "=") + f"$({command})"
    return f"$({command})"


def _body_args(request: Request) -> list[str]:
    kind = body_kind(request)
    if kind == BodyKind.JSON:
        return [f"--body-data={shell_quote(json_text(request))}"]
    if kind != BodyKind.DATA:
        return []
    items = data_items(request)
    if len(items) == 1 and isinstance(items[0], FileDataParam):
        item = items[0]
        if item.filetype in (FileParamType.BINARY, FileParamType.JSON):
            path = "/dev/stdin" if is_stdin(item.filename) else item.filename
            return [f"--body-file={shell_quote(path)}"]
    if all(not isinstance(item, FileDataParam) for item in items):
        return [f"--body-data={shell_quote('&'.join(items))}"]  # type: ignore[arg-type]
    parts = [
        _substitution(item) if isinstance(item, FileDataParam) else _double_quoted(item)
        for item in items
    ]
    return ['--body-data="' + "&".join(parts) + '"']


def _header_args(request: Request) -> list[str]:
    return [
        f"--header={shell_quote(f'{name}: {value}')}" for name, value in request.headers.items()
    ]


def _connection_args(request: Request, notes: list[str]) -> list[str]:
    """Auth, TLS, proxy and timeout options shared by both variants."""
    args: list[str] = []
    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.NEGOTIATE:
            notes.append("wget does not support negotiate authentication.")
        else:
            args.append(f"--user={shell_quote(auth.username)}")
            args.append(f"--password={shell_quote(auth.password)}")
            if auth.type == AuthType.BASIC:
                args.append("--auth-no-challenge")
    if request.insecure:
        args.append("--no-check-certificate")
    if request.proxy:
        args.append("--execute=use_proxy=yes")
        args.append(f"--execute={shell_quote('http_proxy=' + request.proxy)}")
        args.append(f"--execute={shell_quote('https_proxy=' + request.proxy)}")
    if request.timeout is not None:
        args.append(f"--timeout={max(1, math.ceil(request.timeout))}")
    for path in request.cookie_files:
        args.append(f"--load-cookies={shell_quote(path)}")
    return args


_TEMPLATE = _env.from_string(
    """\
{% for line in notes %}
# {{ line }}
{% endfor %}
wget {{ args|join(continuation) }}
"""
)


def generate_standard(request: Request) -> str:
    """Render *request* as a single ``wget`` invocation printing to stdout."""
    notes: list[str] = []
    args = ["--quiet"]
    body = _body_args(request)
    method = method_of(request)
    if method != "GET" or body:
        args.append(f"--method={shell_quote(request.method)}")
    args.extend(_header_args(request))
    args.extend(body)
    if body_kind(request) == BodyKind.MULTIPART:
        notes.append("wget cannot send multipart/form-data. Fields:")
        for field in request.multipart_uploads:
            source = f"@{field.content}" if field.is_file else field.content
            notes.append(comment_text(f"  {field.name}={source}"))
    if not request.follow_redirects:
        args.append("--max-redirect=0")
    elif request.max_redirs is not None:
        args.append(f"--max-redirect={request.max_redirs}")
    if request.compressed:
        args.append("--compression=auto")
    args.extend(_connection_args(request, notes))
    target = request.output_path or "-"
    args.append(f"--output-document={shell_quote(target)}")
    args.append(shell_quote(request.url))
    return render(_TEMPLATE, notes=notes, args=args, continuation=CONTINUATION)


def generate_mirror(request: Request) -> str:
    """Render a recursive ``wget --mirror`` of the request URL.

    Mirroring only issues GET requests, so the method and body are dropped.
    """
    notes: list[str] = []
    if method_of(request) != "GET" or body_kind(request) != BodyKind.NONE:
        notes.append("Mirroring only sends GET requests; the method and body are dropped.")
    args = list(_MIRROR_FLAGS)
    args.extend(_header_args(request))
    if request.max_redirs is not None:
        args.append(f"--max-redirect={request.max_redirs}")
    args.extend(_connection_args(request, notes))
    if request.output_path:
        args.append(f"--directory-prefix={shell_quote(request.output_path)}")
    args.append(shell_quote(request.url))
    return render(_TEMPLATE, notes=notes, args=args, continuation=CONTINUATION)


GENERATORS = {
    "Standard": generate_standard,
    "Mirror": generate_mirror,
}
