"""Rust generators: reqwest (blocking client) and ureq 2.x."""

from __future__ import annotations

from typing import Optional

from curlconv.generators.common import (
    BodyKind,
    basic_credentials,
    body_kind,
    comment_text,
    data_items,
    headers_without,
    is_stdin,
    json_text,
    method_of,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}

_REQWEST_SHORTCUTS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"})


def repr_str(value: str) -> str:
    """Rust string literal; other control characters use ``\\u{NN}``."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{{{ord(char):x}}}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


_env = template_environment(q=repr_str)


class _Crate:
    """``use`` lines and dependencies a snippet needs."""

    def __init__(self, dependency: str) -> None:
        self.uses: set[str] = set()
        self.dependencies = [dependency]

    def use(self, path: str) -> None:
        self.uses.add(path)

    def depend(self, dependency: str) -> None:
        if dependency not in self.dependencies:
            self.dependencies.append(dependency)

    def read_text(self, filename: str) -> str:
        if is_stdin(filename):
            self.use("std::io")
            return "io::read_to_string(io::stdin())?"
        self.use("std::fs")
        return f"fs::read_to_string({repr_str(filename)})?"

    def read_bytes(self, filename: str) -> str:
        if is_stdin(filename):
            self.use("std::io")
            self.use("std::io::Read")
            return "{ let mut buf = Vec::new(); io::stdin().read_to_end(&mut buf)?; buf }"
        self.use("std::fs")
        return f"fs::read({repr_str(filename)})?"


def _item_expr(item: FileDataParam, crate: _Crate) -> str:
    text = crate.read_text(item.filename)
    if item.filetype == FileParamType.DATA:
        return f"{text}.replace(['\\r', '\\n'], \"\")"
    if item.filetype == FileParamType.URLENCODE:
        crate.depend('urlencoding = "2"')
        expr = f"urlencoding::encode(&{text}).into_owned()"
        return f"{repr_str(item.name + '=')}.to_string() + &{expr}" if item.name else expr
    return text


def string_body(request: Request, crate: _Crate) -> Optional[str]:
    """A Rust expression yielding the JSON or data body as a string, if any."""
    kind = body_kind(request)
    if kind == BodyKind.JSON:
        return repr_str(json_text(request))
    if kind != BodyKind.DATA:
        return None
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    parts = [
        _item_expr(item, crate) if isinstance(item, FileDataParam) else f"{repr_str(item)}.to_string()"
        for item in items
    ]
    if len(parts) == 1:
        return parts[0]
    return "[\n        " + ",\n        ".join(parts) + ',\n    ]\n    .join("&")'


def _single_binary(request: Request) -> Optional[FileDataParam]:
    items = data_items(request)
    if body_kind(request) == BodyKind.DATA and len(items) == 1:
        item = items[0]
        if isinstance(item, FileDataParam) and item.filetype == FileParamType.BINARY:
            return item
    return None


def _auth_note(request: Request) -> Optional[str]:
    auth = request.auth
    if auth is None or auth.type == AuthType.BASIC:
        return None
    return f"// {auth.type.value} authentication is not supported; the credentials are not sent."


# --- reqwest ---

_REQWEST_TEMPLATE = _env.from_string(
    """\
// Cargo.toml:
{% for dependency in dependencies %}
// {{ dependency }}
{% endfor %}
{% if uses %}

{% for path in uses %}
use {{ path }};
{% endfor %}
{% endif %}

fn main() -> Result<(), Box<dyn std::error::Error>> {
{% if note %}
    {{ note }}
{% endif %}
{% if builder %}
    let client = reqwest::blocking::Client::builder()
{% for line in builder %}
        {{ line }}
{% endfor %}
        .build()?;
{% else %}
    let client = reqwest::blocking::Client::new();
{% endif %}
{% for line in prelude %}
    {{ line }}
{% endfor %}

    let response = client
        {{ start }}
{% for line in calls %}
        {{ line }}
{% endfor %}
        .send()?;

    println!("{}", response.status());
    println!("{}", response.text()?);
    Ok(())
}
"""
)


def _reqwest_form(request: Request, crate: _Crate) -> list[str]:
    lines = ["let form = reqwest::blocking::multipart::Form::new()"]
    for field in request.multipart_uploads:
        name = repr_str(field.name)
        if not field.is_file:
            lines.append(f"    .text({name}, {repr_str(field.content)})")
            continue
        path = field.content_file or field.content
        if is_stdin(path):
            lines.append(
                f"    .part({name}, reqwest::blocking::multipart::Part::bytes("
                f"{crate.read_bytes(path)}).file_name(\"stdin\"))"
            )
        else:
            lines.append(f"    .file({name}, {repr_str(path)})?")
    lines[-1] += ";"
    return lines


def generate_reqwest(request: Request) -> str:
    """Render *request* with reqwest's blocking client."""
    crate = _Crate('reqwest = { version = "0.12", features = ["blocking", "multipart"] }')
    headers = dict(request.headers)
    prelude: list[str] = []
    calls: list[str] = []

    kind = body_kind(request)
    single = _single_binary(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        prelude.extend(_reqwest_form(request, crate))
    elif single is not None:
        prelude.append(f"let body = {crate.read_bytes(single.filename)};")
    elif kind != BodyKind.NONE:
        prelude.append(f"let body = {string_body(request, crate)};")

    method = method_of(request)
    if method in _REQWEST_SHORTCUTS:
        start = f".{method.lower()}({repr_str(request.url)})"
    else:
        start = (
            f".request(reqwest::Method::from_bytes({repr_str(request.method)}.as_bytes())?, "
            f"{repr_str(request.url)})"
        )
    for name, value in headers.items():
        calls.append(f".header({repr_str(name)}, {repr_str(value)})")
    auth = request.auth
    if auth is not None and auth.type == AuthType.BASIC:
        calls.append(f".basic_auth({repr_str(auth.username)}, Some({repr_str(auth.password)}))")
    if kind == BodyKind.MULTIPART:
        calls.append(".multipart(form)")
    elif kind != BodyKind.NONE:
        calls.append(".body(body)")

    builder: list[str] = []
    if request.insecure:
        builder.append(".danger_accept_invalid_certs(true)")
    if not request.follow_redirects:
        builder.append(".redirect(reqwest::redirect::Policy::none())")
    elif request.max_redirs is not None:
        builder.append(f".redirect(reqwest::redirect::Policy::limited({request.max_redirs}))")
    if request.timeout is not None:
        crate.use("std::time::Duration")
        builder.append(f".timeout(Duration::from_millis({int(request.timeout * 1000)}))")
    if request.proxy:
        builder.append(f".proxy(reqwest::Proxy::all({repr_str(request.proxy)})?)")
    if request.http_version in ("1.0", "1.1"):
        builder.append(".http1_only()")

    return render(
        _REQWEST_TEMPLATE,
        dependencies=crate.dependencies,
        uses=sorted(crate.uses),
        note=_auth_note(request),
        builder=builder,
        prelude=prelude,
        start=start,
        calls=calls,
    )


# --- ureq ---

_UREQ_TEMPLATE = _env.from_string(
    """\
// Cargo.toml:
{% for dependency in dependencies %}
// {{ dependency }}
{% endfor %}
{% if uses %}

{% for path in uses %}
use {{ path }};
{% endfor %}
{% endif %}

fn main() -> Result<(), Box<dyn std::error::Error>> {
{% for line in notes %}
    {{ line }}
{% endfor %}
{% if agent %}
    let agent = ureq::AgentBuilder::new()
{% for line in agent %}
        {{ line }}
{% endfor %}
        .build();
{% endif %}
{% for line in prelude %}
    {{ line }}
{% endfor %}

    let response = {{ start }}
{% for line in calls %}
        {{ line }}
{% endfor %}
        {{ send }}?;

    println!("{}", response.status());
    println!("{}", response.into_string()?);
    Ok(())
}
"""
)


def generate_ureq(request: Request) -> str:
    """Render *request* with ureq 2.x."""
    crate = _Crate('ureq = "2"')
    headers = dict(request.headers)
    notes: list[str] = []
    prelude: list[str] = []
    auth_note = _auth_note(request)
    if auth_note is not None:
        notes.append(auth_note)

    kind = body_kind(request)
    single = _single_binary(request)
    send = ".call()"
    if kind == BodyKind.MULTIPART:
        notes.append("// ureq does not build multipart/form-data bodies. Fields:")
        for field in request.multipart_uploads:
            source = f"@{field.content}" if field.is_file else field.content
            notes.append(comment_text(f"//   {field.name}={source}"))
    elif single is not None:
        prelude.append(f"let body = {crate.read_bytes(single.filename)};")
        send = ".send_bytes(&body)"
    elif kind != BodyKind.NONE:
        prelude.append(f"let body = {string_body(request, crate)};")
        send = ".send_string(&body)"

    calls = [f".set({repr_str(name)}, {repr_str(value)})" for name, value in headers.items()]
    credentials = basic_credentials(request)
    if credentials is not None:
        calls.append(f".set(\"Authorization\", {repr_str(credentials)})")

    agent: list[str] = []
    if not request.follow_redirects:
        agent.append(".redirects(0)")
    elif request.max_redirs is not None:
        agent.append(f".redirects({request.max_redirs})")
    if request.timeout is not None:
        crate.use("std::time::Duration")
        agent.append(f".timeout(Duration::from_millis({int(request.timeout * 1000)}))")
    if request.proxy:
        agent.append(f".proxy(ureq::Proxy::new({repr_str(request.proxy)})?)")
    if request.insecure:
        notes.append("// Accepting invalid certificates needs a custom TLS config on the agent.")

    caller = "agent" if agent else "ureq"
    start = f"{caller}.request({repr_str(request.method)}, {repr_str(request.url)})"
    return render(
        _UREQ_TEMPLATE,
        dependencies=crate.dependencies,
        uses=sorted(crate.uses),
        notes=notes,
        agent=agent,
        prelude=prelude,
        start=start,
        calls=calls,
        send=send,
    )


GENERATORS = {
    "Reqwest": generate_reqwest,
    "Ureq": generate_ureq,
}
