"""Node.js generators: the built-in ``http``/``https`` modules, Axios and Got.

String escaping and object literals are shared with the browser
generators in :mod:`curlconv.generators.javascript`.
"""

from __future__ import annotations

from typing import Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    file_name_only,
    header_lookup,
    headers_without,
    is_stdin,
    json_as_text,
    json_is_raw,
    json_text,
    render,
    split_proxy,
    split_url,
    template_environment,
)
from curlconv.generators.javascript import (
    header_entries,
    js_object,
    literal,
    object_key,
    repr_str,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_env = template_environment(q=repr_str)


def _read(filename: str, read_fn: str, binary: bool = False) -> str:
    """``fs.readFileSync`` call; file descriptor 0 is standard input."""
    source = "0" if is_stdin(filename) else repr_str(filename)
    if binary:
        return f"{read_fn}({source})"
    return f"{read_fn}({source}, 'utf8')"


def _item_expr(item: FileDataParam, read_fn: str) -> str:
    if item.filetype == FileParamType.BINARY:
        return _read(item.filename, read_fn, binary=True)
    if item.filetype == FileParamType.URLENCODE:
        expr = f"encodeURIComponent({_read(item.filename, read_fn)})"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    if item.filetype == FileParamType.JSON:
        return _read(item.filename, read_fn)
    return f"{_read(item.filename, read_fn)}.replace(/[\\r\\n]/g, '')"


def _data_expr(request: Request, read_fn: str) -> str:
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    parts = [
        _item_expr(item, read_fn) if isinstance(item, FileDataParam) else repr_str(item)
        for item in items
    ]
    if len(parts) == 1:
        return parts[0]
    return "[\n  " + ",\n  ".join(parts) + ",\n].join('&')"


def _uses_files(request: Request) -> bool:
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        return any(field.is_file for field in request.multipart_uploads)
    if kind == BodyKind.DATA:
        return any(isinstance(item, FileDataParam) for item in data_items(request))
    return False


def _is_json_content(headers: dict[str, str]) -> bool:
    return (header_lookup(headers, "Content-Type") or "").lower() == "application/json"


# --- Native http/https ---

_NATIVE_TEMPLATE = _env.from_string(
    """\
const {{ module }} = require('{{ module }}');
{% if uses_fs %}
const fs = require('fs');
{% endif %}

const options = {{ options }};

const req = {{ module }}.request({{ url|q }}, options, (res) => {
  let data = '';
  res.on('data', (chunk) => {
    data += chunk;
  });
  res.on('end', () => {
    console.log(res.statusCode);
    console.log(data);
  });
});

req.on('error', (err) => {
  console.error(err);
});
{% for line in form_notes %}
{% if loop.first %}

{% endif %}
{{ line }}
{% endfor %}
{% if body %}

req.write({{ body }});
{% endif %}
req.end();
"""
)


def generate_native(request: Request) -> str:
    """Render *request* with Node's built-in ``http``/``https`` module."""
    url = split_url(request.url)
    module = "https" if url.scheme == "https" else "http"

    headers = dict(request.headers)
    body: Optional[str] = None
    form_notes: list[str] = []
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        form_notes.append("// The http module does not build multipart/form-data bodies;")
        form_notes.append("// send these fields with a FormData-aware client instead:")
        for field in request.multipart_uploads:
            source = f"@{field.content}" if field.is_file else field.content
            form_notes.append(comment_text(f"//   {field.name}={source}"))
    elif kind == BodyKind.JSON:
        body = (
            repr_str(json_text(request))
            if json_is_raw(request)
            else f"JSON.stringify({literal(request.json_data)})"
        )
    elif kind == BodyKind.DATA:
        body = _data_expr(request, "fs.readFileSync")

    options = [("method", repr_str(request.method))]
    if headers:
        options.append(("headers", js_object(header_entries(headers), 1)))
    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            creds = f"{request.auth.username}:{request.auth.password}"
            options.append(("auth", repr_str(creds)))
        else:
            form_notes.append(
                f"// {request.auth.type.value} authentication needs an extra package."
            )
    if request.insecure and module == "https":
        options.append(("rejectUnauthorized", "false"))
    if request.timeout is not None:
        options.append(("timeout", str(int(request.timeout * 1000))))

    return render(
        _NATIVE_TEMPLATE,
        module=module,
        uses_fs=_uses_files(request),
        options=js_object(options),
        url=request.url,
        form_notes=form_notes,
        body=body,
    )


# --- Axios ---

_AXIOS_TEMPLATE = _env.from_string(
    """\
const axios = require('axios');
{% if uses_form %}
const FormData = require('form-data');
{% endif %}
{% if uses_fs %}
const fs = require('fs');
{% endif %}
{% if uses_https %}
const https = require('https');
{% endif %}

{% for line in setup %}
{{ line }}
{% endfor %}
{% if setup %}

{% endif %}
axios({{ config }})
  .then((response) => {
    console.log(response.status);
    console.log(response.data);
  })
  .catch((error) => {
    console.error(error);
  });
"""
)


def generate_axios(request: Request) -> str:
    """Render *request* as an ``axios(config)`` call."""
    headers = dict(request.headers)
    setup: list[str] = []
    data: Optional[str] = None
    uses_form = False

    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        uses_form = True
        headers = headers_without(headers, "Content-Type")
        setup.append("const form = new FormData();")
        for field in request.multipart_uploads:
            if field.is_file:
                path = field.content_file or field.content
                stream = "process.stdin" if is_stdin(path) else (
                    f"fs.createReadStream({repr_str(path)})"
                )
                setup.append(f"form.append({repr_str(field.name)}, {stream});")
            else:
                setup.append(
                    f"form.append({repr_str(field.name)}, {repr_str(field.content)});"
                )
        data = "form"
    elif kind == BodyKind.JSON:
        if json_as_text(request):
            data = repr_str(json_text(request))
        else:
            data = literal(request.json_data, 1)
            if _is_json_content(headers):
                headers = headers_without(headers, "Content-Type")
    elif kind == BodyKind.DATA:
        data = _data_expr(request, "fs.readFileSync")

    config = [("method", repr_str(request.method.lower())), ("url", repr_str(request.url))]
    header_items = header_entries(headers)
    if uses_form:
        header_items.insert(0, ("...form.getHeaders()", ""))
    if header_items:
        config.append(("headers", js_object(header_items, 1)))
    if data is not None:
        config.append(("data", data))
    if request.auth is not None:
        auth = request.auth
        if auth.type == AuthType.BASIC:
            config.append(
                (
                    "auth",
                    js_object(
                        [
                            ("username", repr_str(auth.username)),
                            ("password", repr_str(auth.password)),
                        ],
                        1,
                    ),
                )
            )
        else:
            setup.append(f"// Axios has no built-in {auth.type.value} authentication.")
    if request.timeout is not None:
        config.append(("timeout", str(int(request.timeout * 1000))))
    if request.max_redirs is not None:
        config.append(("maxRedirects", str(request.max_redirs)))
    if request.proxy:
        proxy = split_proxy(request.proxy)
        proxy_entries = [
            ("protocol", repr_str(proxy.scheme)),
            ("host", repr_str(proxy.host)),
        ]
        if proxy.port is not None:
            proxy_entries.append(("port", str(proxy.port)))
        config.append(("proxy", js_object(proxy_entries, 1)))
    if request.insecure:
        config.append(("httpsAgent", "new https.Agent({ rejectUnauthorized: false })"))

    return render(
        _AXIOS_TEMPLATE,
        uses_form=uses_form,
        uses_fs=_uses_files(request),
        uses_https=request.insecure,
        setup=setup,
        config=js_object(config),
    )


# --- Got ---

_GOT_TEMPLATE = _env.from_string(
    """\
import got from 'got';
{% if uses_fs %}
import { readFileSync } from 'node:fs';
{% endif %}

{% for line in setup %}
{{ line }}
{% endfor %}
{% if setup %}

{% endif %}
{% if options %}
const response = await got({{ url|q }}, {{ options }});
{% else %}
const response = await got({{ url|q }});
{% endif %}

console.log(response.statusCode);
console.log(response.body);
"""
)


def generate_got(request: Request) -> str:
    """Render *request* with Got (an ES module, so top-level ``await`` is used)."""
    headers = dict(request.headers)
    setup: list[str] = []
    options: list[tuple[str, str]] = []
    body_option: Optional[tuple[str, str]] = None

    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        setup.append("const form = new FormData();")
        for field in request.multipart_uploads:
            if field.is_file:
                path = field.content_file or field.content
                blob = f"new Blob([{_read(path, 'readFileSync', binary=True)}])"
                setup.append(
                    f"form.append({repr_str(field.name)}, {blob}, "
                    f"{repr_str(file_name_only(path))});"
                )
            else:
                setup.append(
                    f"form.append({repr_str(field.name)}, {repr_str(field.content)});"
                )
        body_option = ("body", "form")
    elif kind == BodyKind.JSON:
        if json_as_text(request):
            body_option = ("body", repr_str(json_text(request)))
        else:
            body_option = ("json", literal(request.json_data, 1))
            if _is_json_content(headers):
                headers = headers_without(headers, "Content-Type")
    elif kind == BodyKind.DATA:
        body_option = ("body", _data_expr(request, "readFileSync"))

    if request.method != "GET":
        options.append(("method", repr_str(request.method.upper())))
    if headers:
        options.append(("headers", js_object(header_entries(headers), 1)))
    if body_option is not None:
        options.append(body_option)
    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            options.append(("username", repr_str(request.auth.username)))
            options.append(("password", repr_str(request.auth.password)))
        else:
            setup.append(f"// Got has no built-in {request.auth.type.value} authentication.")
    if request.timeout is not None:
        options.append(
            ("timeout", js_object([("request", str(int(request.timeout * 1000)))], 1))
        )
    if request.max_redirs is not None:
        options.append(("maxRedirects", str(request.max_redirs)))
    if request.insecure:
        options.append(
            ("https", js_object([(object_key("rejectUnauthorized"), "false")], 1))
        )

    return render(
        _GOT_TEMPLATE,
        uses_fs=_uses_files(request),
        setup=setup,
        url=request.url,
        options=js_object(options) if options else "",
    )


GENERATORS = {
    "Native HTTP": generate_native,
    "Axios": generate_axios,
    "Got": generate_got,
}
