"""Go generators: ``net/http`` and Resty."""

from __future__ import annotations

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    data_items,
    file_name_only,
    is_stdin,
    json_is_raw,
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
}


def repr_str(value: str) -> str:
    """Interpreted (double-quoted) Go string literal for *value*."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02x}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def text_literal(value: str) -> str:
    """Raw backtick literal for multi-line text when Go can represent it."""
    if "\n" in value and "`" not in value and "\r" not in value:
        return f"`{value}`"
    return repr_str(value)


_env = template_environment(q=repr_str)

_CHECK = "\tif err != nil {\n\t\tlog.Fatal(err)\n\t}"


class _Program:
    """Imports and ``main`` statements accumulated for one snippet."""

    def __init__(self) -> None:
        self.imports: set[str] = {"fmt", "log"}
        self.statements: list[str] = []

    def read_source(self, filename: str, var: str) -> None:
        if is_stdin(filename):
            self.imports.add("io")
            self.statements.append(f"\t{var}, err := io.ReadAll(os.Stdin)")
        else:
            self.statements.append(f"\t{var}, err := os.ReadFile({repr_str(filename)})")
        self.imports.add("os")
        self.statements.append(_CHECK)

    def import_block(self, third_party: tuple[str, ...] = ()) -> str:
        lines = [f"\t{repr_str(name)}" for name in sorted(self.imports)]
        if third_party:
            lines.append("")
            lines.extend(f"\t{repr_str(name)}" for name in third_party)
        return "import (\n" + "\n".join(lines) + "\n)"


def _item_expr(item: FileDataParam, var: str, program: _Program) -> str:
    if item.filetype == FileParamType.DATA:
        program.imports.add("strings")
        return f'strings.NewReplacer("\\r", "", "\\n", "").Replace(string({var}))'
    if item.filetype == FileParamType.URLENCODE:
        program.imports.add("net/url")
        expr = f"url.QueryEscape(string({var}))"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    return f"string({var})"


def _data_expr(request: Request, program: _Program) -> str:
    """Emit file reads into *program* and return a Go ``string`` expression."""
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return text_literal("&".join(items))  # type: ignore[arg-type]
    parts = []
    for index, item in enumerate(items, start=1):
        if isinstance(item, FileDataParam):
            var = f"file{index}"
            program.read_source(item.filename, var)
            parts.append(_item_expr(item, var, program))
        else:
            parts.append(repr_str(item))
    if len(parts) == 1:
        return parts[0]
    program.imports.add("strings")
    return "strings.Join([]string{" + ", ".join(parts) + '}, "&")'


def _json_body(request: Request) -> str:
    if json_is_raw(request):
        return text_literal(json_text(request))
    return text_literal(json_text(request, indent=2))


# --- net/http ---

_NET_HTTP_TEMPLATE = _env.from_string(
    """\
package main

{{ imports }}

func main() {
{% if transport %}
{% for line in transport %}
{{ line }}
{% endfor %}
{% endif %}
\tclient := {{ client }}
{% for line in setup %}
{{ line }}
{% endfor %}
\treq, err := http.NewRequest({{ method|q }}, {{ url|q }}, {{ body }})
\tif err != nil {
\t\tlog.Fatal(err)
\t}
{% for name, value in headers.items() %}
\treq.Header.Set({{ name|q }}, {{ value|q }})
{% endfor %}
{% if content_type %}
\treq.Header.Set("Content-Type", {{ content_type }})
{% endif %}
{% if basic_auth %}
\treq.SetBasicAuth({{ basic_auth[0]|q }}, {{ basic_auth[1]|q }})
{% endif %}
{% if auth_note %}
\t// {{ auth_note }} authentication is not built into net/http.
{% endif %}
\tresp, err := client.Do(req)
\tif err != nil {
\t\tlog.Fatal(err)
\t}
\tdefer resp.Body.Close()
\tbodyText, err := io.ReadAll(resp.Body)
\tif err != nil {
\t\tlog.Fatal(err)
\t}
\tfmt.Println(resp.Status)
\tfmt.Println(string(bodyText))
}
"""
)


def generate_net_http(request: Request) -> str:
    """Render *request* with the standard library's ``net/http``."""
    program = _Program()
    program.imports.update({"io", "net/http"})

    headers = dict(request.headers)
    content_type = None
    body = "nil"
    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        program.imports.update({"bytes", "mime/multipart"})
        setup = program.statements
        setup.append("\tbody := &bytes.Buffer{}")
        setup.append("\twriter := multipart.NewWriter(body)")
        for index, field in enumerate(request.multipart_uploads, start=1):
            if field.is_file:
                path = field.content_file or field.content
                part = f"part{index}"
                setup.append(
                    f"\t{part}, err := writer.CreateFormFile("
                    f"{repr_str(field.name)}, {repr_str(file_name_only(path))})"
                )
                setup.append(_CHECK)
                program.imports.add("os")
                if is_stdin(path):
                    setup.append(f"\tif _, err := io.Copy({part}, os.Stdin); err != nil {{")
                else:
                    setup.append(f"\tfile{index}, err := os.Open({repr_str(path)})")
                    setup.append(_CHECK)
                    setup.append(f"\tdefer file{index}.Close()")
                    setup.append(
                        f"\tif _, err := io.Copy({part}, file{index}); err != nil {{"
                    )
                setup.append("\t\tlog.Fatal(err)\n\t}")
            else:
                setup.append(
                    f"\twriter.WriteField({repr_str(field.name)}, {repr_str(field.content)})"
                )
        setup.append("\twriter.Close()")
        headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
        content_type = "writer.FormDataContentType()"
        body = "body"
    elif kind == BodyKind.JSON:
        program.imports.add("strings")
        program.statements.append(f"\tvar data = strings.NewReader({_json_body(request)})")
        body = "data"
    elif kind == BodyKind.DATA:
        expr = _data_expr(request, program)
        program.imports.add("strings")
        program.statements.append(f"\tvar data = strings.NewReader({expr})")
        body = "data"

    transport_fields = []
    transport: list[str] = []
    if request.insecure:
        program.imports.add("crypto/tls")
        transport_fields.append("TLSClientConfig: &tls.Config{InsecureSkipVerify: true}")
    if request.proxy:
        program.imports.add("net/url")
        transport.append(f"\tproxyURL, err := url.Parse({repr_str(request.proxy)})")
        transport.append(_CHECK)
        transport_fields.append("Proxy: http.ProxyURL(proxyURL)")
    client_fields = []
    if transport_fields:
        transport.append(
            "\ttransport := &http.Transport{\n"
            + "".join(f"\t\t{field},\n" for field in transport_fields)
            + "\t}"
        )
        client_fields.append("Transport: transport")
    if request.timeout is not None:
        program.imports.add("time")
        client_fields.append(
            f"Timeout: {int(request.timeout * 1000)} * time.Millisecond"
        )
    client = "&http.Client{" + ", ".join(client_fields) + "}"

    basic_auth = auth_note = None
    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            basic_auth = (request.auth.username, request.auth.password)
        else:
            auth_note = request.auth.type.value.upper()

    return render(
        _NET_HTTP_TEMPLATE,
        imports=program.import_block(),
        transport=transport,
        client=client,
        setup=program.statements,
        method=method_of(request),
        url=request.url,
        body=body,
        headers=headers,
        content_type=content_type,
        basic_auth=basic_auth,
        auth_note=auth_note,
    )


# --- Resty ---

_RESTY_TEMPLATE = _env.from_string(
    """\
package main

{{ imports }}

func main() {
\tclient := resty.New()
{% for line in client_setup %}
\t{{ line }}
{% endfor %}
{% for line in setup %}
{{ line }}
{% endfor %}

\tresp, err := client.R().
{% for call in calls %}
\t\t{{ call }}.
{% endfor %}
\t\t{{ send }}
\tif err != nil {
\t\tlog.Fatal(err)
\t}

\tfmt.Println(resp.StatusCode())
\tfmt.Println(resp.String())
}
"""
)

_RESTY_METHODS = {
    "GET": "Get",
    "POST": "Post",
    "PUT": "Put",
    "PATCH": "Patch",
    "DELETE": "Delete",
    "HEAD": "Head",
    "OPTIONS": "Options",
}


def generate_resty(request: Request) -> str:
    """Render *request* with the Resty client's chained request builder."""
    program = _Program()
    calls = [
        f"SetHeader({repr_str(name)}, {repr_str(value)})"
        for name, value in request.headers.items()
    ]

    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        text_fields = [f for f in request.multipart_uploads if not f.is_file]
        if text_fields:
            entries = ", ".join(
                f"{repr_str(f.name)}: {repr_str(f.content)}" for f in text_fields
            )
            calls.append(f"SetMultipartFormData(map[string]string{{{entries}}})")
        for field in request.multipart_uploads:
            if not field.is_file:
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                program.imports.add("os")
                calls.append(
                    f"SetFileReader({repr_str(field.name)}, \"stdin\", os.Stdin)"
                )
            else:
                calls.append(f"SetFile({repr_str(field.name)}, {repr_str(path)})")
    elif kind == BodyKind.JSON:
        calls.append(f"SetBody({_json_body(request)})")
    elif kind == BodyKind.DATA:
        calls.append(f"SetBody({_data_expr(request, program)})")

    client_setup = []
    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.BASIC:
            calls.append(
                f"SetBasicAuth({repr_str(auth.username)}, {repr_str(auth.password)})"
            )
        elif auth.type == AuthType.DIGEST:
            calls.append(
                f"SetDigestAuth({repr_str(auth.username)}, {repr_str(auth.password)})"
            )
        else:
            client_setup.append(
                f"// {auth.type.value.upper()} authentication is not built into Resty."
            )

    if request.insecure:
        program.imports.add("crypto/tls")
        client_setup.append("client.SetTLSClientConfig(&tls.Config{InsecureSkipVerify: true})")
    if request.proxy:
        client_setup.append(f"client.SetProxy({repr_str(request.proxy)})")
    if request.timeout is not None:
        program.imports.add("time")
        client_setup.append(
            f"client.SetTimeout({int(request.timeout * 1000)} * time.Millisecond)"
        )
    if request.max_redirs is not None:
        client_setup.append(
            f"client.SetRedirectPolicy(resty.FlexibleRedirectPolicy({request.max_redirs}))"
        )

    method = method_of(request)
    if method in _RESTY_METHODS:
        send = f"{_RESTY_METHODS[method]}({repr_str(request.url)})"
    else:
        send = f"Execute({repr_str(method)}, {repr_str(request.url)})"

    return render(
        _RESTY_TEMPLATE,
        imports=program.import_block(("github.com/go-resty/resty/v2",)),
        client_setup=client_setup,
        setup=program.statements,
        calls=calls,
        send=send,
    )


GENERATORS = {
    "HTTP": generate_net_http,
    "Resty": generate_resty,
}
