"""Dart generators: ``package:http`` and Dio."""

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
    json_text,
    method_of,
    render,
    split_proxy,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "$": "\\$",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}

_STDIN_BYTES = "await stdin.expand((chunk) => chunk).toList()"


def repr_str(value: str) -> str:
    """Single-quoted Dart string; ``$`` is escaped to stop interpolation."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02X}")
        else:
            out.append(char)
    return "'" + "".join(out) + "'"


_env = template_environment(q=repr_str)


class _Imports:
    def __init__(self, *names: str) -> None:
        self.names = set(names)

    def add(self, name: str) -> None:
        self.names.add(name)

    def lines(self) -> list[str]:
        # dart: imports sort before package: imports.
        return sorted(self.names, key=lambda name: (not name.startswith("dart:"), name))


def _read_text(filename: str, imports: _Imports) -> str:
    imports.add("dart:io")
    if is_stdin(filename):
        imports.add("dart:convert")
        return "await stdin.transform(utf8.decoder).join()"
    return f"await File({repr_str(filename)}).readAsString()"


def _item_expr(item: FileDataParam, imports: _Imports) -> str:
    text = _read_text(item.filename, imports)
    if item.filetype == FileParamType.DATA:
        return f"({text}).replaceAll(RegExp(r'[\\r\\n]'), '')"
    if item.filetype == FileParamType.URLENCODE:
        expr = f"Uri.encodeComponent({text})"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    return text


def string_body(request: Request, imports: _Imports) -> Optional[str]:
    """A Dart ``String`` expression for the JSON or data body, if any."""
    kind = body_kind(request)
    if kind == BodyKind.JSON:
        return repr_str(json_text(request))
    if kind != BodyKind.DATA:
        return None
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    parts = [
        _item_expr(item, imports) if isinstance(item, FileDataParam) else repr_str(item)
        for item in items
    ]
    if len(parts) == 1:
        return parts[0]
    return "[\n    " + ",\n    ".join(parts) + ",\n  ].join('&')"


def _single_binary(request: Request) -> Optional[FileDataParam]:
    items = data_items(request)
    if body_kind(request) == BodyKind.DATA and len(items) == 1:
        item = items[0]
        if isinstance(item, FileDataParam) and item.filetype == FileParamType.BINARY:
            return item
    return None


def _read_bytes(filename: str) -> str:
    if is_stdin(filename):
        return _STDIN_BYTES
    return f"await File({repr_str(filename)}).readAsBytes()"


def _basic_header(request: Request, imports: _Imports) -> Optional[str]:
    auth = request.auth
    if auth is None or auth.type != AuthType.BASIC:
        return None
    imports.add("dart:convert")
    creds = repr_str(f"{auth.username}:{auth.password}")
    return f"'Basic ' + base64Encode(utf8.encode({creds}))"


def _auth_note(request: Request) -> Optional[str]:
    auth = request.auth
    if auth is None or auth.type == AuthType.BASIC:
        return None
    user = comment_text(auth.username)
    return (
        f"// {auth.type.value} authentication for {user} is not built in; "
        "use a package that supports it."
    )


def _client_setup(request: Request, imports: _Imports) -> list[str]:
    """Cascade lines configuring a ``dart:io`` ``HttpClient``."""
    lines: list[str] = []
    if request.insecure:
        lines.append("..badCertificateCallback = (cert, host, port) => true")
    if request.proxy:
        proxy = split_proxy(request.proxy)
        lines.append(f"..findProxy = (uri) => {repr_str(f'PROXY {proxy.host}:{proxy.port or 1080}')}")
    if lines:
        imports.add("dart:io")
    return lines


# --- package:http ---

_HTTP_TEMPLATE = _env.from_string(
    """\
{% for name in imports %}
import {{ name|q }}{% if name == 'package:http/http.dart' %} as http{% endif %};
{% endfor %}

void main() async {
{% if note %}
  {{ note }}
{% endif %}
{% if client_setup %}
  final client = IOClient(HttpClient()
{% for line in client_setup %}
    {{ line }}
{% endfor %}
  );
{% else %}
  final client = http.Client();
{% endif %}
{% if headers %}
  final headers = {
{% for name, value in headers %}
    {{ name|q }}: {{ value }},
{% endfor %}
  };
{% endif %}

{% if multipart %}
  final request = http.MultipartRequest({{ method|q }}, Uri.parse({{ url|q }}));
{% else %}
  final request = http.Request({{ method|q }}, Uri.parse({{ url|q }}));
{% endif %}
{% if headers %}
  request.headers.addAll(headers);
{% endif %}
{% for line in body %}
  {{ line }}
{% endfor %}
{% if not follow_redirects %}
  request.followRedirects = false;
{% elif max_redirs is not none %}
  request.maxRedirects = {{ max_redirs }};
{% endif %}

{% if timeout %}
  final streamed = await client.send(request).timeout(const Duration(milliseconds: {{ timeout }}));
{% else %}
  final streamed = await client.send(request);
{% endif %}
  final response = await http.Response.fromStream(streamed);
  client.close();

  print(response.statusCode);
  print(response.body);
}
"""
)


def generate_http(request: Request) -> str:
    """Render *request* with ``package:http`` and a generic ``http.Request``."""
    imports = _Imports("package:http/http.dart")
    header_items = [(name, repr_str(value)) for name, value in request.headers.items()]
    basic = _basic_header(request, imports)
    if basic is not None:
        header_items.append(("Authorization", basic))

    body: list[str] = []
    kind = body_kind(request)
    single = _single_binary(request)
    if kind == BodyKind.MULTIPART:
        header_items = [(n, v) for n, v in header_items if n.lower() != "content-type"]
        for field in request.multipart_uploads:
            name = repr_str(field.name)
            if not field.is_file:
                body.append(f"request.fields[{name}] = {repr_str(field.content)};")
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                imports.add("dart:io")
                body.append(
                    f"request.files.add(http.MultipartFile.fromBytes({name}, "
                    f"{_STDIN_BYTES}, filename: 'stdin'));"
                )
            else:
                body.append(
                    f"request.files.add(await http.MultipartFile.fromPath({name}, "
                    f"{repr_str(path)}, filename: {repr_str(file_name_only(path))}));"
                )
    elif single is not None:
        imports.add("dart:io")
        body.append(f"request.bodyBytes = {_read_bytes(single.filename)};")
    elif kind != BodyKind.NONE:
        body.append(f"request.body = {string_body(request, imports)};")

    client_setup = _client_setup(request, imports)
    if client_setup:
        imports.add("package:http/io_client.dart")

    timeout = int(request.timeout * 1000) if request.timeout is not None else None
    return render(
        _HTTP_TEMPLATE,
        imports=imports.lines(),
        note=_auth_note(request),
        client_setup=client_setup,
        headers=header_items,
        multipart=kind == BodyKind.MULTIPART,
        method=method_of(request),
        url=request.url,
        body=body,
        follow_redirects=request.follow_redirects,
        max_redirs=request.max_redirs,
        timeout=timeout,
    )


# --- Dio ---

_DIO_TEMPLATE = _env.from_string(
    """\
{% for name in imports %}
import {{ name|q }};
{% endfor %}

void main() async {
{% if note %}
  {{ note }}
{% endif %}
  final dio = Dio();
{% if client_setup %}
  (dio.httpClientAdapter as IOHttpClientAdapter).createHttpClient = () => HttpClient()
{% for line in client_setup %}
    {{ line }}{% if loop.last %};{% endif %}

{% endfor %}
{% endif %}
{% for line in prelude %}
  {{ line }}
{% endfor %}

  try {
    final response = await dio.request(
      {{ url|q }},
{% if data %}
      data: {{ data }},
{% endif %}
      options: Options(
{% for key, value in options %}
        {{ key }}: {{ value }},
{% endfor %}
      ),
    );
    print(response.statusCode);
    print(response.data);
  } on DioException catch (e) {
    print(e.message);
  }
}
"""
)


def _dio_form(request: Request, imports: _Imports) -> str:
    entries = []
    for field in request.multipart_uploads:
        name = repr_str(field.name)
        if not field.is_file:
            entries.append(f"    {name}: {repr_str(field.content)},\n")
            continue
        path = field.content_file or field.content
        if is_stdin(path):
            imports.add("dart:io")
            value = f"MultipartFile.fromBytes({_STDIN_BYTES}, filename: 'stdin')"
        else:
            value = (
                f"await MultipartFile.fromFile({repr_str(path)}, "
                f"filename: {repr_str(file_name_only(path))})"
            )
        entries.append(f"    {name}: {value},\n")
    return "FormData.fromMap({\n" + "".join(entries) + "  })"


def generate_dio(request: Request) -> str:
    """Render *request* with Dio's generic ``request`` call."""
    imports = _Imports("package:dio/dio.dart")
    headers = dict(request.headers)
    prelude: list[str] = []
    data: Optional[str] = None

    kind = body_kind(request)
    single = _single_binary(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        prelude.append(f"final formData = {_dio_form(request, imports)};")
        data = "formData"
    elif single is not None:
        imports.add("dart:io")
        prelude.append(f"final data = {_read_bytes(single.filename)};")
        data = "data"
    elif kind != BodyKind.NONE:
        prelude.append(f"final data = {string_body(request, imports)};")
        data = "data"

    content_type = header_lookup(headers, "Content-Type")
    headers = headers_without(headers, "Content-Type")
    header_items = [(name, repr_str(value)) for name, value in headers.items()]
    basic = _basic_header(request, imports)
    if basic is not None:
        header_items.append(("Authorization", basic))

    options: list[tuple[str, str]] = [("method", repr_str(method_of(request)))]
    if header_items:
        entries = "".join(f"          {repr_str(n)}: {v},\n" for n, v in header_items)
        options.append(("headers", "{\n" + entries + "        }"))
    if content_type is not None:
        options.append(("contentType", repr_str(content_type)))
    options.append(("followRedirects", "true" if request.follow_redirects else "false"))
    if request.max_redirs is not None:
        options.append(("maxRedirects", str(request.max_redirs)))
    if request.timeout is not None:
        options.append(
            ("receiveTimeout", f"const Duration(milliseconds: {int(request.timeout * 1000)})")
        )

    client_setup = _client_setup(request, imports)
    if client_setup:
        imports.add("package:dio/io.dart")

    return render(
        _DIO_TEMPLATE,
        imports=imports.lines(),
        note=_auth_note(request),
        client_setup=client_setup,
        prelude=prelude,
        url=request.url,
        data=data,
        options=options,
    )


GENERATORS = {
    "HTTP": generate_http,
    "Dio": generate_dio,
}
