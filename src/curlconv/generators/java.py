"""Java generators: ``java.net.http.HttpClient``, OkHttp and ``HttpURLConnection``."""

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
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

# HttpClient refuses to set these itself.
_RESTRICTED_HEADERS = ("Host", "Connection", "Content-Length", "Expect", "Upgrade")


def repr_str(value: str) -> str:
    """Double-quoted Java string literal; other control characters become ``\\uNNNN``."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


_env = template_environment(q=repr_str)


class _Imports(set):
    def block(self) -> str:
        return "\n".join(f"import {name};" for name in sorted(self))


def _read_text(filename: str, imports: _Imports) -> str:
    imports.add("java.nio.charset.StandardCharsets")
    if is_stdin(filename):
        return "new String(System.in.readAllBytes(), StandardCharsets.UTF_8)"
    imports.update({"java.nio.file.Files", "java.nio.file.Path"})
    return f"Files.readString(Path.of({repr_str(filename)}), StandardCharsets.UTF_8)"


def _item_expr(item: FileDataParam, imports: _Imports) -> str:
    text = _read_text(item.filename, imports)
    if item.filetype == FileParamType.DATA:
        return f'{text}.replace("\\n", "").replace("\\r", "")'
    if item.filetype == FileParamType.URLENCODE:
        imports.add("java.net.URLEncoder")
        expr = f"URLEncoder.encode({text}, StandardCharsets.UTF_8)"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    return text


def string_body(request: Request, imports: _Imports) -> Optional[str]:
    """A Java ``String`` expression for the JSON or data body, if any."""
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
    return 'String.join("&",\n                ' + ",\n                ".join(parts) + ")"


def _single_file(request: Request) -> Optional[FileDataParam]:
    """The lone binary or JSON file item, which can be streamed unmodified."""
    items = data_items(request)
    if body_kind(request) != BodyKind.DATA or len(items) != 1:
        return None
    item = items[0]
    if isinstance(item, FileDataParam) and item.filetype in (
        FileParamType.BINARY,
        FileParamType.JSON,
    ):
        return item
    return None


def _multipart_comment(request: Request) -> list[str]:
    lines = ["// This client does not build multipart/form-data bodies. Fields:"]
    for field in request.multipart_uploads:
        source = f"@{field.content}" if field.is_file else field.content
        lines.append(comment_text(f"//   {field.name}={source}"))
    return lines


def _basic_header(request: Request, imports: _Imports) -> Optional[str]:
    auth = request.auth
    if auth is None or auth.type != AuthType.BASIC:
        return None
    imports.add("java.util.Base64")
    creds = repr_str(f"{auth.username}:{auth.password}")
    return f'"Basic " + Base64.getEncoder().encodeToString({creds}.getBytes())'


def _auth_note(request: Request) -> Optional[str]:
    if request.auth is None or request.auth.type == AuthType.BASIC:
        return None
    return f"// {request.auth.type.value.upper()} authentication needs an extra library."


# --- java.net.http.HttpClient ---

_HTTP_CLIENT_TEMPLATE = _env.from_string(
    """\
{{ imports }}

public class Main {
    public static void main(String[] args) throws Exception {
{% for line in notes %}
        {{ line }}
{% endfor %}
        HttpClient client = {{ client }};

        HttpRequest request = HttpRequest.newBuilder()
            .uri(URI.create({{ url|q }}))
{% for name, value in headers %}
            .header({{ name|q }}, {{ value }})
{% endfor %}
{% if timeout %}
            .timeout(Duration.ofMillis({{ timeout }}))
{% endif %}
            .{{ method_call }}
            .build();

        HttpResponse<String> response = client.send(request, HttpResponse.BodyHandlers.ofString());
        System.out.println(response.statusCode());
        System.out.println(response.body());
    }
}
"""
)


def generate_http_client(request: Request) -> str:
    """Render *request* with the JDK's ``java.net.http.HttpClient``."""
    imports = _Imports(
        {
            "java.net.URI",
            "java.net.http.HttpClient",
            "java.net.http.HttpRequest",
            "java.net.http.HttpResponse",
        }
    )
    notes: list[str] = []
    headers = [
        (name, repr_str(value))
        for name, value in headers_without(request.headers, *_RESTRICTED_HEADERS).items()
    ]
    basic = _basic_header(request, imports)
    if basic is not None:
        headers.append(("Authorization", basic))
    note = _auth_note(request)
    if note:
        notes.append(note)

    single = _single_file(request)
    if body_kind(request) == BodyKind.MULTIPART:
        notes.extend(_multipart_comment(request))
        publisher = "HttpRequest.BodyPublishers.noBody()"
    elif single is not None and is_stdin(single.filename):
        publisher = "HttpRequest.BodyPublishers.ofInputStream(() -> System.in)"
    elif single is not None:
        imports.add("java.nio.file.Path")
        publisher = f"HttpRequest.BodyPublishers.ofFile(Path.of({repr_str(single.filename)}))"
    else:
        body = string_body(request, imports)
        publisher = (
            f"HttpRequest.BodyPublishers.ofString({body})"
            if body is not None
            else "HttpRequest.BodyPublishers.noBody()"
        )

    method = method_of(request)
    has_body = body_kind(request) != BodyKind.NONE
    if method == "GET" and not has_body:
        method_call = "GET()"
    elif method == "DELETE" and not has_body:
        method_call = "DELETE()"
    elif method in ("POST", "PUT"):
        method_call = f"{method}({publisher})"
    else:
        method_call = f"method({repr_str(method)}, {publisher})"

    builder = []
    if request.follow_redirects:
        builder.append(".followRedirects(HttpClient.Redirect.NORMAL)")
    if request.proxy:
        proxy = split_proxy(request.proxy)
        imports.update({"java.net.InetSocketAddress", "java.net.ProxySelector"})
        port = proxy.port if proxy.port is not None else 1080
        builder.append(
            f".proxy(ProxySelector.of(new InetSocketAddress({repr_str(proxy.host)}, {port})))"
        )
    if request.insecure:
        notes.append("// Skipping certificate checks requires a custom SSLContext.")
    client = (
        "HttpClient.newBuilder()" + "".join(builder) + ".build()"
        if builder
        else "HttpClient.newHttpClient()"
    )
    timeout = int(request.timeout * 1000) if request.timeout is not None else None
    if timeout is not None:
        imports.add("java.time.Duration")

    return render(
        _HTTP_CLIENT_TEMPLATE,
        imports=imports.block(),
        notes=notes,
        client=client,
        url=request.url,
        headers=headers,
        timeout=timeout,
        method_call=method_call,
    )


# --- OkHttp ---

_OKHTTP_TEMPLATE = _env.from_string(
    """\
{{ imports }}

public class Main {
    public static void main(String[] args) throws Exception {
{% for line in notes %}
        {{ line }}
{% endfor %}
        OkHttpClient client = {{ client }};

{% if body %}
        RequestBody body = {{ body }};

{% endif %}
        Request request = new Request.Builder()
            .url({{ url|q }})
{% if method_call %}
            .{{ method_call }}
{% endif %}
{% for name, value in headers %}
            .addHeader({{ name|q }}, {{ value }})
{% endfor %}
            .build();

        try (Response response = client.newCall(request).execute()) {
            System.out.println(response.code());
            System.out.println(response.body().string());
        }
    }
}
"""
)


def _okhttp_multipart(request: Request, imports: _Imports) -> str:
    imports.update({"okhttp3.MultipartBody", "okhttp3.MediaType"})
    lines = ["new MultipartBody.Builder()", "    .setType(MultipartBody.FORM)"]
    for field in request.multipart_uploads:
        if not field.is_file:
            lines.append(
                f"    .addFormDataPart({repr_str(field.name)}, {repr_str(field.content)})"
            )
            continue
        path = field.content_file or field.content
        media = 'MediaType.parse("application/octet-stream")'
        if is_stdin(path):
            content = f"RequestBody.create(System.in.readAllBytes(), {media})"
        else:
            imports.add("java.io.File")
            content = f"RequestBody.create(new File({repr_str(path)}), {media})"
        lines.append(
            f"    .addFormDataPart({repr_str(field.name)}, "
            f"{repr_str(file_name_only(path))}, {content})"
        )
    lines.append("    .build()")
    return "\n            ".join(lines)


def generate_okhttp(request: Request) -> str:
    """Render *request* with OkHttp 4."""
    imports = _Imports(
        {"okhttp3.OkHttpClient", "okhttp3.Request", "okhttp3.RequestBody", "okhttp3.Response"}
    )
    notes: list[str] = []
    headers = [(name, repr_str(value)) for name, value in request.headers.items()]

    media_type = header_lookup(request.headers, "Content-Type")
    if media_type is None:
        media_type = (
            "application/json"
            if body_kind(request) == BodyKind.JSON
            else "application/x-www-form-urlencoded"
        )
    media = f"MediaType.parse({repr_str(media_type)})"

    body: Optional[str] = None
    single = _single_file(request)
    if body_kind(request) == BodyKind.MULTIPART:
        body = _okhttp_multipart(request, imports)
        headers = [(n, v) for n, v in headers if n.lower() != "content-type"]
    elif single is not None and not is_stdin(single.filename):
        imports.update({"java.io.File", "okhttp3.MediaType"})
        body = f"RequestBody.create(new File({repr_str(single.filename)}), {media})"
    else:
        text = string_body(request, imports)
        if text is not None:
            imports.add("okhttp3.MediaType")
            body = f"RequestBody.create({text}, {media})"

    auth = request.auth
    if auth is not None and auth.type == AuthType.BASIC:
        imports.add("okhttp3.Credentials")
        headers.append(
            (
                "Authorization",
                f"Credentials.basic({repr_str(auth.username)}, {repr_str(auth.password)})",
            )
        )
    note = _auth_note(request)
    if note:
        notes.append(note)
    if request.insecure:
        notes.append("// Skipping certificate checks requires a custom SSLSocketFactory.")

    method = method_of(request)
    if method == "GET" and body is None:
        method_call = None
    elif method in ("POST", "PUT", "PATCH") and body is not None:
        method_call = f"{method.lower()}(body)"
    elif method == "DELETE":
        method_call = "delete(body)" if body is not None else "delete()"
    else:
        method_call = f"method({repr_str(method)}, {'body' if body is not None else 'null'})"

    builder = []
    if request.timeout is not None:
        imports.add("java.time.Duration")
        builder.append(f".callTimeout(Duration.ofMillis({int(request.timeout * 1000)}))")
    if request.proxy:
        proxy = split_proxy(request.proxy)
        imports.update({"java.net.InetSocketAddress", "java.net.Proxy"})
        port = proxy.port if proxy.port is not None else 1080
        builder.append(
            f".proxy(new Proxy(Proxy.Type.HTTP, "
            f"new InetSocketAddress({repr_str(proxy.host)}, {port})))"
        )
    client = (
        "new OkHttpClient.Builder()" + "".join(builder) + ".build()"
        if builder
        else "new OkHttpClient()"
    )

    return render(
        _OKHTTP_TEMPLATE,
        imports=imports.block(),
        notes=notes,
        client=client,
        body=body,
        url=request.url,
        method_call=method_call,
        headers=headers,
    )


# --- HttpURLConnection ---

_URL_CONNECTION_TEMPLATE = _env.from_string(
    """\
{{ imports }}

public class Main {
    public static void main(String[] args) throws Exception {
{% for line in notes %}
        {{ line }}
{% endfor %}
        URL url = URI.create({{ url|q }}).toURL();
        HttpURLConnection httpConn = (HttpURLConnection) url.openConnection();
        httpConn.setRequestMethod({{ method|q }});
{% for name, value in headers %}
        httpConn.setRequestProperty({{ name|q }}, {{ value }});
{% endfor %}
{% if timeout %}
        httpConn.setConnectTimeout({{ timeout }});
        httpConn.setReadTimeout({{ timeout }});
{% endif %}
{% if body %}

        byte[] body = {{ body }};
        httpConn.setDoOutput(true);
        try (OutputStream os = httpConn.getOutputStream()) {
            os.write(body);
        }
{% endif %}

        InputStream responseStream = httpConn.getResponseCode() / 100 == 2
            ? httpConn.getInputStream()
            : httpConn.getErrorStream();
        Scanner s = new Scanner(responseStream).useDelimiter("\\\\A");
        String response = s.hasNext() ? s.next() : "";
        System.out.println(httpConn.getResponseCode());
        System.out.println(response);
    }
}
"""
)


def generate_url_connection(request: Request) -> str:
    """Render *request* with the JDK's ``HttpURLConnection``."""
    imports = _Imports(
        {
            "java.io.InputStream",
            "java.net.HttpURLConnection",
            "java.net.URI",
            "java.net.URL",
            "java.util.Scanner",
        }
    )
    notes: list[str] = []
    headers = [(name, repr_str(value)) for name, value in request.headers.items()]
    basic = _basic_header(request, imports)
    if basic is not None:
        headers.append(("Authorization", basic))
    note = _auth_note(request)
    if note:
        notes.append(note)

    body: Optional[str] = None
    single = _single_file(request)
    if body_kind(request) == BodyKind.MULTIPART:
        notes.extend(_multipart_comment(request))
    elif single is not None:
        if is_stdin(single.filename):
            body = "System.in.readAllBytes()"
        else:
            imports.update({"java.nio.file.Files", "java.nio.file.Path"})
            body = f"Files.readAllBytes(Path.of({repr_str(single.filename)}))"
    else:
        text = string_body(request, imports)
        if text is not None:
            imports.add("java.nio.charset.StandardCharsets")
            body = f"({text}).getBytes(StandardCharsets.UTF_8)"
    if body is not None:
        imports.add("java.io.OutputStream")
    if method_of(request) == "PATCH":
        notes.append("// HttpURLConnection rejects PATCH; use HttpClient for it.")

    return render(
        _URL_CONNECTION_TEMPLATE,
        imports=imports.block(),
        notes=notes,
        url=request.url,
        method=method_of(request),
        headers=headers,
        timeout=int(request.timeout * 1000) if request.timeout is not None else None,
        body=body,
    )


GENERATORS = {
    "HttpClient": generate_http_client,
    "OkHttp": generate_okhttp,
    "HttpURLConnection": generate_url_connection,
}
