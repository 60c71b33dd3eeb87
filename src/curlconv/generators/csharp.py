"""C# generators: ``System.Net.Http.HttpClient`` and RestSharp.

Both emit top-level statements (C# 9 and later).
"""

from __future__ import annotations

from typing import Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    file_name_only,
    format_number,
    header_lookup,
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
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}

# Headers .NET only accepts on HttpContent, not on the request.
_CONTENT_HEADERS = frozenset(
    {
        "allow",
        "content-disposition",
        "content-encoding",
        "content-language",
        "content-length",
        "content-location",
        "content-md5",
        "content-range",
        "content-type",
        "expires",
        "last-modified",
    }
)

_FORM_TYPE = "application/x-www-form-urlencoded"


def repr_str(value: str) -> str:
    """Regular C# string literal for *value*.

    Remaining control characters use the fixed-width ``\\uNNNN`` form.
    """
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


def _read_text(filename: str) -> str:
    if is_stdin(filename):
        return "Console.In.ReadToEnd()"
    return f"File.ReadAllText({repr_str(filename)})"


def _item_expr(item: FileDataParam) -> str:
    text = _read_text(item.filename)
    if item.filetype == FileParamType.DATA:
        return f'{text}.Replace("\\n", "").Replace("\\r", "")'
    if item.filetype == FileParamType.URLENCODE:
        expr = f"Uri.EscapeDataString({text})"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    return text


def string_body(request: Request) -> Optional[str]:
    """A C# ``string`` expression for the JSON or data body, if any."""
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
    return 'string.Join("&",\n    ' + ",\n    ".join(parts) + ")"


def _content_type(request: Request) -> str:
    declared = header_lookup(request.headers, "Content-Type")
    if declared is not None:
        return declared
    return "application/json" if body_kind(request) == BodyKind.JSON else _FORM_TYPE


def _single_binary(request: Request) -> Optional[FileDataParam]:
    items = data_items(request)
    if body_kind(request) == BodyKind.DATA and len(items) == 1:
        item = items[0]
        if isinstance(item, FileDataParam) and item.filetype == FileParamType.BINARY:
            return item
    return None


# --- HttpClient ---

_HTTP_CLIENT_TEMPLATE = _env.from_string(
    """\
{% for name in usings %}
using {{ name }};
{% endfor %}

{% if handler %}
HttpClientHandler handler = new HttpClientHandler
{
{% for line in handler %}
    {{ line }},
{% endfor %}
};
HttpClient client = new HttpClient(handler);
{% else %}
HttpClient client = new HttpClient();
{% endif %}
{% if timeout %}
client.Timeout = TimeSpan.FromSeconds({{ timeout }});
{% endif %}

HttpRequestMessage request = new HttpRequestMessage(new HttpMethod({{ method|q }}), {{ url|q }});
{% for name, value in headers.items() %}
request.Headers.TryAddWithoutValidation({{ name|q }}, {{ value|q }});
{% endfor %}
{% if basic_auth %}
request.Headers.Authorization = new AuthenticationHeaderValue("Basic", Convert.ToBase64String(Encoding.UTF8.GetBytes({{ basic_auth|q }})));
{% endif %}
{% for line in content %}
{{ line }}
{% endfor %}

HttpResponseMessage response = await client.SendAsync(request);
string responseBody = await response.Content.ReadAsStringAsync();

Console.WriteLine((int)response.StatusCode);
Console.WriteLine(responseBody);
"""
)


def _http_client_content(request: Request) -> list[str]:
    kind = body_kind(request)
    if kind == BodyKind.NONE:
        return []
    lines: list[str] = []
    if kind == BodyKind.MULTIPART:
        lines.append("MultipartFormDataContent content = new MultipartFormDataContent();")
        for field in request.multipart_uploads:
            name = repr_str(field.name)
            if not field.is_file:
                lines.append(f"content.Add(new StringContent({repr_str(field.content)}), {name});")
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                part = "new StreamContent(Console.OpenStandardInput())"
            else:
                part = f"new ByteArrayContent(File.ReadAllBytes({repr_str(path)}))"
            lines.append(
                f"content.Add({part}, {name}, {repr_str(file_name_only(path))});"
            )
        lines.append("request.Content = content;")
        return lines

    single = _single_binary(request)
    if single is not None and is_stdin(single.filename):
        lines.append("request.Content = new StreamContent(Console.OpenStandardInput());")
    elif single is not None:
        lines.append(
            f"request.Content = new ByteArrayContent(File.ReadAllBytes({repr_str(single.filename)}));"
        )
    else:
        lines.append(f"request.Content = new StringContent({string_body(request)});")
    lines.append(
        "request.Content.Headers.ContentType = "
        f"MediaTypeHeaderValue.Parse({repr_str(_content_type(request))});"
    )
    return lines


def generate_http_client(request: Request) -> str:
    """Render *request* with ``HttpClient`` and an ``HttpRequestMessage``."""
    usings = {"System.Net.Http"}
    headers = {
        name: value
        for name, value in request.headers.items()
        if name.lower() not in _CONTENT_HEADERS
    }

    content = _http_client_content(request)
    if content:
        usings.add("System.Net.Http.Headers")
    if any("File." in line for line in content) or any(
        isinstance(item, FileDataParam) and not is_stdin(item.filename)
        for item in data_items(request)
    ):
        usings.add("System.IO")

    handler: list[str] = []
    basic_auth = None
    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.BASIC:
            usings.update({"System.Net.Http.Headers", "System.Text"})
            basic_auth = f"{auth.username}:{auth.password}"
        else:
            usings.add("System.Net")
            handler.append(
                f"Credentials = new NetworkCredential({repr_str(auth.username)}, "
                f"{repr_str(auth.password)})"
            )
    if request.insecure:
        handler.append(
            "ServerCertificateCustomValidationCallback = "
            "HttpClientHandler.DangerousAcceptAnyServerCertificateValidator"
        )
    if request.proxy:
        usings.add("System.Net")
        handler.append(f"Proxy = new WebProxy({repr_str(request.proxy)})")
    if request.compressed:
        usings.add("System.Net")
        handler.append("AutomaticDecompression = DecompressionMethods.All")
    if request.max_redirs is not None:
        handler.append(f"MaxAutomaticRedirections = {max(request.max_redirs, 1)}")

    return render(
        _HTTP_CLIENT_TEMPLATE,
        usings=sorted(usings),
        handler=handler,
        timeout=format_number(request.timeout) if request.timeout is not None else None,
        method=method_of(request),
        url=request.url,
        headers=headers,
        basic_auth=basic_auth,
        content=content,
    )


# --- RestSharp ---

_RESTSHARP_TEMPLATE = _env.from_string(
    """\
{% for name in usings %}
using {{ name }};
{% endfor %}

{% if options %}
var options = new RestClientOptions({{ url|q }})
{
{% for line in options %}
    {{ line }},
{% endfor %}
};
var client = new RestClient(options);
{% else %}
var client = new RestClient({{ url|q }});
{% endif %}
var request = new RestRequest("", Method.{{ method }});
{% for name, value in headers.items() %}
request.AddHeader({{ name|q }}, {{ value|q }});
{% endfor %}
{% for line in body %}
{{ line }}
{% endfor %}

RestResponse response = await client.ExecuteAsync(request);

Console.WriteLine((int)response.StatusCode);
Console.WriteLine(response.Content);
"""
)

_RESTSHARP_METHODS = {
    "GET": "Get",
    "POST": "Post",
    "PUT": "Put",
    "DELETE": "Delete",
    "HEAD": "Head",
    "OPTIONS": "Options",
    "PATCH": "Patch",
    "MERGE": "Merge",
    "COPY": "Copy",
    "SEARCH": "Search",
}


def generate_restsharp(request: Request) -> str:
    """Render *request* with RestSharp (v110 and later)."""
    usings = {"RestSharp"}
    headers = dict(request.headers)
    body: list[str] = []

    kind = body_kind(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        body.append("request.AlwaysMultipartFormData = true;")
        for field in request.multipart_uploads:
            name = repr_str(field.name)
            if not field.is_file:
                body.append(f"request.AddParameter({name}, {repr_str(field.content)});")
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                body.append(
                    f"request.AddFile({name}, () => Console.OpenStandardInput(), \"stdin\");"
                )
            else:
                body.append(f"request.AddFile({name}, {repr_str(path)});")
    elif kind != BodyKind.NONE:
        content_type = _content_type(request)
        headers = headers_without(headers, "Content-Type")
        body.append(
            f"request.AddStringBody({string_body(request)}, {repr_str(content_type)});"
        )
        if any(
            isinstance(item, FileDataParam) and not is_stdin(item.filename)
            for item in data_items(request)
        ):
            usings.add("System.IO")

    options: list[str] = []
    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.BASIC:
            usings.add("RestSharp.Authenticators")
            options.append(
                f"Authenticator = new HttpBasicAuthenticator({repr_str(auth.username)}, "
                f"{repr_str(auth.password)})"
            )
        else:
            usings.add("System.Net")
            options.append(
                f"Credentials = new NetworkCredential({repr_str(auth.username)}, "
                f"{repr_str(auth.password)})"
            )
    if request.insecure:
        options.append(
            "RemoteCertificateValidationCallback = (sender, certificate, chain, errors) => true"
        )
    if request.proxy:
        usings.add("System.Net")
        options.append(f"Proxy = new WebProxy({repr_str(request.proxy)})")
    if request.timeout is not None:
        options.append(f"Timeout = TimeSpan.FromSeconds({format_number(request.timeout)})")
    if request.max_redirs is not None:
        options.append(f"MaxRedirects = {request.max_redirs}")

    method = method_of(request)
    if method not in _RESTSHARP_METHODS:
        body.insert(0, f"// RestSharp has no Method.{comment_text(method)}; sending it as GET.")
    return render(
        _RESTSHARP_TEMPLATE,
        usings=sorted(usings),
        options=options,
        url=request.url,
        method=_RESTSHARP_METHODS.get(method, "Get"),
        headers=headers,
        body=body,
    )


GENERATORS = {
    "HttpClient": generate_http_client,
    "RestSharp": generate_restsharp,
}
