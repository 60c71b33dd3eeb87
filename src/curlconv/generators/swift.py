"""Swift generators: Foundation ``URLSession`` and Alamofire.

Both use top-level ``await`` (Swift 5.7 and later).
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
    split_url,
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

BOUNDARY = "----curlconvFormBoundary"

_STDIN_DATA = "FileHandle.standardInput.readDataToEndOfFile()"

_ALAMOFIRE_METHODS = frozenset(
    {"CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "QUERY", "TRACE"}
)


def repr_str(value: str) -> str:
    """Swift string literal; other control characters use ``\\u{NN}``."""
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


def _file_data(path: str) -> str:
    if is_stdin(path):
        return _STDIN_DATA
    return f"try Data(contentsOf: URL(fileURLWithPath: {repr_str(path)}))"


def _read_text(filename: str) -> str:
    if is_stdin(filename):
        return f"String(decoding: {_STDIN_DATA}, as: UTF8.self)"
    return f"try String(contentsOfFile: {repr_str(filename)}, encoding: .utf8)"


def _item_expr(item: FileDataParam) -> str:
    text = _read_text(item.filename)
    if item.filetype == FileParamType.DATA:
        return (
            f'({text}).replacingOccurrences(of: "\\r", with: "")'
            '.replacingOccurrences(of: "\\n", with: "")'
        )
    if item.filetype == FileParamType.URLENCODE:
        expr = f"({text}).addingPercentEncoding(withAllowedCharacters: .alphanumerics)!"
        return f"{repr_str(item.name + '=')} + {expr}" if item.name else expr
    return text


def string_body(request: Request) -> Optional[str]:
    """A Swift ``String`` expression for the JSON or data body, if any."""
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
    return "[\n    " + ",\n    ".join(parts) + ',\n].joined(separator: "&")'


def _single_binary(request: Request) -> Optional[FileDataParam]:
    items = data_items(request)
    if body_kind(request) == BodyKind.DATA and len(items) == 1:
        item = items[0]
        if isinstance(item, FileDataParam) and item.filetype == FileParamType.BINARY:
            return item
    return None


def _multipart_lines(request: Request) -> list[str]:
    """Statements appending each part to a ``Data`` named ``body``."""
    lines = ["var body = Data()"]
    for field in request.multipart_uploads:
        disposition = f'Content-Disposition: form-data; name="{field.name}"'
        if field.is_file:
            path = field.content_file or field.content
            filename = "stdin" if is_stdin(path) else file_name_only(path)
            head = (
                f'--{BOUNDARY}\r\n{disposition}; filename="{filename}"\r\n'
                "Content-Type: application/octet-stream\r\n\r\n"
            )
            lines.append(f"body.append(Data({repr_str(head)}.utf8))")
            lines.append(f"body.append({_file_data(path)})")
            lines.append('body.append(Data("\\r\\n".utf8))')
        else:
            part = f"--{BOUNDARY}\r\n{disposition}\r\n\r\n{field.content}\r\n"
            lines.append(f"body.append(Data({repr_str(part)}.utf8))")
    closing = f"--{BOUNDARY}--\r\n"
    lines.append(f"body.append(Data({repr_str(closing)}.utf8))")
    return lines


# --- URLSession ---

_URLSESSION_TEMPLATE = _env.from_string(
    """\
import Foundation

{% for line in notes %}
// {{ line }}
{% endfor %}
var request = URLRequest(url: URL(string: {{ url|q }})!)
request.httpMethod = {{ method|q }}
{% if timeout %}
request.timeoutInterval = {{ timeout }}
{% endif %}
{% for name, value in headers %}
request.setValue({{ value }}, forHTTPHeaderField: {{ name|q }})
{% endfor %}
{% if body_lines %}

{% for line in body_lines %}
{{ line }}
{% endfor %}
{% endif %}

let (data, response) = try await URLSession.shared.data(for: request)
if let response = response as? HTTPURLResponse {
    print(response.statusCode)
}
print(String(decoding: data, as: UTF8.self))
"""
)


def generate_urlsession(request: Request) -> str:
    """Render *request* with ``URLRequest`` and ``URLSession.shared``."""
    headers = dict(request.headers)
    notes: list[str] = []
    body_lines: list[str] = []

    kind = body_kind(request)
    single = _single_binary(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        headers["Content-Type"] = f"multipart/form-data; boundary={BOUNDARY}"
        body_lines.extend(_multipart_lines(request))
        body_lines.append("request.httpBody = body")
    elif single is not None:
        body_lines.append(f"request.httpBody = {_file_data(single.filename)}")
    elif kind != BodyKind.NONE:
        body_lines.append(f"request.httpBody = Data(({string_body(request)}).utf8)")

    header_items = [(name, repr_str(value)) for name, value in headers.items()]
    auth = request.auth
    if auth is not None:
        if auth.type == AuthType.BASIC:
            creds = repr_str(f"{auth.username}:{auth.password}")
            header_items.append(
                ("Authorization", f'"Basic " + Data({creds}.utf8).base64EncodedString()')
            )
        else:
            notes.append(
                f"{auth.type.value} authentication needs a URLSessionDelegate "
                "that answers the challenge with a URLCredential."
            )
    if request.insecure:
        notes.append("Skipping certificate checks needs a URLSessionDelegate.")
    if request.proxy:
        notes.append(
            f"Proxy {comment_text(request.proxy)}: "
            "set connectionProxyDictionary on a URLSessionConfiguration."
        )

    return render(
        _URLSESSION_TEMPLATE,
        notes=notes,
        url=request.url,
        method=request.method,
        timeout=format_number(request.timeout) if request.timeout is not None else None,
        headers=header_items,
        body_lines=body_lines,
    )


# --- Alamofire ---

_ALAMOFIRE_TEMPLATE = _env.from_string(
    """\
import Alamofire
import Foundation

{% if headers %}
let headers: HTTPHeaders = [
{% for name, value in headers %}
    {{ name|q }}: {{ value|q }},
{% endfor %}
]
{% endif %}
{% if session %}
let session = {{ session }}
{% endif %}
{% for line in prelude %}
{{ line }}
{% endfor %}

let response = await {{ call }}
{% for line in modifiers %}
    {{ line }}
{% endfor %}
    .serializingString()
    .response
debugPrint(response)
"""
)


def _alamofire_method(request: Request) -> str:
    method = method_of(request)
    if method in _ALAMOFIRE_METHODS:
        return "." + method.lower()
    return f"HTTPMethod(rawValue: {repr_str(request.method)})"


def generate_alamofire(request: Request) -> str:
    """Render *request* with Alamofire's async serializers."""
    headers = dict(request.headers)
    prelude: list[str] = []
    client = "AF"
    session = None
    if request.insecure:
        host = split_url(request.url).host
        client = "session"
        session = (
            "Session(serverTrustManager: ServerTrustManager(evaluators: "
            f"[{repr_str(host)}: DisabledTrustEvaluator()]))"
        )

    upload_to = f"to: {repr_str(request.url)}, "
    kind = body_kind(request)
    single = _single_binary(request)
    if kind == BodyKind.MULTIPART:
        headers = headers_without(headers, "Content-Type")
        prelude.append("let form = MultipartFormData()")
        for field in request.multipart_uploads:
            name = repr_str(field.name)
            if not field.is_file:
                prelude.append(f"form.append(Data({repr_str(field.content)}.utf8), withName: {name})")
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                prelude.append(
                    f'form.append({_STDIN_DATA}, withName: {name}, fileName: "stdin")'
                )
            else:
                prelude.append(
                    f"form.append(URL(fileURLWithPath: {repr_str(path)}), withName: {name})"
                )
        call_head = f"{client}.upload(multipartFormData: form, " + upload_to
    elif single is not None and not is_stdin(single.filename):
        call_head = f"{client}.upload(URL(fileURLWithPath: {repr_str(single.filename)}), " + upload_to
    elif single is not None:
        call_head = f"{client}.upload({_STDIN_DATA}, " + upload_to
    elif kind != BodyKind.NONE:
        content_type = header_lookup(headers, "Content-Type")
        if content_type is None:
            headers["Content-Type"] = (
                "application/json" if kind == BodyKind.JSON else "application/x-www-form-urlencoded"
            )
        prelude.append(f"let body = {string_body(request)}")
        call_head = f"{client}.upload(Data(body.utf8), " + upload_to
    else:
        call_head = f"{client}.request({repr_str(request.url)}, "

    args = [f"method: {_alamofire_method(request)}"]
    if headers:
        args.append("headers: headers")
    if request.timeout is not None:
        args.append(f"requestModifier: {{ $0.timeoutInterval = {format_number(request.timeout)} }}")
    call = call_head + ", ".join(args) + ")"

    modifiers: list[str] = []
    auth = request.auth
    if auth is not None:
        modifiers.append(
            f".authenticate(username: {repr_str(auth.username)}, password: {repr_str(auth.password)})"
        )
    if not request.follow_redirects:
        modifiers.append(".redirect(using: Redirector.doNotFollow)")
    if request.proxy:
        prelude.insert(
            0,
            f"// Proxy {comment_text(request.proxy)}: "
            "configure it on the Session's URLSessionConfiguration.",
        )

    return render(
        _ALAMOFIRE_TEMPLATE,
        headers=list(headers.items()),
        session=session,
        prelude=prelude,
        call=call,
        modifiers=modifiers,
    )


GENERATORS = {
    "URLSession": generate_urlsession,
    "Alamofire": generate_alamofire,
}
