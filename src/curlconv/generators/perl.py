"""Perl generators: LWP::UserAgent and HTTP::Tiny."""

from __future__ import annotations

from typing import Optional

from curlconv.generators.common import (
    BodyKind,
    body_kind,
    comment_text,
    data_items,
    file_name_only,
    format_number,
    is_stdin,
    json_text,
    method_of,
    render,
    template_environment,
)
from curlconv.models import AuthType, FileDataParam, FileParamType, Request

_DOUBLE_QUOTED_ESCAPES = {
    "\\": "\\\\",
    "$": "\\$",
    "@": "\\@",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
    "\b": "\\b",
    "\a": "\\a",
    "\x1b": "\\e",
}

_SLURP = """\
sub slurp {
    my ($path) = @_;
    open my $fh, '<:raw', $path or die "Cannot open $path: $!";
    local $/;
    return <$fh>;
}"""

_STDIN = "do { local $/; <STDIN> }"


def repr_str(value: str) -> str:
    """Perl string literal for *value*.

    Single-quoted unless *value* holds control characters; the
    double-quoted form escapes interpolation sigils.
    """
    if not any(ord(char) < 0x20 or ord(char) == 0x7F for char in value):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    out = []
    for char in value:
        if char in _DOUBLE_QUOTED_ESCAPES:
            out.append(_DOUBLE_QUOTED_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{{{ord(char):02x}}}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


_env = template_environment(q=repr_str)


class _Script:
    """``use`` lines and helper subs a snippet needs."""

    def __init__(self, *modules: str) -> None:
        self.modules = ["strict", "warnings", *modules]
        self.needs_slurp = False

    def use(self, module: str) -> None:
        if module not in self.modules:
            self.modules.append(module)

    def read(self, filename: str) -> str:
        if is_stdin(filename):
            return _STDIN
        self.needs_slurp = True
        return f"slurp({repr_str(filename)})"


def _item_expr(item: FileDataParam, script: _Script) -> str:
    text = script.read(item.filename)
    if item.filetype == FileParamType.DATA:
        return f"({text}) =~ tr/\\r\\n//dr"
    if item.filetype == FileParamType.URLENCODE:
        script.use("URI::Escape")
        expr = f"uri_escape({text})"
        return f"{repr_str(item.name + '=')} . {expr}" if item.name else expr
    return text


def string_body(request: Request, script: _Script) -> Optional[str]:
    """A Perl string expression for the JSON or data body, if any."""
    kind = body_kind(request)
    if kind == BodyKind.JSON:
        return repr_str(json_text(request))
    if kind != BodyKind.DATA:
        return None
    items = data_items(request)
    if all(not isinstance(item, FileDataParam) for item in items):
        return repr_str("&".join(items))  # type: ignore[arg-type]
    parts = [
        _item_expr(item, script) if isinstance(item, FileDataParam) else repr_str(item)
        for item in items
    ]
    if len(parts) == 1:
        return parts[0]
    return "join('&',\n    " + ",\n    ".join(parts) + ",\n)"


# --- LWP ---

_LWP_TEMPLATE = _env.from_string(
    """\
{% for module in modules %}
use {{ module }};
{% endfor %}

{% if slurp %}
{{ slurp }}

{% endif %}
{% if ua_options %}
my $ua = LWP::UserAgent->new(
{% for key, value in ua_options %}
    {{ key }} => {{ value }},
{% endfor %}
);
{% else %}
my $ua = LWP::UserAgent->new();
{% endif %}
{% if proxy %}
$ua->proxy(['http', 'https'], {{ proxy|q }});
{% endif %}

{% if form %}
my $req = POST {{ url|q }},
    Content_Type => 'form-data',
    Content => [
{% for line in form %}
        {{ line }},
{% endfor %}
    ];
{% if method != 'POST' %}
$req->method({{ method|q }});
{% endif %}
{% else %}
my $req = HTTP::Request->new({{ method|q }} => {{ url|q }});
{% endif %}
{% for name, value in headers.items() %}
$req->header({{ name|q }} => {{ value|q }});
{% endfor %}
{% if basic_auth %}
$req->authorization_basic({{ basic_auth[0]|q }}, {{ basic_auth[1]|q }});
{% endif %}
{% for line in notes %}
{{ line }}
{% endfor %}
{% if body %}
$req->content({{ body }});
{% endif %}

my $res = $ua->request($req);
print $res->status_line, "\\n";
print $res->decoded_content;
"""
)


def generate_lwp(request: Request) -> str:
    """Render *request* with LWP::UserAgent and HTTP::Request."""
    script = _Script("LWP::UserAgent")
    headers = dict(request.headers)
    form: list[str] = []
    body: Optional[str] = None
    if body_kind(request) == BodyKind.MULTIPART:
        script.use("HTTP::Request::Common")
        headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
        for field in request.multipart_uploads:
            name = repr_str(field.name)
            if not field.is_file:
                form.append(f"{name} => {repr_str(field.content)}")
                continue
            path = field.content_file or field.content
            if is_stdin(path):
                form.append(f"{name} => [undef, 'stdin', Content => {_STDIN}]")
            else:
                form.append(f"{name} => [{repr_str(path)}, {repr_str(file_name_only(path))}]")
    else:
        script.use("HTTP::Request")
        body = string_body(request, script)

    ua_options: list[tuple[str, str]] = []
    if request.timeout is not None:
        ua_options.append(("timeout", format_number(request.timeout)))
    if request.max_redirs is not None:
        ua_options.append(("max_redirect", str(request.max_redirs)))
    if request.insecure:
        ua_options.append(("ssl_opts", "{ verify_hostname => 0, SSL_verify_mode => 0 }"))

    basic_auth = None
    notes: list[str] = []
    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            basic_auth = (request.auth.username, request.auth.password)
        else:
            notes.append(
                f"# {request.auth.type.value} authentication: "
                "$ua->credentials('host:port', 'realm', $user, $password);"
            )

    return render(
        _LWP_TEMPLATE,
        modules=script.modules,
        slurp=_SLURP if script.needs_slurp else None,
        ua_options=ua_options,
        proxy=request.proxy,
        form=form,
        method=method_of(request),
        url=request.url,
        headers=headers,
        basic_auth=basic_auth,
        notes=notes,
        body=body,
    )


# --- HTTP::Tiny ---

_TINY_TEMPLATE = _env.from_string(
    """\
{% for module in modules %}
use {{ module }};
{% endfor %}

{% if slurp %}
{{ slurp }}

{% endif %}
{% for line in notes %}
{{ line }}
{% endfor %}
{% if http_options %}
my $http = HTTP::Tiny->new(
{% for key, value in http_options %}
    {{ key }} => {{ value }},
{% endfor %}
);
{% else %}
my $http = HTTP::Tiny->new();
{% endif %}

{% if request_options %}
my $response = $http->request({{ method|q }}, {{ url|q }}, {
{% for key, value in request_options %}
    {{ key }} => {{ value }},
{% endfor %}
});
{% else %}
my $response = $http->request({{ method|q }}, {{ url|q }});
{% endif %}

print "$response->{status} $response->{reason}\\n";
print $response->{content};
"""
)


def generate_http_tiny(request: Request) -> str:
    """Render *request* with HTTP::Tiny, which ships with Perl."""
    script = _Script("HTTP::Tiny")
    headers = [(repr_str(name), repr_str(value)) for name, value in request.headers.items()]
    notes: list[str] = []

    if request.auth is not None:
        if request.auth.type == AuthType.BASIC:
            script.use("MIME::Base64")
            creds = repr_str(f"{request.auth.username}:{request.auth.password}")
            headers.append(("'Authorization'", f"'Basic ' . encode_base64({creds}, '')"))
        else:
            notes.append(
                f"# HTTP::Tiny does not support {request.auth.type.value} authentication."
            )

    body: Optional[str] = None
    if body_kind(request) == BodyKind.MULTIPART:
        notes.append("# HTTP::Tiny does not build multipart/form-data bodies. Fields:")
        for field in request.multipart_uploads:
            source = f"@{field.content}" if field.is_file else field.content
            notes.append(comment_text(f"#   {field.name}={source}"))
    else:
        body = string_body(request, script)

    request_options: list[tuple[str, str]] = []
    if headers:
        entries = "".join(f"        {name} => {value},\n" for name, value in headers)
        request_options.append(("headers", "{\n" + entries + "    }"))
    if body is not None:
        request_options.append(("content", body))

    http_options: list[tuple[str, str]] = []
    if request.timeout is not None:
        http_options.append(("timeout", format_number(request.timeout)))
    if request.max_redirs is not None:
        http_options.append(("max_redirect", str(request.max_redirs)))
    if request.insecure:
        http_options.append(("verify_SSL", "0"))
    if request.proxy:
        http_options.append(("proxy", repr_str(request.proxy)))

    return render(
        _TINY_TEMPLATE,
        modules=script.modules,
        slurp=_SLURP if script.needs_slurp else None,
        notes=notes,
        http_options=http_options,
        method=method_of(request),
        url=request.url,
        request_options=request_options,
    )


GENERATORS = {
    "LWP": generate_lwp,
    "HTTPTiny": generate_http_tiny,
}
