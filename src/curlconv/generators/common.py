"""Pure helpers shared by the per-language generators.

Nothing here knows about a target language. The helpers answer the
questions every generator asks of a :class:`~curlconv.models.Request`:

* which body source to render (:func:`body_kind`, with the precedence
  multipart > JSON > data items),
* what the data items are, whichever body form carried them
  (:func:`data_items`),
* the JSON text to send (:func:`json_text`),
* which headers remain once a library sets one itself
  (:func:`headers_without`).

Language modules import these and keep only their own escaping and
syntax.
"""

from __future__ import annotations

import base64
import enum
import json
from typing import Any, Callable, NamedTuple, Optional
from urllib.parse import urlsplit

from jinja2 import Environment, StrictUndefined, Template

from curlconv.models import (
    DataParam,
    FileDataParam,
    FileParamType,
    Request,
)

STDIN = "-"
"""Filename that stands for standard input."""

DATA_SEPARATOR = "&"
"""Separator curl puts between multiple data items."""


class BodyKind(str, enum.Enum):
    """The single body source a generator renders."""

    NONE = "none"
    MULTIPART = "multipart"
    JSON = "json"
    DATA = "data"


def body_kind(request: Request) -> BodyKind:
    """Pick the body source: multipart, then JSON, then data items."""
    if request.multipart_uploads:
        return BodyKind.MULTIPART
    if request.has_json:
        return BodyKind.JSON
    if request.data_array or request.data:
        return BodyKind.DATA
    return BodyKind.NONE


def data_items(request: Request) -> list[DataParam]:
    """Return the enhanced data items, rebuilt from the legacy form if needed.

    The interpreter fills both forms, so this normally returns
    ``request.data_array`` unchanged. A request built by hand with only
    legacy records still renders.
    """
    if request.data_array:
        return list(request.data_array)
    items: list[DataParam] = []
    for record in request.data:
        if record.is_file or (record.urlencode and record.content == STDIN):
            if record.urlencode:
                filetype = FileParamType.URLENCODE
            elif record.binary:
                filetype = FileParamType.BINARY
            else:
                filetype = FileParamType.DATA
            items.append(
                FileDataParam(filetype=filetype, filename=record.content, name=record.name)
            )
        else:
            items.append(record.content)
    return items


def is_stdin(filename: str) -> bool:
    return filename == STDIN


def json_is_raw(request: Request) -> bool:
    """Whether the ``--json`` payload failed to parse and is kept as text."""
    return request.json_raw


def json_as_text(request: Request) -> bool:
    """Whether the JSON body must go out as text instead of a JSON option.

    True for a raw payload, and for ``null``, which library JSON options
    read as "no body".
    """
    return json_is_raw(request) or request.json_data is None


def json_text(request: Request, indent: Optional[int] = None) -> str:
    """Text of the JSON body.

    A raw (unparseable) payload is returned verbatim; a parsed one is
    serialised compactly, or indented when *indent* is given.
    """
    if json_is_raw(request):
        return request.json_data
    if indent is None:
        return json.dumps(request.json_data, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(request.json_data, indent=indent, ensure_ascii=False)


_LINE_BREAKS = str.maketrans({"\r": " ", "\n": " ", "\u2028": " ", "\u2029": " "})


def comment_text(value: str) -> str:
    """*value* with every line break replaced by a space, safe in a line comment."""
    return value.translate(_LINE_BREAKS)


def header_lookup(headers: dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def headers_without(headers: dict[str, str], *names: str) -> dict[str, str]:
    """Copy of *headers* without *names* (case-insensitive), order kept."""
    drop = {name.lower() for name in names}
    return {key: value for key, value in headers.items() if key.lower() not in drop}


def method_of(request: Request) -> str:
    """Upper-cased method for libraries that require a canonical verb."""
    return request.method.upper() or "GET"


def basic_credentials(request: Request) -> Optional[str]:
    """``Basic ...`` header value for basic auth, else ``None``."""
    auth = request.auth
    if auth is None or auth.type.value != "basic":
        return None
    token = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode()
    return f"Basic {token}"


def file_name_only(path: str) -> str:
    """Last path component, used for multipart upload file names."""
    return path.replace("\\", "/").rsplit("/", 1)[-1] or path


# --- Templates ---


def template_environment(**filters: Callable[..., str]) -> Environment:
    """Create the Jinja2 environment a language module renders with.

    Output is source code, so autoescaping is off. Block tags on their own
    line leave no trace (``trim_blocks``/``lstrip_blocks``), and an
    undefined variable is an error rather than an empty string. *filters*
    are registered by name, typically ``q`` for the module's string
    escaper.
    """
    env = Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters.update(filters)
    return env


def render(template: Template, **context: Any) -> str:
    """Render *template* and normalise it to end in exactly one newline."""
    return template.render(**context).strip() + "\n"


class UrlParts(NamedTuple):
    scheme: str
    host: str
    port: Optional[int]
    path: str


def split_url(url: str) -> UrlParts:
    """Split *url* for libraries that take host and path separately.

    ``path`` includes the query string and defaults to ``/``. A URL that
    cannot be parsed comes back whole as the host.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return UrlParts("http", url, None, "/")
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return UrlParts(parts.scheme or "http", parts.hostname or parts.netloc, port, path)


def format_number(value: float) -> str:
    """``5.0`` -> ``"5"``, ``2.5`` -> ``"2.5"``."""
    return f"{value:g}"


def split_proxy(proxy: str) -> UrlParts:
    """Split a ``-x`` value, which may omit the scheme (``host:3128``)."""
    return split_url(proxy if "://" in proxy else f"http://{proxy}")
