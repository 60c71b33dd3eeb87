"""Interpret curl tokens into a :class:`~curlconv.models.Request`.

The single public entry point is :func:`parse_tokens`. It walks the token
list once, from the token after the program name, and dispatches every
recognised option to a small handler that mutates the request under
construction. Options fall into two tables:

* ``_VALUE_HANDLERS`` -- options that consume the following token
  (``-X POST``, ``-H 'Accept: */*'``). Short options also accept an
  attached value (``-XPOST``).
* ``_SWITCH_HANDLERS`` -- options that take no value (``--compressed``).

Anything else starting with ``-`` is ignored without consuming a value,
and a bare token is a URL. The policy is deliberately permissive: the
tool translates what it understands and drops the rest.

Every data-bearing option fills both body forms at once: the legacy
``data`` list of :class:`~curlconv.models.LegacyDataParam` and the
enhanced ``data_array`` of literal strings and
:class:`~curlconv.models.FileDataParam` references.
"""

from __future__ import annotations

import json
from typing import Callable, Optional
from urllib.parse import parse_qsl, quote, urlsplit

from curlconv.exceptions import CommandParseError
from curlconv.models import (
    AuthConfig,
    AuthType,
    FileDataParam,
    FileParamType,
    FormParam,
    LegacyDataParam,
    Request,
    RequestUrl,
)
from curlconv.output import debug


class _ParseState:
    """Mutable bookkeeping for one scan over the tokens."""

    def __init__(self) -> None:
        self.request = Request()
        self.explicit_method = False
        self.has_data = False
        self.auth_type = AuthType.BASIC
        self.credentials: Optional[tuple[str, str]] = None

    def add_file(self, param: FileDataParam, legacy: LegacyDataParam) -> None:
        self.request.data_array.append(param)
        self.request.data.append(legacy)
        self.request.data_reads_file = param.filename
        self.has_data = True

    def add_literal(self, literal: str, legacy: LegacyDataParam) -> None:
        self.request.data_array.append(literal)
        self.request.data.append(legacy)
        self.has_data = True


Handler = Callable[[_ParseState, str], None]


# --- URL handling ---


def make_url(token: str) -> RequestUrl:
    """Build a :class:`RequestUrl`, adding ``http://`` when no scheme is given."""
    url = token if "://" in token else f"http://{token}"
    try:
        query = urlsplit(url).query
    except ValueError:
        query = ""
    return RequestUrl(
        original_url=token,
        url=url,
        query_list=parse_qsl(query, keep_blank_values=True),
    )


def _url(state: _ParseState, value: str) -> None:
    state.request.urls.append(make_url(value))


# --- Method, headers, auth ---


def _method(state: _ParseState, value: str) -> None:
    state.request.method = value
    state.explicit_method = True


def _header(state: _ParseState, value: str) -> None:
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        return
    state.request.headers[name.strip()] = header_value.strip()


def _user_agent(state: _ParseState, value: str) -> None:
    state.request.headers["User-Agent"] = value


def _referer(state: _ParseState, value: str) -> None:
    state.request.headers["Referer"] = value


def _user(state: _ParseState, value: str) -> None:
    username, _, password = value.partition(":")
    state.credentials = (username, password)


def _cookie(state: _ParseState, value: str) -> None:
    if "=" not in value:
        state.request.cookie_files.append(value)
        return
    state.request.headers["Cookie"] = value
    for pair in value.split(";"):
        name, sep, cookie_value = pair.partition("=")
        if sep and name.strip():
            state.request.cookies[name.strip()] = cookie_value.strip()


# --- Body ---


def _data(state: _ParseState, value: str) -> None:
    if not value:
        return
    if value.startswith("@"):
        filename = value[1:]
        state.add_file(
            FileDataParam(filetype=FileParamType.DATA, filename=filename),
            LegacyDataParam(content=filename, is_file=True),
        )
    else:
        state.add_literal(value, LegacyDataParam(content=value))


def _data_raw(state: _ParseState, value: str) -> None:
    state.request.is_data_raw = True
    _data(state, value)


def _data_binary(state: _ParseState, value: str) -> None:
    if not value:
        return
    state.request.is_data_binary = True
    if value.startswith("@"):
        filename = value[1:]
        state.add_file(
            FileDataParam(filetype=FileParamType.BINARY, filename=filename),
            LegacyDataParam(content=filename, is_file=True, binary=True),
        )
    else:
        state.add_literal(value, LegacyDataParam(content=value, binary=True))


def encode_urlencoded(value: str) -> str:
    """Percent-encode a ``--data-urlencode`` value the way curl does.

    ``name=content`` encodes only the content, ``=content`` drops the
    leading ``=``, and a bare value is encoded whole.
    """
    name, sep, content = value.partition("=")
    if not sep:
        return quote(value, safe="")
    if not name:
        return quote(content, safe="")
    return f"{name}={quote(content, safe='')}"


def _data_urlencode(state: _ParseState, value: str) -> None:
    if not value:
        return
    name, eq, rest = value.partition("=")

    if eq and rest.startswith("@"):
        debug("--data-urlencode: name=@filename")
        filename = rest[1:]
        state.add_file(
            FileDataParam(
                filetype=FileParamType.URLENCODE, filename=filename, name=name or None
            ),
            LegacyDataParam(
                content=filename, is_file=True, urlencode=True, name=name or None
            ),
        )
    elif not eq and value.startswith("@"):
        debug("--data-urlencode: @filename")
        filename = value[1:]
        state.add_file(
            FileDataParam(filetype=FileParamType.URLENCODE, filename=filename),
            LegacyDataParam(content=filename, is_file=True, urlencode=True),
        )
    elif not eq and "@" in value:
        field, _, source = value.partition("@")
        if source == "-":
            debug("--data-urlencode: name@- (stdin)")
            state.add_file(
                FileDataParam(
                    filetype=FileParamType.URLENCODE, filename="-", name=field or None
                ),
                LegacyDataParam(content="-", urlencode=True, name=field or None),
            )
        else:
            debug("--data-urlencode: name@filename")
            state.add_file(
                FileDataParam(
                    filetype=FileParamType.URLENCODE,
                    filename=source,
                    name=field or None,
                ),
                LegacyDataParam(
                    content=source, is_file=True, urlencode=True, name=field or None
                ),
            )
    else:
        debug("--data-urlencode: literal")
        state.add_literal(
            encode_urlencoded(value),
            LegacyDataParam(content=value, urlencode=True, name=name if eq else None),
        )


def _json(state: _ParseState, value: str) -> None:
    if not value:
        return
    request = state.request
    if value.startswith("@"):
        filename = value[1:]
        state.add_file(
            FileDataParam(filetype=FileParamType.JSON, filename=filename),
            LegacyDataParam(content=filename, is_file=True),
        )
    else:
        try:
            request.json_data = json.loads(value)
            request.json_raw = False
        except ValueError:
            debug("--json payload is not valid JSON, keeping raw text")
            request.json_data = value
            request.json_raw = True
        request.json_given = True
        state.has_data = True
    request.headers["Content-Type"] = "application/json"
    if not state.explicit_method:
        request.method = "POST"


def _form(state: _ParseState, value: str, literal_only: bool = False) -> None:
    name, sep, content = value.partition("=")
    if not sep:
        return
    if not literal_only and content[:1] in ("@", "<"):
        # Strip curl's ";type=..." and ";filename=..." modifiers from the path.
        path = content[1:].split(";", 1)[0]
        param = FormParam(name=name, content=path, is_file=True, content_file=path)
    else:
        param = FormParam(name=name, content=content)
    state.request.multipart_uploads.append(param)
    state.has_data = True


def _form_string(state: _ParseState, value: str) -> None:
    _form(state, value, literal_only=True)


# --- Transport settings ---


def _max_redirs(state: _ParseState, value: str) -> None:
    try:
        state.request.max_redirs = int(value)
    except ValueError:
        debug(f"Ignoring non-numeric --max-redirs value {value!r}")


def _max_time(state: _ParseState, value: str) -> None:
    try:
        state.request.timeout = float(value)
    except ValueError:
        debug(f"Ignoring non-numeric --max-time value {value!r}")


def _proxy(state: _ParseState, value: str) -> None:
    state.request.proxy = value


def _output(state: _ParseState, value: str) -> None:
    state.request.output_path = value


def _set_insecure(state: _ParseState) -> None:
    state.request.insecure = True


def _set_location(state: _ParseState) -> None:
    state.request.follow_redirects = True


def _set_compressed(state: _ParseState) -> None:
    state.request.compressed = True


def _set_head(state: _ParseState) -> None:
    state.request.method = "HEAD"
    state.explicit_method = True


def _http_version(version: str) -> Callable[[_ParseState], None]:
    def apply(state: _ParseState) -> None:
        state.request.http_version = version
        state.request.http2 = version == "2"

    return apply


def _auth_type(auth_type: AuthType) -> Callable[[_ParseState], None]:
    def apply(state: _ParseState) -> None:
        state.auth_type = auth_type

    return apply


_VALUE_HANDLERS: dict[str, Handler] = {
    "-X": _method,
    "--request": _method,
    "-H": _header,
    "--header": _header,
    "-A": _user_agent,
    "--user-agent": _user_agent,
    "-e": _referer,
    "--referer": _referer,
    "-u": _user,
    "--user": _user,
    "-b": _cookie,
    "--cookie": _cookie,
    "-d": _data,
    "--data": _data,
    "--data-ascii": _data,
    "--data-raw": _data_raw,
    "--data-binary": _data_binary,
    "--data-urlencode": _data_urlencode,
    "--json": _json,
    "-F": _form,
    "--form": _form,
    "--form-string": _form_string,
    "--url": _url,
    "--max-redirs": _max_redirs,
    "-m": _max_time,
    "--max-time": _max_time,
    "-x": _proxy,
    "--proxy": _proxy,
    "-o": _output,
    "--output": _output,
}

_SWITCH_HANDLERS: dict[str, Callable[[_ParseState], None]] = {
    "-k": _set_insecure,
    "--insecure": _set_insecure,
    "-L": _set_location,
    "--location": _set_location,
    "--compressed": _set_compressed,
    "-I": _set_head,
    "--head": _set_head,
    "--http1.0": _http_version("1.0"),
    "-0": _http_version("1.0"),
    "--http1.1": _http_version("1.1"),
    "--http2": _http_version("2"),
    "--basic": _auth_type(AuthType.BASIC),
    "--digest": _auth_type(AuthType.DIGEST),
    "--ntlm": _auth_type(AuthType.NTLM),
    "--negotiate": _auth_type(AuthType.NEGOTIATE),
}


def _split_attached(token: str) -> tuple[str, Optional[str]]:
    """Split ``-XPOST`` into ``("-X", "POST")``; other tokens pass through."""
    if len(token) > 2 and token[0] == "-" and token[1] != "-":
        option = token[:2]
        if option in _VALUE_HANDLERS:
            return option, token[2:]
    return token, None


def parse_tokens(tokens: list[str]) -> Request:
    """Build a :class:`~curlconv.models.Request` from a token list.

    ``tokens[0]`` is the program name and is skipped. Unknown options are
    ignored, and an option whose value is missing at the end of the list
    is dropped.

    After the scan, a request that carried body data but no explicit
    ``-X`` is promoted from ``GET`` to ``POST``.

    Raises:
        CommandParseError: If *tokens* is empty.

    Example::

        >>> req = parse_tokens(["curl", "-d", "x=1", "https://h/"])
        >>> req.method
        'POST'
    """
    if not tokens:
        raise CommandParseError("Empty command")

    state = _ParseState()
    i = 1
    while i < len(tokens):
        token, attached = _split_attached(tokens[i])
        i += 1

        handler = _VALUE_HANDLERS.get(token)
        if handler is not None:
            if attached is None:
                if i >= len(tokens):
                    debug(f"Option {token} is missing its value")
                    break
                attached = tokens[i]
                i += 1
            handler(state, attached)
            continue

        switch = _SWITCH_HANDLERS.get(token)
        if switch is not None:
            switch(state)
            continue

        if token.startswith("-"):
            debug(f"Ignoring unsupported option {token}")
            continue
        if not token:
            continue

        _url(state, token)

    request = state.request
    if state.credentials is not None:
        username, password = state.credentials
        request.auth = AuthConfig(
            type=state.auth_type, username=username, password=password
        )

    if state.has_data and not state.explicit_method and request.method == "GET":
        request.method = "POST"

    if request.urls:
        request.query = list(request.urls[0].query_list)
        request.query_dict = dict(request.query)

    return request
