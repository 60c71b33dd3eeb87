"""Canonical Pydantic models shared across all curlconv modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Conversion models** -- produced by the command interpreter and consumed by
the code generators:
    :class:`FileParamType`, :class:`AuthType`, :class:`RequestUrl`,
    :class:`FormParam`, :class:`FileDataParam`, :class:`LegacyDataParam`,
    :class:`AuthConfig`, :class:`Request`, and :class:`ParseResult`.

The request body is carried in two parallel forms. ``data`` is the legacy
list of :class:`LegacyDataParam` records; ``data_array`` is the enhanced list
whose items are either literal strings or :class:`FileDataParam` references.
The interpreter fills both from every data flag so that a generator may read
whichever one it understands.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Config models ---


class OutputConfig(BaseModel):
    """Default output preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    theme: str = Field(
        default="monokai", description="Pygments theme for highlighted code"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/curlconv/config.json``.

    Loaded and saved by :func:`~curlconv.config.load_global_config` and
    :func:`~curlconv.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~curlconv.config.resolve_config`
    for the full precedence chain.
    """

    default_language: str = Field(
        default="python", description="Language key used when --to is omitted"
    )
    variants: dict[str, str] = Field(
        default_factory=dict,
        description="Preferred generator variant per language key",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Conversion models ---


class FileParamType(str, enum.Enum):
    """How a file referenced from a data flag is read and encoded.

    ``data`` strips carriage returns and newlines, ``binary`` sends the
    bytes as-is, ``urlencode`` percent-encodes the content, and ``json``
    sends the content as a JSON document.
    """

    DATA = "data"
    BINARY = "binary"
    URLENCODE = "urlencode"
    JSON = "json"


class AuthType(str, enum.Enum):
    """HTTP authentication schemes selectable with ``--basic``/``--digest``/..."""

    BASIC = "basic"
    DIGEST = "digest"
    NTLM = "ntlm"
    NEGOTIATE = "negotiate"


class RequestUrl(BaseModel):
    """One URL given on the command line.

    ``original_url`` is the token as typed; ``url`` is the normalised form
    (a scheme is added when missing). ``query_list`` holds the decoded
    ``(name, value)`` query pairs in order.
    """

    original_url: str
    url: str
    query_list: list[tuple[str, str]] = Field(default_factory=list)
    upload_file: Optional[str] = None


class FormParam(BaseModel):
    """A multipart form field from ``-F``/``--form``/``--form-string``."""

    name: str
    content: str
    is_file: bool = False
    content_file: Optional[str] = None


class FileDataParam(BaseModel):
    """A file reference in the enhanced data form.

    A ``filename`` of ``"-"`` means standard input.
    """

    filetype: FileParamType
    filename: str
    name: Optional[str] = None


class LegacyDataParam(BaseModel):
    """One data flag occurrence in the legacy body form."""

    content: str
    is_file: bool = False
    binary: bool = False
    urlencode: bool = False
    name: Optional[str] = None


DataParam = Union[str, FileDataParam]
"""An enhanced data item: a literal string or a file reference."""


class AuthConfig(BaseModel):
    """Credentials from ``-u``/``--user``."""

    type: AuthType = AuthType.BASIC
    username: str = ""
    password: str = ""


class Request(BaseModel):
    """Normalised, language-agnostic description of one curl invocation.

    Built fresh by :func:`~curlconv.parser.interpreter.parse_tokens` for
    every conversion and consumed read-only by the generators.

    When a generator must pick a single body source the precedence is
    ``multipart_uploads`` > ``json`` > ``data_array`` > ``data``; see
    :func:`~curlconv.generators.common.body_kind`.

    The ``json`` field is stored as ``json_data`` (``json`` would shadow a
    :class:`~pydantic.BaseModel` method) and serialised under its alias.
    ``json_given`` records that ``--json`` carried an inline payload, so a
    literal ``null`` still counts. ``json_raw`` marks text that did not
    parse and is sent verbatim.
    """

    model_config = ConfigDict(populate_by_name=True)

    urls: list[RequestUrl] = Field(default_factory=list)
    cookie_files: list[str] = Field(default_factory=list)
    output_path: Optional[str] = None
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    multipart_uploads: list[FormParam] = Field(default_factory=list)
    data: list[LegacyDataParam] = Field(default_factory=list)
    data_array: list[DataParam] = Field(default_factory=list)
    is_data_binary: bool = False
    is_data_raw: bool = False
    data_reads_file: Optional[str] = None
    json_data: Any = Field(default=None, alias="json")
    json_given: bool = False
    json_raw: bool = False
    query: list[tuple[str, str]] = Field(default_factory=list)
    query_dict: dict[str, str] = Field(default_factory=dict)
    auth: Optional[AuthConfig] = None
    proxy: Optional[str] = None
    insecure: bool = False
    follow_redirects: bool = False
    max_redirs: Optional[int] = None
    timeout: Optional[float] = None
    cookies: dict[str, str] = Field(default_factory=dict)
    compressed: bool = False
    http2: bool = False
    http_version: Optional[str] = None

    @property
    def url(self) -> str:
        """The first normalised URL, or ``""`` when none was given."""
        return self.urls[0].url if self.urls else ""

    @property
    def has_json(self) -> bool:
        """Whether ``--json`` supplied an inline payload (``null`` included)."""
        return self.json_given or self.json_data is not None


class ParseResult(BaseModel):
    """Outcome of :func:`~curlconv.parser.parse_command`.

    Exactly one of ``request`` and ``error`` is populated.
    """

    request: Optional[Request] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.request is not None
