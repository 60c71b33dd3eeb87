"""Tests for curlconv.generators.common.

Covers:
- body_kind precedence: multipart > JSON > data items
- data_items rebuilt from legacy records when data_array is empty
- json_text / json_is_raw
- comment_text
- Case-insensitive header helpers
- basic_credentials, file_name_only, format_number
- split_url / split_proxy
- template_environment strictness and render's trailing newline
"""

from __future__ import annotations

import base64

import pytest
from jinja2.exceptions import UndefinedError

from curlconv.generators.common import (
    BodyKind,
    basic_credentials,
    body_kind,
    comment_text,
    data_items,
    file_name_only,
    format_number,
    header_lookup,
    headers_without,
    json_is_raw,
    json_text,
    method_of,
    render,
    split_proxy,
    split_url,
    template_environment,
)
from curlconv.models import (
    AuthConfig,
    AuthType,
    FileDataParam,
    FileParamType,
    FormParam,
    LegacyDataParam,
    Request,
)


# ---------------------------------------------------------------------------
# Body source selection
# ---------------------------------------------------------------------------


class TestBodyKind:
    def test_no_body(self) -> None:
        assert body_kind(Request()) == BodyKind.NONE

    def test_multipart_wins_over_everything(self) -> None:
        request = Request(
            multipart_uploads=[FormParam(name="a", content="1")],
            json_data={"x": 1},
            data_array=["a=1"],
        )
        assert body_kind(request) == BodyKind.MULTIPART

    def test_json_wins_over_data(self) -> None:
        request = Request(json_data={"x": 1}, data_array=["a=1"])
        assert body_kind(request) == BodyKind.JSON

    def test_legacy_data_alone_is_data(self) -> None:
        request = Request(data=[LegacyDataParam(content="a=1")])
        assert body_kind(request) == BodyKind.DATA

    def test_json_file_is_a_data_item(self, parse) -> None:
        request = parse("curl --json @payload.json https://h/")
        assert body_kind(request) == BodyKind.DATA
        assert data_items(request)[0].filetype == FileParamType.JSON


class TestDataItems:
    def test_enhanced_form_is_returned_as_is(self) -> None:
        item = FileDataParam(filetype=FileParamType.BINARY, filename="a.bin")
        request = Request(data_array=["a=1", item])
        assert data_items(request) == ["a=1", item]

    def test_returns_a_copy(self) -> None:
        request = Request(data_array=["a=1"])
        data_items(request).append("b=2")
        assert request.data_array == ["a=1"]

    def test_rebuilt_from_legacy_records(self) -> None:
        request = Request(
            data=[
                LegacyDataParam(content="a=1"),
                LegacyDataParam(content="body.txt", is_file=True),
                LegacyDataParam(content="blob.bin", is_file=True, binary=True),
                LegacyDataParam(content="q.txt", is_file=True, urlencode=True, name="q"),
                LegacyDataParam(content="-", urlencode=True, name="s"),
            ]
        )
        items = data_items(request)
        assert items[0] == "a=1"
        assert [(i.filetype, i.filename, i.name) for i in items[1:]] == [
            (FileParamType.DATA, "body.txt", None),
            (FileParamType.BINARY, "blob.bin", None),
            (FileParamType.URLENCODE, "q.txt", "q"),
            (FileParamType.URLENCODE, "-", "s"),
        ]


class TestJsonText:
    def test_parsed_payload_is_compact(self) -> None:
        request = Request(json_data={"a": [1, 2], "b": "é"})
        assert not json_is_raw(request)
        assert json_text(request) == '{"a":[1,2],"b":"é"}'

    def test_indent(self) -> None:
        assert json_text(Request(json_data={"a": 1}), indent=2) == '{\n  "a": 1\n}'

    def test_raw_payload_is_verbatim(self) -> None:
        request = Request(json_data="{not json", json_raw=True)
        assert json_is_raw(request)
        assert json_text(request, indent=2) == "{not json"

    def test_parsed_json_string_keeps_its_quotes(self) -> None:
        request = Request(json_data="abc", json_given=True)
        assert not json_is_raw(request)
        assert json_text(request) == '"abc"'

    def test_parsed_null(self) -> None:
        assert json_text(Request(json_given=True)) == "null"


class TestCommentText:
    @pytest.mark.parametrize("brk", ["\n", "\r", "\r\n", "\u2028", "\u2029"])
    def test_line_breaks_become_spaces(self, brk: str) -> None:
        assert "\n" not in comment_text(f"a{brk}b")
        assert comment_text(f"a{brk}b").replace(" ", "") == "ab"

    def test_other_text_is_unchanged(self) -> None:
        assert comment_text("GET https://h/?q=1\t#x") == "GET https://h/?q=1\t#x"


# ---------------------------------------------------------------------------
# Headers and credentials
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_lookup_ignores_case(self) -> None:
        assert header_lookup({"content-type": "text/plain"}, "Content-Type") == "text/plain"
        assert header_lookup({}, "Accept") is None

    def test_without_keeps_order(self) -> None:
        headers = {"A": "1", "Content-Type": "x", "B": "2"}
        assert list(headers_without(headers, "content-type")) == ["A", "B"]
        assert headers == {"A": "1", "Content-Type": "x", "B": "2"}

    def test_method_of_uppercases(self) -> None:
        assert method_of(Request(method="patch")) == "PATCH"


class TestBasicCredentials:
    def test_basic(self) -> None:
        request = Request(auth=AuthConfig(username="user", password="p:w"))
        expected = base64.b64encode(b"user:p:w").decode()
        assert basic_credentials(request) == f"Basic {expected}"

    def test_other_schemes_have_none(self) -> None:
        request = Request(auth=AuthConfig(type=AuthType.DIGEST, username="u"))
        assert basic_credentials(request) is None
        assert basic_credentials(Request()) is None


# ---------------------------------------------------------------------------
# Small formatting helpers
# ---------------------------------------------------------------------------


class TestFormatting:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("photo.png", "photo.png"),
            ("/tmp/up/photo.png", "photo.png"),
            ("C:\\Users\\me\\photo.png", "photo.png"),
            ("dir/", "dir/"),
        ],
    )
    def test_file_name_only(self, path: str, expected: str) -> None:
        assert file_name_only(path) == expected

    @pytest.mark.parametrize("value, expected", [(5.0, "5"), (2.5, "2.5"), (0.25, "0.25")])
    def test_format_number(self, value: float, expected: str) -> None:
        assert format_number(value) == expected


class TestSplitUrl:
    def test_full_url(self) -> None:
        parts = split_url("https://api.example.com:8443/v1/items?page=2")
        assert parts.scheme == "https"
        assert parts.host == "api.example.com"
        assert parts.port == 8443
        assert parts.path == "/v1/items?page=2"

    def test_path_defaults_to_root(self) -> None:
        parts = split_url("http://example.com")
        assert parts.path == "/"
        assert parts.port is None

    def test_bad_port_returns_whole_url_as_host(self) -> None:
        parts = split_url("http://example.com:notaport/")
        assert parts.host == "http://example.com:notaport/"
        assert parts.path == "/"

    def test_proxy_without_scheme(self) -> None:
        proxy = split_proxy("proxy.local:3128")
        assert (proxy.scheme, proxy.host, proxy.port) == ("http", "proxy.local", 3128)

    def test_proxy_with_scheme(self) -> None:
        proxy = split_proxy("socks5://10.0.0.1:1080")
        assert (proxy.scheme, proxy.host, proxy.port) == ("socks5", "10.0.0.1", 1080)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplates:
    def test_filters_are_registered(self) -> None:
        env = template_environment(q=lambda value: f"<{value}>")
        template = env.from_string("{{ name|q }}")
        assert template.render(name="x") == "<x>"

    def test_undefined_variable_is_an_error(self) -> None:
        template = template_environment().from_string("{{ missing }}")
        with pytest.raises(UndefinedError):
            template.render()

    def test_block_lines_leave_no_trace(self) -> None:
        template = template_environment().from_string(
            "start\n{% for x in items %}\n  {{ x }}\n{% endfor %}\nend\n"
        )
        assert template.render(items=[1, 2]) == "start\n  1\n  2\nend"

    def test_render_ends_with_one_newline(self) -> None:
        template = template_environment().from_string("\n\ncode\n\n\n")
        assert render(template) == "code\n"
