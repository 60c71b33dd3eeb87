"""Tests for curlconv.parser.interpreter -- option handling and body forms."""

from __future__ import annotations

import pytest

from curlconv.exceptions import CommandParseError
from curlconv.models import (
    AuthType,
    FileDataParam,
    FileParamType,
    FormParam,
    LegacyDataParam,
)
from curlconv.parser.interpreter import encode_urlencoded, make_url, parse_tokens


def _parse(*args: str):
    return parse_tokens(["curl", *args])


# ---------------------------------------------------------------------------
# Method inference
# ---------------------------------------------------------------------------


class TestMethod:
    def test_defaults_to_get(self) -> None:
        assert _parse("https://h/").method == "GET"

    def test_data_promotes_to_post(self) -> None:
        assert _parse("-d", "x=1", "https://h/").method == "POST"

    def test_explicit_method_wins(self) -> None:
        assert _parse("-X", "GET", "-d", "x=1", "https://h/").method == "GET"

    def test_explicit_method_after_data_wins(self) -> None:
        assert _parse("-d", "x=1", "--request", "PATCH", "https://h/").method == "PATCH"

    def test_attached_short_value(self) -> None:
        assert _parse("-XDELETE", "https://h/").method == "DELETE"

    def test_head_switch(self) -> None:
        assert _parse("-I", "https://h/").method == "HEAD"

    def test_form_promotes_to_post(self) -> None:
        assert _parse("-F", "a=1", "https://h/").method == "POST"

    def test_empty_data_does_not_promote(self) -> None:
        request = _parse("-d", "", "https://h/")
        assert request.method == "GET"
        assert request.data_array == []


# ---------------------------------------------------------------------------
# Headers, auth, cookies
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_last_duplicate_wins(self) -> None:
        assert _parse("-H", "A: 1", "-H", "A: 2", "https://h/").headers == {"A": "2"}

    def test_split_on_first_colon_and_trim(self) -> None:
        request = _parse("-H", "  X-Url :  http://a:8080/  ", "https://h/")
        assert request.headers == {"X-Url": "http://a:8080/"}

    def test_insertion_order_kept(self) -> None:
        request = _parse("-H", "B: 1", "-H", "A: 2", "-H", "C: 3", "https://h/")
        assert list(request.headers) == ["B", "A", "C"]

    def test_header_without_colon_ignored(self) -> None:
        assert _parse("-H", "Accept", "https://h/").headers == {}

    def test_empty_header_value_kept(self) -> None:
        assert _parse("-H", "X-Empty:", "https://h/").headers == {"X-Empty": ""}

    def test_user_agent_and_referer(self) -> None:
        request = _parse("-A", "bot/1.0", "-e", "https://ref/", "https://h/")
        assert request.headers == {"User-Agent": "bot/1.0", "Referer": "https://ref/"}


class TestAuth:
    def test_basic_by_default(self) -> None:
        auth = _parse("-u", "me:secret", "https://h/").auth
        assert auth is not None
        assert (auth.type, auth.username, auth.password) == (AuthType.BASIC, "me", "secret")

    def test_password_may_contain_colons(self) -> None:
        auth = _parse("--user", "me:a:b", "https://h/").auth
        assert auth.password == "a:b"

    def test_missing_password_is_empty(self) -> None:
        assert _parse("-u", "me", "https://h/").auth.password == ""

    @pytest.mark.parametrize(
        ("flag", "expected"),
        [
            ("--digest", AuthType.DIGEST),
            ("--ntlm", AuthType.NTLM),
            ("--negotiate", AuthType.NEGOTIATE),
            ("--basic", AuthType.BASIC),
        ],
    )
    def test_auth_type_flags(self, flag: str, expected: AuthType) -> None:
        assert _parse(flag, "-u", "me:pw", "https://h/").auth.type == expected

    def test_auth_type_without_user_has_no_auth(self) -> None:
        assert _parse("--digest", "https://h/").auth is None


class TestCookies:
    def test_inline_cookies(self) -> None:
        request = _parse("-b", "a=1; b=two", "https://h/")
        assert request.headers["Cookie"] == "a=1; b=two"
        assert request.cookies == {"a": "1", "b": "two"}

    def test_cookie_file(self) -> None:
        request = _parse("--cookie", "jar.txt", "https://h/")
        assert request.cookie_files == ["jar.txt"]
        assert "Cookie" not in request.headers


# ---------------------------------------------------------------------------
# Body forms
# ---------------------------------------------------------------------------


class TestData:
    def test_literal_fills_both_forms(self) -> None:
        request = _parse("-d", "a=1", "--data", "b=2", "https://h/")
        assert request.data_array == ["a=1", "b=2"]
        assert request.data == [LegacyDataParam(content="a=1"), LegacyDataParam(content="b=2")]

    def test_file_reference(self) -> None:
        request = _parse("-d", "@body.txt", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.DATA, filename="body.txt")
        ]
        assert request.data == [LegacyDataParam(content="body.txt", is_file=True)]
        assert request.data_reads_file == "body.txt"

    def test_data_raw_sets_flag(self) -> None:
        request = _parse("--data-raw", "x=1", "https://h/")
        assert request.is_data_raw
        assert request.data_array == ["x=1"]

    def test_data_ascii_is_plain_data(self) -> None:
        assert _parse("--data-ascii", "x=1", "https://h/").data_array == ["x=1"]

    def test_binary_literal(self) -> None:
        request = _parse("--data-binary", "raw\nbytes", "https://h/")
        assert request.is_data_binary
        assert request.data_array == ["raw\nbytes"]
        assert request.data[0].binary

    def test_binary_file(self) -> None:
        request = _parse("--data-binary", "@img.png", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.BINARY, filename="img.png")
        ]
        assert request.data == [LegacyDataParam(content="img.png", is_file=True, binary=True)]

    def test_last_file_referenced_wins(self) -> None:
        request = _parse("-d", "@a.txt", "--data-binary", "@b.bin", "-d", "x=1", "https://h/")
        assert request.data_reads_file == "b.bin"

    def test_stdin_reference(self) -> None:
        request = _parse("-d", "@-", "https://h/")
        assert request.data_array == [FileDataParam(filetype=FileParamType.DATA, filename="-")]


class TestDataUrlencode:
    def test_named_file(self) -> None:
        request = _parse("--data-urlencode", "name=@file.txt", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.URLENCODE, filename="file.txt", name="name")
        ]
        assert request.data == [
            LegacyDataParam(content="file.txt", is_file=True, urlencode=True, name="name")
        ]
        assert request.data_reads_file == "file.txt"

    def test_unnamed_file(self) -> None:
        request = _parse("--data-urlencode", "@file.txt", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.URLENCODE, filename="file.txt")
        ]

    def test_name_at_file(self) -> None:
        request = _parse("--data-urlencode", "q@query.txt", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.URLENCODE, filename="query.txt", name="q")
        ]
        assert request.data_reads_file == "query.txt"

    def test_name_at_stdin_is_structured(self) -> None:
        request = _parse("--data-urlencode", "q@-", "https://h/")
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.URLENCODE, filename="-", name="q")
        ]
        assert request.data == [LegacyDataParam(content="-", urlencode=True, name="q")]

    def test_name_value_encodes_value_only(self) -> None:
        request = _parse("--data-urlencode", "msg=hello world&more", "https://h/")
        assert request.data_array == ["msg=hello%20world%26more"]
        assert request.data == [
            LegacyDataParam(content="msg=hello world&more", urlencode=True, name="msg")
        ]

    def test_bare_value(self) -> None:
        assert _parse("--data-urlencode", "a b", "https://h/").data_array == ["a%20b"]

    def test_leading_equals_dropped(self) -> None:
        assert _parse("--data-urlencode", "=a=b", "https://h/").data_array == ["a%3Db"]

    def test_promotes_to_post(self) -> None:
        assert _parse("--data-urlencode", "a=b", "https://h/").method == "POST"


class TestEncodeUrlencoded:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("plain", "plain"),
            ("k=v w", "k=v%20w"),
            ("=v/w", "v%2Fw"),
            ("über", "%C3%BCber"),
        ],
    )
    def test_forms(self, value: str, expected: str) -> None:
        assert encode_urlencoded(value) == expected


class TestJson:
    def test_parsed_payload(self) -> None:
        request = _parse("--json", '{"a":1}', "https://h/")
        assert request.json_data == {"a": 1}
        assert request.headers["Content-Type"] == "application/json"
        assert request.method == "POST"

    def test_invalid_json_kept_raw(self) -> None:
        request = _parse("--json", "{oops", "https://h/")
        assert request.json_data == "{oops"
        assert request.json_raw is True
        assert request.method == "POST"

    def test_json_string_is_parsed(self) -> None:
        request = _parse("--json", '"abc"', "https://h/")
        assert request.json_data == "abc"
        assert request.json_raw is False
        assert request.has_json

    def test_json_null_still_counts_as_a_body(self) -> None:
        request = _parse("--json", "null", "https://h/")
        assert request.json_data is None
        assert request.json_given is True
        assert request.has_json

    def test_explicit_method_kept(self) -> None:
        assert _parse("-X", "PUT", "--json", "[]", "https://h/").method == "PUT"

    def test_overrides_existing_content_type(self) -> None:
        request = _parse("-H", "Content-Type: text/plain", "--json", "1", "https://h/")
        assert request.headers == {"Content-Type": "application/json"}

    def test_file_payload(self) -> None:
        request = _parse("--json", "@payload.json", "https://h/")
        assert request.json_data is None
        assert request.data_array == [
            FileDataParam(filetype=FileParamType.JSON, filename="payload.json")
        ]
        assert request.data_reads_file == "payload.json"
        assert request.method == "POST"


class TestForm:
    def test_literal_and_file_fields(self) -> None:
        request = _parse("-F", "name=John", "-F", "doc=@report.pdf;type=application/pdf", "https://h/")
        assert request.multipart_uploads == [
            FormParam(name="name", content="John"),
            FormParam(name="doc", content="report.pdf", is_file=True, content_file="report.pdf"),
        ]

    def test_content_from_file(self) -> None:
        field = _parse("--form", "notes=<notes.txt", "https://h/").multipart_uploads[0]
        assert field.is_file
        assert field.content_file == "notes.txt"

    def test_form_string_never_reads_files(self) -> None:
        field = _parse("--form-string", "handle=@me", "https://h/").multipart_uploads[0]
        assert field == FormParam(name="handle", content="@me")

    def test_value_may_contain_equals(self) -> None:
        field = _parse("-F", "q=a=b", "https://h/").multipart_uploads[0]
        assert (field.name, field.content) == ("q", "a=b")

    def test_field_without_equals_ignored(self) -> None:
        assert _parse("-F", "broken", "https://h/").multipart_uploads == []


# ---------------------------------------------------------------------------
# URLs and transport flags
# ---------------------------------------------------------------------------


class TestUrls:
    def test_scheme_added(self) -> None:
        url = _parse("example.com/path").urls[0]
        assert url.original_url == "example.com/path"
        assert url.url == "http://example.com/path"

    def test_multiple_urls_in_order(self) -> None:
        request = _parse("https://a/", "--url", "https://b/")
        assert [u.url for u in request.urls] == ["https://a/", "https://b/"]
        assert request.url == "https://a/"

    def test_query_pairs(self) -> None:
        request = _parse("https://h/?a=1&b=&a=2")
        assert request.query == [("a", "1"), ("b", ""), ("a", "2")]
        assert request.query_dict == {"a": "2", "b": ""}

    def test_make_url_keeps_scheme(self) -> None:
        assert make_url("ftp://h/x").url == "ftp://h/x"


class TestTransportFlags:
    def test_switches(self) -> None:
        request = _parse("-k", "-L", "--compressed", "https://h/")
        assert request.insecure
        assert request.follow_redirects
        assert request.compressed

    def test_valued_options(self) -> None:
        request = _parse(
            "--max-redirs", "5", "-m", "2.5", "-x", "proxy:3128", "-o", "out.html", "https://h/"
        )
        assert request.max_redirs == 5
        assert request.timeout == 2.5
        assert request.proxy == "proxy:3128"
        assert request.output_path == "out.html"

    def test_non_numeric_values_ignored(self) -> None:
        request = _parse("--max-redirs", "many", "--max-time", "soon", "https://h/")
        assert request.max_redirs is None
        assert request.timeout is None

    @pytest.mark.parametrize(
        ("flag", "version", "http2"),
        [("--http1.0", "1.0", False), ("--http1.1", "1.1", False), ("--http2", "2", True)],
    )
    def test_http_version(self, flag: str, version: str, http2: bool) -> None:
        request = _parse(flag, "https://h/")
        assert request.http_version == version
        assert request.http2 is http2


# ---------------------------------------------------------------------------
# Leniency
# ---------------------------------------------------------------------------


class TestLeniency:
    def test_unknown_switch_ignored(self) -> None:
        request = _parse("--verbose", "-s", "https://h/")
        assert [u.url for u in request.urls] == ["https://h/"]

    def test_unknown_option_does_not_consume_value(self) -> None:
        request = _parse("--retry", "3", "https://h/")
        assert [u.original_url for u in request.urls] == ["3", "https://h/"]

    def test_missing_value_at_end_dropped(self) -> None:
        request = _parse("https://h/", "-H")
        assert request.headers == {}
        assert request.url == "https://h/"

    def test_program_name_only(self) -> None:
        request = parse_tokens(["curl"])
        assert request.urls == []
        assert request.method == "GET"

    def test_empty_tokens_raise(self) -> None:
        with pytest.raises(CommandParseError):
            parse_tokens([])
