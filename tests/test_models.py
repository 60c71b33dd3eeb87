"""Tests for curlconv.models -- defaults, aliases, and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from curlconv.models import (
    AuthConfig,
    AuthType,
    FileDataParam,
    FileParamType,
    GlobalConfig,
    OutputConfig,
    ParseResult,
    Request,
    RequestUrl,
)


class TestGlobalConfig:
    def test_defaults(self) -> None:
        config = GlobalConfig()
        assert config.default_language == "python"
        assert config.variants == {}
        assert config.output.format == "auto"
        assert config.output.theme == "monokai"

    def test_round_trip_through_json(self) -> None:
        config = GlobalConfig(default_language="go", variants={"nodejs": "Axios"})
        restored = GlobalConfig.model_validate(config.model_dump(mode="json"))
        assert restored == config

    def test_rejects_unknown_output_format(self) -> None:
        with pytest.raises(ValidationError):
            OutputConfig(format="yaml")


class TestRequest:
    def test_defaults(self) -> None:
        request = Request()
        assert request.method == "GET"
        assert request.urls == []
        assert request.headers == {}
        assert request.data == []
        assert request.data_array == []
        assert request.json_data is None
        assert request.auth is None
        assert request.follow_redirects is False
        assert request.url == ""
        assert request.has_json is False

    def test_url_property_uses_first_url(self) -> None:
        request = Request(
            urls=[
                RequestUrl(original_url="a.com", url="http://a.com"),
                RequestUrl(original_url="b.com", url="http://b.com"),
            ]
        )
        assert request.url == "http://a.com"

    def test_json_alias_accepted_and_serialised(self) -> None:
        request = Request(json={"a": 1})
        assert request.json_data == {"a": 1}
        assert request.has_json
        dumped = request.model_dump(mode="json", by_alias=True)
        assert dumped["json"] == {"a": 1}
        assert "json_data" not in dumped

    def test_json_field_name_also_accepted(self) -> None:
        assert Request(json_data="raw").json_data == "raw"

    def test_data_array_mixes_literals_and_files(self) -> None:
        request = Request(
            data_array=[
                "a=1",
                FileDataParam(filetype=FileParamType.BINARY, filename="body.bin"),
            ]
        )
        assert request.data_array[0] == "a=1"
        assert isinstance(request.data_array[1], FileDataParam)
        assert request.data_array[1].filetype == FileParamType.BINARY

    def test_file_data_param_from_dict(self) -> None:
        request = Request.model_validate(
            {"data_array": [{"filetype": "urlencode", "filename": "f.txt", "name": "q"}]}
        )
        item = request.data_array[0]
        assert isinstance(item, FileDataParam)
        assert item.name == "q"


class TestAuthConfig:
    def test_defaults_to_basic(self) -> None:
        assert AuthConfig(username="u").type == AuthType.BASIC

    def test_enum_values(self) -> None:
        assert [t.value for t in AuthType] == ["basic", "digest", "ntlm", "negotiate"]


class TestParseResult:
    def test_ok_when_request_present(self) -> None:
        assert ParseResult(request=Request()).ok

    def test_not_ok_on_error(self) -> None:
        result = ParseResult(error="boom")
        assert not result.ok
        assert result.request is None
