"""Tests for the built-in sample commands."""

from __future__ import annotations

import pytest

from curlconv.examples import EXAMPLE_CURL, QUICK_EXAMPLES, get_example
from curlconv.parser import parse_command


class TestExamples:
    def test_default_example_parses(self) -> None:
        request = parse_command(EXAMPLE_CURL).request
        assert request.method == "POST"
        assert request.url == "https://httpbin.org/post"
        assert request.headers["Authorization"] == "Bearer MY_TOKEN"
        assert request.data_array == ['{"hello":"world"}']

    @pytest.mark.parametrize("example", QUICK_EXAMPLES, ids=lambda e: e.name)
    def test_quick_example_method_matches(self, example) -> None:
        result = parse_command(example.command)
        assert result.ok, result.error
        assert result.request.method == example.method

    def test_form_example_uploads_file(self) -> None:
        request = parse_command(get_example("Form Data").command).request
        assert [f.name for f in request.multipart_uploads] == ["name", "file"]
        assert request.multipart_uploads[1].is_file

    def test_lookup_ignores_case_and_space(self) -> None:
        assert get_example("  post json ").name == "POST JSON"

    def test_unknown_name(self) -> None:
        assert get_example("PATCH Request") is None
