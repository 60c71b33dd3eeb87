"""Tests for curlconv.parser.parse_command -- the non-raising boundary."""

from __future__ import annotations

import pytest

from curlconv.parser import parse_command
from curlconv.parser.command import INVALID_START_MESSAGE


class TestParseCommand:
    def test_success_populates_request_only(self) -> None:
        result = parse_command("curl -X PUT https://example.com")
        assert result.ok
        assert result.error is None
        assert result.request.method == "PUT"

    @pytest.mark.parametrize(
        "program",
        ["curl", "curl.exe", "CURL", "/usr/bin/curl", "'C:\\tools\\curl.exe'"],
    )
    def test_program_names_accepted(self, program: str) -> None:
        assert parse_command(f"{program} https://h/").ok

    @pytest.mark.parametrize("command", ["wget https://h/", "curly https://h/", "", "   "])
    def test_other_programs_rejected(self, command: str) -> None:
        result = parse_command(command)
        assert result.request is None
        assert result.error == INVALID_START_MESSAGE
        assert result.error == 'Command must start with "curl" or "curl.exe"'

    def test_multiline_command(self) -> None:
        command = (
            "curl -X POST https://httpbin.org/post \\\n"
            '  -H "Content-Type: application/json" \\\n'
            "  -d '{\"hello\":\"world\"}'"
        )
        request = parse_command(command).request
        assert request.method == "POST"
        assert request.headers == {"Content-Type": "application/json"}
        assert request.data_array == ['{"hello":"world"}']

    def test_windows_cmd_continuations(self) -> None:
        command = 'curl.exe ^\n  -H "Accept: */*" ^\n  https://h/'
        request = parse_command(command).request
        assert request.headers == {"Accept": "*/*"}
        assert request.url == "https://h/"

    def test_unexpected_failure_becomes_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(tokens):
            raise RuntimeError("boom")

        monkeypatch.setattr("curlconv.parser.command.parse_tokens", boom)
        result = parse_command("curl https://h/")
        assert result.request is None
        assert result.error == "Parse error: boom"

    def test_unexpected_failure_without_message(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(tokens):
            raise KeyError()

        monkeypatch.setattr("curlconv.parser.command.parse_tokens", boom)
        assert parse_command("curl https://h/").error == "Parse error"

    def test_each_call_builds_a_fresh_request(self) -> None:
        first = parse_command("curl -H 'A: 1' https://h/").request
        second = parse_command("curl https://h/").request
        assert first is not second
        assert second.headers == {}
