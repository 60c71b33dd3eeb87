"""Tests for curlconv.parser.tokenizer -- quoting rules and continuations."""

from __future__ import annotations

import pytest

from curlconv.parser.tokenizer import normalize_command, tokenize


class TestQuoting:
    def test_mixed_quotes(self) -> None:
        assert tokenize("curl \"a b\" 'c\"d'") == ["curl", "a b", 'c"d']

    def test_whitespace_collapses(self) -> None:
        assert tokenize("curl   -X\tPOST    https://h/") == ["curl", "-X", "POST", "https://h/"]

    def test_single_quotes_are_literal(self) -> None:
        assert tokenize(r"curl 'a\nb $HOME'") == ["curl", r"a\nb $HOME"]

    def test_double_quote_escapes(self) -> None:
        assert tokenize(r'curl "say \"hi\" \\ \$x \q"') == ["curl", r'say "hi" \ $x \q']

    def test_backslash_outside_quotes_escapes_next(self) -> None:
        assert tokenize(r"curl a\ b \'x") == ["curl", "a b", "'x"]

    def test_adjacent_quoted_parts_join(self) -> None:
        assert tokenize("curl -H 'A: '\"b c\"") == ["curl", "-H", "A: b c"]

    def test_empty_quoted_string_is_a_token(self) -> None:
        assert tokenize("curl -d '' https://h/") == ["curl", "-d", "", "https://h/"]

    def test_unterminated_quote_closes_at_end(self) -> None:
        assert tokenize("curl 'https://h/ -v") == ["curl", "https://h/ -v"]

    def test_trailing_backslash_is_dropped(self) -> None:
        assert tokenize("curl x\\") == ["curl", "x"]

    def test_empty_input(self) -> None:
        assert tokenize("") == []
        assert tokenize("   ") == []


class TestNormalizeCommand:
    @pytest.mark.parametrize(
        "continuation",
        [" \\\n  ", " ^\n  ", " `\n  ", " \\\r\n  ", "\\\n"],
    )
    def test_continuations_fold(self, continuation: str) -> None:
        command = continuation.join(["curl", "-X POST", "https://h/"])
        normalized = normalize_command(command)
        assert "\n" not in normalized
        assert tokenize(normalized) == ["curl", "-X", "POST", "https://h/"]

    def test_strips_surrounding_whitespace(self) -> None:
        assert normalize_command("\n  curl https://h/  \n") == "curl https://h/"

    def test_quoted_backtick_newline_is_kept(self) -> None:
        command = "curl -d '```\ncode\n```' https://h/"
        assert tokenize(normalize_command(command)) == [
            "curl",
            "-d",
            "```\ncode\n```",
            "https://h/",
        ]

    def test_quoted_caret_newline_is_kept(self) -> None:
        command = 'curl -d "a^\nb" https://h/'
        assert tokenize(normalize_command(command)) == ["curl", "-d", "a^\nb", "https://h/"]

    def test_backtick_continuation_after_quoted_argument(self) -> None:
        command = "curl -H 'A: b' `\n  https://h/"
        assert tokenize(normalize_command(command)) == ["curl", "-H", "A: b", "https://h/"]

    def test_continuation_insertion_does_not_change_tokens(self) -> None:
        flat = "curl -X PUT -H 'Accept: */*' -d \"a=1\" https://example.com/x"
        parts = ["curl", "-X PUT", "-H 'Accept: */*'", '-d "a=1"', "https://example.com/x"]
        multi = " \\\n  ".join(parts)
        assert tokenize(normalize_command(multi)) == tokenize(normalize_command(flat))
