"""Tests for curlconv.generators.registry and the generator contract.

Every variant of every language must turn any parsed request into a
non-empty snippet ending in exactly one newline, without raising.
"""

from __future__ import annotations

import ast

import pytest

from curlconv.generators import (
    LANGUAGE_LABELS,
    default_variant,
    get_generators,
    language_label,
    supported_languages,
)
from curlconv.parser import parse_command

EXPECTED_VARIANTS = {
    "curl": ["Windows CMD", "PowerShell"],
    "javascript": ["Fetch API", "XMLHttpRequest"],
    "nodejs": ["Native HTTP", "Axios", "Got"],
    "python": ["Requests", "HTTP Client"],
    "php": ["cURL", "Guzzle"],
    "go": ["HTTP", "Resty"],
    "java": ["HttpClient", "OkHttp", "HttpURLConnection"],
    "csharp": ["HttpClient", "RestSharp"],
    "perl": ["LWP", "HTTPTiny"],
    "powershell": ["WebRequest", "RestMethod"],
    "wget": ["Standard", "Mirror"],
    "dart": ["HTTP", "Dio"],
    "swift": ["URLSession", "Alamofire"],
    "rust": ["Reqwest", "Ureq"],
}

ALL_VARIANTS = [
    (language, variant)
    for language, variants in EXPECTED_VARIANTS.items()
    for variant in variants
]

SAMPLE_COMMANDS = {
    "get": "curl https://api.example.com/items?page=2",
    "head": "curl -I https://example.com/",
    "custom_method": "curl -X PURGE https://cdn.example.com/asset.js",
    "headers": (
        "curl -H 'Accept: application/json' -H 'X-Trace: a\"b$c`d' "
        "-A 'agent/1.0' -e https://ref.example.com https://example.com/"
    ),
    "form_data": "curl -d 'name=Ann' -d 'age=30' https://example.com/people",
    "data_file": "curl --data @body.txt https://example.com/upload",
    "data_stdin": "curl --data-binary @- https://example.com/upload",
    "binary_file": "curl --data-binary @image.png -H 'Content-Type: image/png' https://example.com/img",
    "mixed_data": "curl -d a=1 -d @extra.txt --data-urlencode 'q@query.txt' https://example.com/",
    "urlencode": (
        "curl --data-urlencode 'msg=hello world' --data-urlencode 'raw' "
        "--data-urlencode 'note@-' --data-urlencode '@whole.txt' https://example.com/"
    ),
    "json": """curl --json '{"name": "x", "tags": ["a", "b"], "n": 1.5, "ok": true, "none": null, "empty": {}}' https://example.com/api""",
    "raw_json": "curl --json '{broken' https://example.com/api",
    "json_file": "curl --json @payload.json https://example.com/api",
    "multipart": (
        "curl -F 'name=Ann' -F 'avatar=@photos/me.png;type=image/png' "
        "--form-string 'literal=@not-a-file' https://example.com/profile"
    ),
    "multipart_stdin": "curl -F 'file=@-' -X PUT https://example.com/upload",
    "basic_auth": "curl -u 'user:p@ss' https://example.com/secure",
    "digest_auth": "curl --digest -u admin:secret https://example.com/secure",
    "ntlm_auth": "curl --ntlm -u 'DOMAIN\\\\user:pw' https://example.com/secure",
    "negotiate_auth": "curl --negotiate -u : https://example.com/secure",
    "transport": (
        "curl -k -L --max-redirs 3 -m 2.5 -x proxy.local:3128 --compressed "
        "--http2 -o out.html https://example.com/"
    ),
    "no_redirects": "curl --http1.1 -m 10 http://example.com:8080/path",
    "cookies": "curl -b 'session=abc; theme=dark' -b jar.txt https://example.com/",
    "control_chars": "curl -H 'X-Bell: \x07' -d 'line1\nline2\ttab\x1b' https://example.com/",
    "unicode": "curl -H 'X-Name: Zoë' -d 'city=Zürich' https://example.com/",
    "json_string": "curl --json '\"abc\"' https://example.com/api",
    "json_null": "curl --json null https://example.com/api",
    "no_url": "curl -H 'Accept: */*'",
}


# ---------------------------------------------------------------------------
# Registry lookups
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_supported_languages_in_registry_order(self) -> None:
        assert supported_languages() == list(EXPECTED_VARIANTS)

    @pytest.mark.parametrize("language", list(EXPECTED_VARIANTS))
    def test_variant_names_and_order(self, language: str) -> None:
        generators = get_generators(language)
        assert generators is not None
        assert list(generators) == EXPECTED_VARIANTS[language]

    @pytest.mark.parametrize("language", list(EXPECTED_VARIANTS))
    def test_default_variant_is_first(self, language: str) -> None:
        assert default_variant(language) == EXPECTED_VARIANTS[language][0]

    @pytest.mark.parametrize("key", ["cobol", "", "Python", "common", "registry"])
    def test_unknown_key_returns_none(self, key: str) -> None:
        assert get_generators(key) is None
        assert default_variant(key) is None

    def test_lookup_returns_a_fresh_mapping(self) -> None:
        first = get_generators("python")
        first.clear()
        assert list(get_generators("python")) == ["Requests", "HTTP Client"]

    def test_labels(self) -> None:
        assert language_label("csharp") == "C#"
        assert language_label("nodejs") == "Node.js"
        assert language_label("curl") == "cURL (Windows)"
        assert language_label("cobol") is None
        assert set(LANGUAGE_LABELS) == set(EXPECTED_VARIANTS)


# ---------------------------------------------------------------------------
# Generator contract
# ---------------------------------------------------------------------------


class TestMinimalGet:
    @pytest.mark.parametrize("language, variant", ALL_VARIANTS)
    def test_snippet_contains_url(self, minimal_get, language: str, variant: str) -> None:
        code = get_generators(language)[variant](minimal_get)
        assert code.strip()
        assert "api.example.com/items?page=2" in code
        assert code.endswith("\n")
        assert not code.endswith("\n\n")


class TestTotality:
    @pytest.mark.parametrize("language, variant", ALL_VARIANTS)
    @pytest.mark.parametrize("sample", list(SAMPLE_COMMANDS))
    def test_every_variant_renders_every_sample(
        self, language: str, variant: str, sample: str
    ) -> None:
        result = parse_command(SAMPLE_COMMANDS[sample])
        assert result.ok, result.error
        code = get_generators(language)[variant](result.request)
        assert isinstance(code, str)
        assert code.strip()
        assert code.endswith("\n")
        assert not code.endswith("\n\n")

    @pytest.mark.parametrize("language, variant", ALL_VARIANTS)
    def test_generators_do_not_mutate_the_request(self, parse, language: str, variant: str) -> None:
        request = parse(SAMPLE_COMMANDS["multipart"])
        before = request.model_dump()
        get_generators(language)[variant](request)
        assert request.model_dump() == before


# ---------------------------------------------------------------------------
# Line breaks in comments
# ---------------------------------------------------------------------------

LINE_BREAK_COMMANDS = [
    "curl 'https://h/a\nimport os; os.system(1) +'",
    "curl -F 'note=b\rc d' -F 'up=@dir\r\nx.txt' https://example.com/",
    "curl -X 'PO\nST' -x 'proxy\u2028.local:3128' 'https://h/\r# x'",
]

SOURCE_VARIANTS = [
    (language, variant) for language, variant in ALL_VARIANTS if language not in ("curl", "wget")
]


class TestLineBreaksInComments:
    @pytest.mark.parametrize("variant", EXPECTED_VARIANTS["python"])
    @pytest.mark.parametrize("command", LINE_BREAK_COMMANDS)
    def test_python_output_parses(self, parse, variant: str, command: str) -> None:
        code = get_generators("python")[variant](parse(command))
        ast.parse(code)
        assert "\nimport os" not in code

    @pytest.mark.parametrize("language, variant", SOURCE_VARIANTS)
    @pytest.mark.parametrize("command", LINE_BREAK_COMMANDS)
    def test_no_raw_line_breaks_in_source(
        self, parse, language: str, variant: str, command: str
    ) -> None:
        code = get_generators(language)[variant](parse(command))
        assert "\r" not in code
        assert "\nimport os" not in code
        assert "\nc d" not in code
        assert "\nx.txt" not in code
