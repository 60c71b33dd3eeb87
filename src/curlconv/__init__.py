"""curlconv -- Convert curl commands into equivalent code in other languages.

This package tokenizes a curl command line, interprets its options into a
language-agnostic :class:`~curlconv.models.Request`, and renders that request
through per-language code generators (Python, Go, Rust, PowerShell, and ten
more targets, several with alternative library variants).

Typical workflow::

    curlconv convert "curl -d 'a=1' https://example.com" --to python
    curlconv convert -f request.sh --to go --variant Resty

Library use::

    from curlconv.parser import parse_command
    from curlconv.generators import get_generators

    result = parse_command("curl https://example.com")
    code = get_generators("python")["Requests"](result.request)

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    parser: Tokenizer and option interpreter.
    generators: Per-language code generators and the lookup registry.
    config: XDG-aware configuration and target resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
