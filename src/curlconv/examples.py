"""Built-in sample curl commands.

:data:`EXAMPLE_CURL` is what ``curlconv convert`` demonstrates with, and
:data:`QUICK_EXAMPLES` covers the common HTTP methods and body kinds.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Example(BaseModel):
    """A named sample command."""

    model_config = ConfigDict(frozen=True)

    name: str
    method: str
    command: str


EXAMPLE_CURL = """\
curl -X POST https://httpbin.org/post \\
  -H "Content-Type: application/json" \\
  -H "Authorization: Bearer MY_TOKEN" \\
  -d '{"hello":"world"}'"""

_SAMPLE_URL = "https://requestbin.net/examples/request.html"

QUICK_EXAMPLES: tuple[Example, ...] = (
    Example(
        name="GET Request",
        method="GET",
        command=f"curl {_SAMPLE_URL}",
    ),
    Example(
        name="POST JSON",
        method="POST",
        command=(
            f"curl -X POST {_SAMPLE_URL} \\\n"
            '  -H "Content-Type: application/json" \\\n'
            """  -d '{"name":"John","email":"john@example.com"}'"""
        ),
    ),
    Example(
        name="PUT Request",
        method="PUT",
        command=(
            f"curl -X PUT {_SAMPLE_URL} \\\n"
            '  -H "Content-Type: application/json" \\\n'
            '  -H "Authorization: Bearer YOUR_TOKEN" \\\n'
            """  -d '{"status":"updated"}'"""
        ),
    ),
    Example(
        name="DELETE Request",
        method="DELETE",
        command=(
            f"curl -X DELETE {_SAMPLE_URL} \\\n"
            '  -H "Authorization: Bearer YOUR_TOKEN"'
        ),
    ),
    Example(
        name="Form Data",
        method="POST",
        command=(
            f"curl -X POST {_SAMPLE_URL} \\\n"
            '  -F "name=John" \\\n'
            '  -F "file=@document.pdf"'
        ),
    ),
    Example(
        name="Custom Headers",
        method="GET",
        command=(
            f"curl {_SAMPLE_URL} \\\n"
            '  -H "User-Agent: MyApp/1.0" \\\n'
            '  -H "Accept: application/json" \\\n'
            '  -H "X-API-Key: YOUR_API_KEY"'
        ),
    ),
)


def get_example(name: str) -> Optional[Example]:
    """Look up a quick example by name, ignoring case and surrounding space."""
    wanted = name.strip().lower()
    for example in QUICK_EXAMPLES:
        if example.name.lower() == wanted:
            return example
    return None
