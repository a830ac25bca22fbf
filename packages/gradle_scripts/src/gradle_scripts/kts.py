from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "$": "\\$",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
}
_UNESCAPES: dict[str, str] = {v[1]: k for k, v in _ESCAPES.items()}
_ESCAPE_SEQ_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def kts_string(value: str) -> str:
    """Render `value` as a double-quoted Kotlin string literal with no live templates."""
    out: list[str] = []
    for ch in value:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif ord(ch) < 0x20:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _unescape_one(m: re.Match[str]) -> str:
    seq = m.group(1)
    if seq.startswith("u") and len(seq) == 5:
        return chr(int(seq[1:], 16))
    try:
        return _UNESCAPES[seq]
    except KeyError:
        raise ValueError(f"Unsupported escape sequence in Kotlin string: \\{seq}") from None


def parse_kts_string(literal: str) -> str:
    """Inverse of `kts_string`."""
    if len(literal) < 2 or not (literal.startswith('"') and literal.endswith('"')):
        raise ValueError(f"Not a Kotlin string literal: {literal!r}")
    return _ESCAPE_SEQ_RE.sub(_unescape_one, literal[1:-1])


class KtsWriter:
    """
    Line-oriented builder for Gradle Kotlin-DSL scripts.

    Interpolated values go through `call()` / `kts_string()` so manifest content can never
    close a string literal or start a `${...}` template.
    """

    def __init__(self, *, indent: str = "    ") -> None:
        self._indent = indent
        self._depth = 0
        self._lines: list[str] = []

    def line(self, text: str = "") -> None:
        self._lines.append(f"{self._indent * self._depth}{text}" if text else "")

    def raw(self, block: str) -> None:
        """Append pre-rendered lines verbatim (each already indented by the caller)."""
        self._lines.extend(block.splitlines())

    def call(self, name: str, *args: str) -> None:
        self.line(f"{name}({', '.join(kts_string(a) for a in args)})")

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        self.line(f"{header} {{")
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        self.line("}")

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"
