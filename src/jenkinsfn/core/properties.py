"""Java ``.properties`` text codec.

The host runtime reads the step registry with ``java.util.Properties``, so the
registry is written in exactly that format: comment lines, a date line, then
escaped ``key=value`` pairs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

_SPECIAL = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}
_UNESCAPE = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _escape(text: str, *, is_key: bool, escape_unicode: bool = False) -> str:
    out = []
    for i, ch in enumerate(text):
        if ch == " ":
            out.append("\\ " if (is_key or i == 0) else " ")
        elif ch in _SPECIAL:
            out.append(_SPECIAL[ch])
        elif ch in "\\=:#!":
            out.append("\\" + ch)
        elif escape_unicode and (ord(ch) < 0x20 or ord(ch) > 0x7E):
            out.append(_utf16_escape(ch))
        else:
            out.append(ch)
    return "".join(out)


def _utf16_escape(ch: str) -> str:
    hexed = ch.encode("utf-16-be").hex().upper()
    return "".join("\\u" + hexed[j:j + 4] for j in range(0, len(hexed), 4))


def _comment(text: str) -> str:
    # Continuation lines that already start with '#' or '!' stay as they are.
    text = "".join(_utf16_escape(ch) if ord(ch) > 0xFF else ch for ch in text)
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    out = ["#" + lines[0]]
    out.extend(line if line[:1] in ("#", "!") else "#" + line for line in lines[1:])
    return "\n".join(out)


def format_timestamp(ts: datetime) -> str:
    """Render like ``java.util.Date.toString()``: ``Sat Oct 17 09:30:00 UTC 2026``."""
    return ts.strftime("%a %b %d %H:%M:%S ") + (ts.tzname() or "UTC") + ts.strftime(" %Y")


def store_properties(
    entries: Mapping[str, str],
    *,
    comment: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    with_timestamp: bool = True,
    escape_unicode: bool = False,
) -> str:
    """Serialize ``entries`` the way ``Properties.store`` does.

    Keys are written in sorted order so the output only depends on the content.
    Non-ASCII text is written as is, like ``store(Writer)``. Pass
    ``escape_unicode=True`` for the ``store(OutputStream)`` form.
    """
    lines = []
    if comment:
        lines.append(_comment(comment))
    if with_timestamp:
        lines.append("#" + format_timestamp(timestamp or datetime.now(timezone.utc)))
    for key in sorted(entries):
        k = _escape(key, is_key=True, escape_unicode=escape_unicode)
        v = _escape(str(entries[key]), is_key=False, escape_unicode=escape_unicode)
        lines.append(f"{k}={v}")
    return "\n".join(lines) + "\n"


def _logical_lines(text: str):
    buf = ""
    continuing = False
    for raw in text.splitlines():
        line = raw.lstrip(" \t\f")
        if not continuing and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf += line[:-1]
            continuing = True
            continue
        yield buf + line
        buf = ""
        continuing = False
    if continuing and buf:
        yield buf


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and i + 6 <= len(text):
            out.append(chr(int(text[i + 2:i + 6], 16)))
            i += 6
            continue
        out.append(_UNESCAPE.get(nxt, nxt))
        i += 2
    joined = "".join(out)
    # Recombine surrogate pairs produced by \\uXXXX escapes.
    return joined.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def load_properties(text: str) -> Dict[str, str]:
    """Parse ``.properties`` text. Later duplicates win, like ``Properties.load``."""
    result: Dict[str, str] = {}
    for line in _logical_lines(text):
        i = 0
        key_end = len(line)
        value_start = len(line)
        while i < len(line):
            ch = line[i]
            if ch == "\\":
                i += 2
                continue
            if ch in "=:":
                key_end = i
                value_start = i + 1
                break
            if ch in " \t\f":
                key_end = i
                j = i
                while j < len(line) and line[j] in " \t\f":
                    j += 1
                if j < len(line) and line[j] in "=:":
                    j += 1
                value_start = j
                break
            i += 1
        key = line[:key_end]
        value = line[value_start:].lstrip(" \t\f")
        result[_unescape(key)] = _unescape(value)
    return result


__all__ = ["store_properties", "load_properties", "format_timestamp"]
