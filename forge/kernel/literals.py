"""
NexusForge Kernel — Python literal emission

The generated bot is Python source, so every structured value copied into
it (ticket panels, banned words, role lists, user-entered strings) goes
through to_python_literal rather than string concatenation. Output is
deterministic: dict keys keep insertion order and strings always use
single quotes.
"""

from __future__ import annotations

import keyword
import math
import re
from datetime import datetime
from typing import Any

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_IDENT_BAD_CHARS = re.compile(r"[^A-Za-z0-9_]")


def python_string(value: str) -> str:
    """Quote value as a single-quoted Python string literal."""
    out = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ch == "\x7f":
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return "'" + "".join(out) + "'"


def to_python_literal(value: Any) -> str:
    """
    Emit value as Python literal source.

      None           → None
      True / False   → True / False
      int / float    → 42 / 4.99 (non-finite floats as float('inf'))
      str            → 'text' with escapes
      list / tuple   → [a, b]
      dict           → {'k': v}
      datetime       → ISO 8601 string literal
    """
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value):
            return repr(value)
        return f"float('{value}')"
    if isinstance(value, str):
        return python_string(value)
    if isinstance(value, datetime):
        return python_string(value.isoformat())
    if isinstance(value, list | tuple):
        return "[" + ", ".join(to_python_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        pairs = (f"{to_python_literal(k)}: {to_python_literal(v)}" for k, v in value.items())
        return "{" + ", ".join(pairs) + "}"
    raise TypeError(f"Cannot emit {type(value).__name__} as a Python literal")


def sanitize_identifier(name: str, fallback: str = "command") -> str:
    """
    Turn arbitrary text into a valid Python identifier.

    Examples:
      "hello-world" → "hello_world"
      "8ball"       → "_8ball"
      "class"       → "class_"
      ""            → "command"
    """
    ident = _IDENT_BAD_CHARS.sub("_", name.strip())
    if not ident:
        return fallback
    if ident[0].isdigit():
        ident = f"_{ident}"
    if keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident
