"""
Name pattern handling.

Every listing and bulk delete matches names against ``prefix + % + postfix``
using SQL LIKE semantics. Unless escaping is requested, ``%`` and ``_``
inside prefix/postfix act as wildcards too.
"""

from __future__ import annotations

import re

ESCAPE_CHAR = "\\"

_LIKE_SPECIALS = (ESCAPE_CHAR, "%", "_")


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so they match literally."""
    for char in _LIKE_SPECIALS:
        text = text.replace(char, ESCAPE_CHAR + char)
    return text


def build_like_pattern(prefix: str, postfix: str, escape: bool = False) -> str:
    """Build the LIKE pattern for a prefix/postfix pair."""
    if escape:
        return f"{escape_like(prefix)}%{escape_like(postfix)}"
    return f"{prefix}%{postfix}"


def like_to_regex(pattern: str, escape: bool = False) -> re.Pattern[str]:
    """Compile a LIKE pattern into an equivalent regular expression.

    Matches SQLite's default LIKE: case-insensitive for ASCII letters only.
    """
    parts: list[str] = []
    chars = iter(pattern)
    for char in chars:
        if escape and char == ESCAPE_CHAR:
            literal = next(chars, ESCAPE_CHAR)
            parts.append(_literal(literal))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(_literal(char))
    return re.compile("".join(parts), re.DOTALL)


def _literal(char: str) -> str:
    if char.isascii() and char.isalpha():
        return f"[{char.lower()}{char.upper()}]"
    return re.escape(char)


def matches(name: str, prefix: str, postfix: str, escape: bool = False) -> bool:
    """Check a single name against a prefix/postfix pair."""
    regex = like_to_regex(build_like_pattern(prefix, postfix, escape), escape)
    return regex.fullmatch(name) is not None
