"""Parsing of ``name: value`` argument lists describing a scheme."""

from __future__ import annotations

import re
from dataclasses import dataclass

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENT_RE = re.compile(_IDENT)
_PATH_RE = re.compile(rf"(?:::\s*)?{_IDENT}(?:\s*::\s*{_IDENT})+")
_ARG_RE = re.compile(rf"\s*({_IDENT})\s*(?::(?!:)(.*))?", re.DOTALL)
_INT_RE = re.compile(
    r"(-)?\s*(0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|[0-9][0-9_]*)"
    r"(?:[iu](?:8|16|32|64|128|size))?"
)
_CLOSING = {"(": ")", "[": "]", "{": "}"}

_IDENT_LIST_MESSAGE = "Expected `constants` and `functions` to be an array of identifiers."


class ArgParseError(ValueError):
    """Raised when an argument list or one of its values is malformed."""


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested inside brackets."""
    parts: list[str] = []
    current: list[str] = []
    stack: list[str] = []
    for ch in text:
        if ch in _CLOSING:
            stack.append(_CLOSING[ch])
        elif ch in ")]}":
            if not stack or stack.pop() != ch:
                raise ArgParseError(f"Unbalanced {ch!r}.")
        elif ch == "," and not stack:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    if stack:
        raise ArgParseError(f"Missing {stack[-1]!r}.")
    parts.append("".join(current))
    return parts


def _enclosed(text: str, opening: str) -> bool:
    """Whether ``text`` is one bracketed group opened by ``opening``."""
    if not text.startswith(opening) or not text.endswith(_CLOSING[opening]):
        return False
    depth = 0
    for pos, ch in enumerate(text):
        if ch in _CLOSING:
            depth += 1
        elif ch in ")]}":
            depth -= 1
            if depth == 0:
                return pos == len(text) - 1
    return False


def _elements(text: str, opening: str) -> list[str]:
    """Split the body of a bracketed group into its comma-separated elements."""
    parts = _split_top_level(text[1:-1])
    if not parts[-1].strip():
        parts.pop()
    if any(not p.strip() for p in parts):
        raise ArgParseError(f"Empty element in {opening}...{_CLOSING[opening]}.")
    return [p.strip() for p in parts]


@dataclass(frozen=True)
class Arg:
    """One named argument and the source text of its value."""

    name: str
    value: str


@dataclass(frozen=True)
class ArgList:
    """A comma-separated list of named arguments."""

    items: tuple[Arg, ...]

    @classmethod
    def parse(cls, text: str) -> ArgList:
        """Parse ``name: value`` pairs; a bare ``name,`` stands for ``name: true``."""
        *body, tail = _split_top_level(text)
        items = [_parse_arg(segment, followed_by_comma=True) for segment in body]
        if tail.strip():
            items.append(_parse_arg(tail, followed_by_comma=False))
        return cls(tuple(items))

    def find_arg(self, name: str) -> str | None:
        """Return the value of the first argument called ``name``."""
        return next((item.value for item in self.items if item.name == name), None)


def _parse_arg(segment: str, followed_by_comma: bool) -> Arg:
    match = _ARG_RE.fullmatch(segment)
    if match is None:
        raise ArgParseError(f"Expected `name: value`, found {segment.strip()!r}.")
    name, value = match.group(1), match.group(2)
    if value is None:
        if not followed_by_comma:
            raise ArgParseError(f"Expected `:` or `,` after {name!r}.")
        value = "true"
    value = value.strip()
    if not value:
        raise ArgParseError(f"Missing value for {name!r}.")
    return Arg(name, value)


def parse_stencil(text: str) -> list[tuple[int, int]]:
    """Parse an array of ``(x, y)`` integer offsets."""
    text = text.strip()
    if not _enclosed(text, "["):
        raise ArgParseError("Expected stencil to be an array of offsets.")
    stencil = []
    for item in _elements(text, "["):
        if not _enclosed(item, "(") or len(_split_top_level(item[1:-1])) < 2:
            raise ArgParseError("Expected tuple.")
        parts = _elements(item, "(")
        if len(parts) != 2:
            raise ArgParseError(f"Expected a pair of offsets, found {item!r}.")
        stencil.append((parse_int_lit(parts[0]), parse_int_lit(parts[1])))
    return stencil


def parse_int_lit(text: str) -> int:
    """Parse an integer literal, optionally negated."""
    stripped = text.strip()
    match = _INT_RE.fullmatch(stripped)
    if match is None:
        raise ArgParseError(f"Expected integer, found {stripped!r}.")
    sign, digits = match.group(1), match.group(2).replace("_", "")
    try:
        value = int(digits, 0) if digits[:2].lower() in ("0x", "0o", "0b") else int(digits, 10)
    except ValueError:
        raise ArgParseError(f"Expected integer, found {stripped!r}.") from None
    return -value if sign else value


def ident_list(text: str) -> list[str]:
    """Parse an array of plain identifiers."""
    text = text.strip()
    if not _enclosed(text, "["):
        raise ArgParseError(_IDENT_LIST_MESSAGE)
    return [get_ident(item) for item in _elements(text, "[")]


def get_ident(text: str) -> str:
    """Parse a single identifier without a path."""
    stripped = text.strip()
    if _IDENT_RE.fullmatch(stripped):
        return stripped
    if _PATH_RE.fullmatch(stripped):
        raise ArgParseError(
            "Expected `constants` and `functions` to be an array of identifiers "
            "without a path."
        )
    raise ArgParseError(_IDENT_LIST_MESSAGE)