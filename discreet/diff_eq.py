"""Parsing of partial differential equations written as ``lhs = 0``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from discreet.expression import (
    Constant,
    CrossDerivative,
    Derivative,
    Expression,
    Negate,
    Prod,
    Reciprocal,
    SolutionVal,
    Sum,
    SymbolicConstant,
    Variable,
)


class PdeParseError(ValueError):
    """Raised when an equation cannot be parsed."""


_TOKEN_RE = re.compile(
    r"""
    (?P<num>0[xXoObB][0-9a-fA-F_]+
        |\d[\d_]*(?:\.\d[\d_]*|\.(?![.\w]))?(?:[eE][+-]?\d[\d_]*)?(?:[A-Za-z_]\w*)?)
    |(?P<str>"(?:[^"\\]|\\.)*")
    |(?P<ident>[A-Za-z_]\w*)
    |(?P<op>::|<<=|>>=|\+=|-=|\*=|/=|%=|\^=|&=|\|=|&&|\|\||==|!=|<=|>=|<<|>>
        |[-+*/%^&|!<>=()\[\],.;:])
    """,
    re.VERBOSE,
)
_SPACE_RE = re.compile(r"\s*")
_DECIMAL_RE = re.compile(r"(\d[\d_]*)(\.[\d_]*)?([eE][+-]?[\d_]+)?(\w*)")

_INT_SUFFIXES = {f"{s}{n}" for s in "iu" for n in ("8", "16", "32", "64", "128", "size")}
_FLOAT_SUFFIXES = {"f32", "f64"}

_BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "<<": 7, ">>": 7,
    "+": 8, "-": 8,
    "*": 9, "/": 9, "%": 9,
}
_ASSIGN_OPS = {"=", "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=", "<<=", ">>="}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str


@dataclass(frozen=True)
class _Assign:
    left: object
    right: object


@dataclass(frozen=True)
class _Binary:
    op: str
    left: object
    right: object


@dataclass(frozen=True)
class _Unary:
    op: str
    operand: object


@dataclass(frozen=True)
class _Call:
    func: object
    args: tuple


@dataclass(frozen=True)
class _Lit:
    kind: str
    text: str


@dataclass(frozen=True)
class _Paren:
    inner: object


@dataclass(frozen=True)
class _Path:
    segments: tuple[str, ...]


@dataclass(frozen=True)
class _Other:
    description: str


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    pos = 0
    while True:
        pos = _SPACE_RE.match(text, pos).end()
        if pos == len(text):
            return tokens
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise PdeParseError(f"Unexpected character {text[pos]!r} in equation.")
        tokens.append(_Token(match.lastgroup, match.group()))
        pos = match.end()


def _number(text: str) -> tuple[bool, float | int]:
    """Classify a numeric literal as float or integer and return its value."""
    try:
        if text[:2].lower() in ("0x", "0o", "0b"):
            return False, int(text.replace("_", ""), 0)
        match = _DECIMAL_RE.fullmatch(text)
        if match is None:
            raise ValueError(text)
        mantissa, fraction, exponent, suffix = match.groups()
        is_float = bool(fraction or exponent) or suffix in _FLOAT_SUFFIXES
        allowed = _FLOAT_SUFFIXES if is_float else _INT_SUFFIXES | _FLOAT_SUFFIXES
        if suffix and suffix not in allowed:
            raise ValueError(text)
        digits = (mantissa + (fraction or "") + (exponent or "")).replace("_", "")
        return is_float, float(digits) if is_float else int(digits)
    except ValueError:
        raise PdeParseError(f"Invalid numeric literal {text!r}.") from None


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _peek_op(self) -> str | None:
        if self.at_end():
            return None
        token = self._tokens[self._pos]
        return token.text if token.kind == "op" else None

    def _advance(self) -> _Token:
        if self.at_end():
            raise PdeParseError("Unexpected end of equation.")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._advance()
        if token.text != text:
            raise PdeParseError(f"Expected {text!r}, found {token.text!r}.")

    def expression(self) -> object:
        left = self._binary(1)
        op = self._peek_op()
        if op in _ASSIGN_OPS:
            self._advance()
            right = self.expression()
            return _Assign(left, right) if op == "=" else _Binary(op, left, right)
        return left

    def _binary(self, min_precedence: int) -> object:
        left = self._unary()
        while (op := self._peek_op()) in _BINARY_PRECEDENCE:
            precedence = _BINARY_PRECEDENCE[op]
            if precedence < min_precedence:
                break
            self._advance()
            left = _Binary(op, left, self._binary(precedence + 1))
        return left

    def _unary(self) -> object:
        op = self._peek_op()
        if op in ("-", "!", "*"):
            self._advance()
            return _Unary(op, self._unary())
        if op == "&":
            self._advance()
            self._unary()
            return _Other("reference")
        return self._postfix()

    def _postfix(self) -> object:
        node = self._primary()
        while True:
            op = self._peek_op()
            if op == "(":
                self._advance()
                node = _Call(node, tuple(self._list(")")))
            elif op == "[":
                self._advance()
                self.expression()
                self._expect("]")
                node = _Other("index")
            elif op == ".":
                self._advance()
                token = self._advance()
                if token.kind not in ("ident", "num"):
                    raise PdeParseError(f"Unexpected token {token.text!r} in equation.")
                node = _Other("field")
            else:
                return node

    def _list(self, closing: str) -> list[object]:
        items = []
        while self._peek_op() != closing:
            items.append(self.expression())
            if self._peek_op() != ",":
                break
            self._advance()
        self._expect(closing)
        return items

    def _path(self, first: str) -> _Path:
        segments = [first]
        while self._peek_op() == "::":
            self._advance()
            token = self._advance()
            if token.kind != "ident":
                raise PdeParseError(f"Unexpected token {token.text!r} in equation.")
            segments.append(token.text)
        return _Path(tuple(segments))

    def _primary(self) -> object:
        token = self._advance()
        if token.kind in ("num", "str"):
            return _Lit(token.kind, token.text)
        if token.kind == "ident":
            return self._path(token.text)
        if token.text == "::":
            ident = self._advance()
            if ident.kind != "ident":
                raise PdeParseError(f"Unexpected token {ident.text!r} in equation.")
            path = self._path(ident.text)
            return _Path(("",) + path.segments)
        if token.text == "(":
            if self._peek_op() == ")":
                self._advance()
                return _Other("unit")
            inner = self.expression()
            if self._peek_op() == ",":
                self._advance()
                self._list(")")
                return _Other("tuple")
            self._expect(")")
            return _Paren(inner)
        if token.text == "[":
            self._list("]")
            return _Other("array")
        raise PdeParseError(f"Unexpected token {token.text!r} in equation.")


def _parse(text: str) -> object:
    parser = _Parser(_tokenize(text))
    node = parser.expression()
    if not parser.at_end():
        raise PdeParseError("Unexpected trailing tokens in equation.")
    return node


def parse_pde(text: str) -> Expression:
    """Parse an equation ``lhs = 0`` and return the expression for ``lhs``."""
    node = _parse(text)
    if not isinstance(node, _Assign):
        raise PdeParseError(
            "Expected the PDE to be formatted as an equation of the form `lhs = 0`."
        )
    right = node.right
    if isinstance(right, _Lit) and right.kind == "num":
        is_float, value = _number(right.text)
        if not is_float and value == 0:
            return _convert(node.left)
    raise PdeParseError("Expected the RHS of the PDE to be an integer value of zero.")


def _convert(node: object) -> Expression:
    match node:
        case _Binary():
            return _convert_binary(node)
        case _Unary(op, operand):
            inner = _convert(operand)
            if op == "-":
                return Negate(inner)
            raise PdeParseError(f"Unexpected operator {op!r} in PDE.")
        case _Call():
            raise PdeParseError(
                "The PDE should not contain any function calls. If you need to use a "
                "function that isn't the function you're solving for, you should simply "
                "use the function's identifier."
            )
        case _Lit(kind, text):
            if kind == "num":
                is_float, value = _number(text)
                if is_float:
                    return Constant(value)
            raise PdeParseError("Only floating point literals are allowed here.")
        case _Paren(inner):
            return _convert(inner)
        case _Path(segments):
            return _convert_path(segments)
    raise PdeParseError("Unexpected type of expression in equation.")


def _terms(expr: Expression, kind: type) -> tuple[Expression, ...]:
    return expr.items if isinstance(expr, kind) else (expr,)


def _convert_binary(node: _Binary) -> Expression:
    left = _convert(node.left)
    right = _convert(node.right)
    match node.op:
        case "+":
            return Sum(_terms(left, Sum) + _terms(right, Sum))
        case "-":
            negated = tuple(Negate(t) for t in _terms(right, Sum))
            return Sum(_terms(left, Sum) + negated)
        case "*":
            return Prod(_terms(left, Prod) + _terms(right, Prod))
        case "/":
            inverted = tuple(Reciprocal(t) for t in _terms(right, Prod))
            return Prod(_terms(left, Prod) + inverted)
        case "^":
            return _power(left, right)
    raise PdeParseError(f"Unexpected operator {node.op!r} in PDE.")


def _power(base: Expression, exponent: Expression) -> Expression:
    if not (
        isinstance(exponent, Constant)
        and exponent.value >= 0
        and exponent.value.is_integer()
    ):
        raise PdeParseError("Expected a non-negative whole number as exponent.")
    count = int(exponent.value)
    if count == 0:
        return Constant(1.0)
    if count == 1:
        return base
    return Prod(_terms(base, Prod) * count)


def _convert_path(segments: tuple[str, ...]) -> Expression:
    if len(segments) != 1:
        raise PdeParseError("Expected only identifiers without a path.")
    name = segments[0]
    if name == "u":
        return SolutionVal()
    if not name.startswith("u_"):
        return SymbolicConstant(name)

    variables = [Variable.from_char(c) for c in name.split("_")[1]]
    if not variables or None in variables:
        raise PdeParseError(
            "Differentiation with respect to unknown variable. Should be x or y."
        )
    if all(v is variables[0] for v in variables):
        return Derivative(variables[0], len(variables))
    return CrossDerivative(tuple(variables))