"""Symbolic form of a partial differential equation in the continuous domain."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum


class Variable(Enum):
    """An independent variable of the solution function."""

    X = "x"
    Y = "y"

    @classmethod
    def from_char(cls, c: str) -> Variable | None:
        """Return the variable named by ``c``, or ``None`` if there is none."""
        try:
            return cls(c)
        except ValueError:
            return None


class Expression:
    """Base class of all terms of a differential equation."""

    def list_required_derivatives(self) -> list[tuple[Variable, int]]:
        """List every (variable, order) derivative the expression uses, in order."""
        match self:
            case Derivative(variable, order):
                return [(variable, order)]
            case Sum(items) | Prod(items):
                return [d for item in items for d in item.list_required_derivatives()]
            case CrossDerivative():
                raise ValueError("cross derivatives cannot be discretised")
            case Negate(inner) | Reciprocal(inner):
                return inner.list_required_derivatives()
            case _:
                return []

    def substitute(self, func: Callable[[Expression], Expression | None]) -> Expression:
        """Replace every sub-expression for which ``func`` returns a new expression."""
        replacement = func(self)
        if replacement is not None:
            return replacement
        return self.replace_children(lambda child: child.substitute(func))

    def replace_children(self, func: Callable[[Expression], Expression]) -> Expression:
        """Return a copy with ``func`` applied to each direct child."""
        match self:
            case Prod(items):
                return Prod(tuple(map(func, items)))
            case Sum(items):
                return Sum(tuple(map(func, items)))
            case Negate(inner):
                return Negate(func(inner))
            case Reciprocal(inner):
                return Reciprocal(func(inner))
            case _:
                return self


def _as_tuple(items: Iterable) -> tuple:
    return tuple(items)


@dataclass(frozen=True)
class Prod(Expression):
    items: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _as_tuple(self.items))


@dataclass(frozen=True)
class Sum(Expression):
    items: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _as_tuple(self.items))


@dataclass(frozen=True)
class Constant(Expression):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class Derivative(Expression):
    variable: Variable
    order: int


@dataclass(frozen=True)
class SolutionVal(Expression):
    """The value of the function being solved for."""


@dataclass(frozen=True)
class SymbolicConstant(Expression):
    name: str


@dataclass(frozen=True)
class CrossDerivative(Expression):
    variables: tuple[Variable, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", _as_tuple(self.variables))


@dataclass(frozen=True)
class Negate(Expression):
    inner: Expression


@dataclass(frozen=True)
class Reciprocal(Expression):
    inner: Expression