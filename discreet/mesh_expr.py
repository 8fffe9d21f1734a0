"""Expressions in terms of values on a discrete mesh."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
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


class DiscretisationError(ValueError):
    """Raised when an equation cannot be written in terms of mesh values."""


class MeshExpr:
    """Base class of expressions over mesh values."""

    def differentiate(self, variable: MeshExpr) -> MeshExpr:
        """Differentiate with respect to ``variable``, treated as an unknown."""
        if self == variable:
            return MeshConstant(1.0)
        match self:
            case MeshSum(items):
                return MeshSum(item.differentiate(variable) for item in items)
            case MeshProd(items):
                if not items:
                    return MeshConstant(0.0)
                lhs = items[0]
                rhs = MeshProd(items[1:]).simplify()
                return lhs._product_rule(rhs, variable)
            case MeshNegate(inner):
                return MeshNegate(inner.differentiate(variable))
            case MeshReciprocal(inner):
                return MeshNegate(
                    MeshProd(
                        [
                            inner.differentiate(variable),
                            MeshReciprocal(inner),
                            MeshReciprocal(inner),
                        ]
                    )
                )
            case _:
                return MeshConstant(0.0)

    def _product_rule(self, rhs: MeshExpr, variable: MeshExpr) -> MeshExpr:
        return MeshSum(
            [
                MeshProd([self, rhs.differentiate(variable)]),
                MeshProd([self.differentiate(variable), rhs]),
            ]
        )

    def find_root_linear(self, variable: MeshExpr) -> MeshExpr:
        """Solve ``self == 0`` for ``variable``, assuming it appears linearly."""
        zero = MeshConstant(0.0)
        derivative = self.differentiate(variable).substitute(variable, zero)
        numerator = self.substitute(variable, zero)
        return MeshNegate(MeshProd([numerator, MeshReciprocal(derivative)])).simplify()

    def substitute(self, target: MeshExpr, replacement: MeshExpr) -> MeshExpr:
        """Replace every occurrence of ``target`` by ``replacement``."""
        if self == target:
            return replacement
        match self:
            case MeshNegate(inner):
                return MeshNegate(inner.substitute(target, replacement))
            case MeshReciprocal(inner):
                return MeshReciprocal(inner.substitute(target, replacement))
            case MeshSum(items):
                return MeshSum(i.substitute(target, replacement) for i in items)
            case MeshProd(items):
                return MeshProd(i.substitute(target, replacement) for i in items)
            case _:
                return self

    def simplify(self) -> MeshExpr:
        """Remove neutral elements, flatten nested sums and fold zero products."""
        zero, one = MeshConstant(0.0), MeshConstant(1.0)
        match self:
            case MeshSum(items):
                flat: list[MeshExpr] = []
                for item in (i.simplify() for i in items):
                    if item == zero:
                        continue
                    if isinstance(item, MeshSum):
                        flat.extend(item.items)
                    else:
                        flat.append(item)
                return flat[0] if len(flat) == 1 else MeshSum(flat)
            case MeshProd(items):
                factors = [f for f in (i.simplify() for i in items) if f != one]
                if len(factors) == 1:
                    return factors[0]
                if not factors:
                    return one
                if zero in factors:
                    return zero
                return MeshProd(factors)
            case MeshNegate(inner):
                return zero if inner == zero else MeshNegate(inner.simplify())
            case MeshReciprocal(inner):
                return one if inner == one else MeshReciprocal(inner.simplify())
            case _:
                return self

    def render(self) -> str:
        """Render the expression as source text over ``mesh``, ``consts`` and ``fns``."""
        match self:
            case AtOffset(di, dj):
                return f"mesh.get_at(i + ({di}), j + ({dj}))"
            case MeshConstant(value):
                return repr(value)
            case FunctionVal(name):
                return f"fns.{name}(i, j)"
            case SymbolicConst(name):
                return f"consts.{name}"
            case MeshNegate(inner):
                return f"(-{inner.render()})"
            case MeshReciprocal(inner):
                return f"(1.0 / {inner.render()})"
            case MeshSum(items):
                return f"({' + '.join(i.render() for i in items)})" if items else "0.0"
            case MeshProd(items):
                return f"({' * '.join(i.render() for i in items)})" if items else "1.0"
        raise TypeError(f"cannot render {self!r}")

    def evaluate(
        self,
        values: Callable[[int, int], float],
        i: int,
        j: int,
        consts: Mapping[str, float],
        functions: Mapping[str, Callable[[int, int], float]],
    ) -> float:
        """Evaluate at mesh point (i, j); ``values`` gives the solution at a point."""
        match self:
            case AtOffset(di, dj):
                return values(i + di, j + dj)
            case MeshConstant(value):
                return value
            case SymbolicConst(name):
                return consts[name]
            case FunctionVal(name):
                return functions[name](i, j)
            case MeshNegate(inner):
                return -inner.evaluate(values, i, j, consts, functions)
            case MeshReciprocal(inner):
                return 1.0 / inner.evaluate(values, i, j, consts, functions)
            case MeshSum(items):
                return sum(e.evaluate(values, i, j, consts, functions) for e in items)
            case MeshProd(items):
                return math.prod(e.evaluate(values, i, j, consts, functions) for e in items)
        raise TypeError(f"cannot evaluate {self!r}")


def _as_tuple(items: Iterable) -> tuple:
    return tuple(items)


@dataclass(frozen=True)
class AtOffset(MeshExpr):
    di: int
    dj: int


@dataclass(frozen=True)
class MeshProd(MeshExpr):
    items: tuple[MeshExpr, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _as_tuple(self.items))


@dataclass(frozen=True)
class MeshSum(MeshExpr):
    items: tuple[MeshExpr, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _as_tuple(self.items))


@dataclass(frozen=True)
class MeshConstant(MeshExpr):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class SymbolicConst(MeshExpr):
    name: str


@dataclass(frozen=True)
class FunctionVal(MeshExpr):
    name: str


@dataclass(frozen=True)
class MeshNegate(MeshExpr):
    inner: MeshExpr


@dataclass(frozen=True)
class MeshReciprocal(MeshExpr):
    inner: MeshExpr


DerivativeApproximations = Mapping[tuple[Variable, int], MeshExpr]


def from_diff_eq(
    eq: Expression,
    fns: Iterable[str],
    derivatives: DerivativeApproximations,
) -> MeshExpr:
    """Rewrite a differential equation using the given derivative approximations."""
    fns = set(fns)

    def convert(e: Expression) -> MeshExpr:
        match e:
            case Constant(value):
                return MeshConstant(value)
            case Sum(items):
                return MeshSum(convert(t) for t in items)
            case Prod(items):
                return MeshProd(convert(t) for t in items)
            case SymbolicConstant(name):
                return FunctionVal(name) if name in fns else SymbolicConst(name)
            case Derivative(variable, order):
                try:
                    return derivatives[(variable, order)]
                except KeyError:
                    raise DiscretisationError("Unknown derivative.") from None
            case CrossDerivative():
                raise DiscretisationError("Cross derivatives cannot be discretised.")
            case SolutionVal():
                return AtOffset(0, 0)
            case Negate(inner):
                return MeshNegate(convert(inner))
            case Reciprocal(inner):
                return MeshReciprocal(convert(inner))
        raise DiscretisationError(f"Unsupported expression {e!r}.")

    return convert(eq)