"""Finite difference coefficients from Taylor tables."""

from __future__ import annotations

from collections.abc import Iterable
from math import factorial

from discreet.expression import Variable
from discreet.matrix import SquareMat
from discreet.mesh_expr import AtOffset, MeshConstant, MeshExpr, MeshProd, MeshSum


class TaylorTable:
    """Inverted Taylor table for the stencil points lying along one variable."""

    def __init__(self, stencil: Iterable[tuple[int, int]], variable: Variable) -> None:
        if variable is Variable.X:
            offsets = [x for x, y in stencil if y == 0]
        else:
            offsets = [y for x, y in stencil if x == 0]

        size = len(offsets)
        cols = [[offset**j / factorial(j) for j in range(size)] for offset in offsets]

        self.variable = variable
        self.stencil = offsets
        # Column k holds the coefficients of the k-th derivative.
        self.cols = SquareMat(cols).invert().get_cols()

    def get_scheme(self, derivative_order: int) -> MeshExpr | None:
        """Return the difference scheme for the given order, or ``None`` if too high."""
        if not 0 <= derivative_order < len(self.cols):
            return None

        terms = []
        for offset, coeff in zip(self.stencil, self.cols[derivative_order]):
            if coeff == 0.0:
                continue
            at = AtOffset(offset, 0) if self.variable is Variable.X else AtOffset(0, offset)
            terms.append(MeshProd([MeshConstant(coeff), at]))
        return MeshSum(terms)