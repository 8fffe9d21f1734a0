"""Small dense square matrices stored column by column."""

from __future__ import annotations

from collections.abc import Sequence


class SquareMat:
    """A square matrix of floats, stored in column-major order."""

    def __init__(self, cols: Sequence[Sequence[float]]) -> None:
        self.size = len(cols)
        self._vals = [float(v) for col in cols for v in col]
        if len(self._vals) != self.size * self.size:
            raise ValueError("matrix columns must form a square")

    @classmethod
    def identity(cls, size: int) -> SquareMat:
        """Return the identity matrix of the given size."""
        return cls([[1.0 if r == c else 0.0 for r in range(size)] for c in range(size)])

    def copy(self) -> SquareMat:
        return SquareMat(self.get_cols())

    def _index(self, row: int, col: int) -> int:
        return row + col * self.size

    def invert(self) -> SquareMat:
        """Return the inverse, computed by Gauss-Jordan elimination without pivoting."""
        work = self.copy()
        inverse = SquareMat.identity(self.size)

        for i in range(self.size):
            inverse.row_scale(i, 1.0 / work.get_at(i, i))
            work.row_scale(i, 1.0 / work.get_at(i, i))

            for j in range(self.size):
                if i == j:
                    continue
                factor = work.get_at(j, i)
                inverse.row_sub(j, i, factor)
                work.row_sub(j, i, factor)

        return inverse

    def row_scale(self, target_row: int, factor: float) -> None:
        """Multiply a row by ``factor`` in place."""
        for col in range(self.size):
            self._vals[self._index(target_row, col)] *= factor

    def row_sub(self, target_row: int, source_row: int, factor: float) -> None:
        """Subtract ``factor`` times the source row from the target row in place."""
        for col in range(self.size):
            source = self._vals[self._index(source_row, col)]
            self._vals[self._index(target_row, col)] -= factor * source

    def get_at(self, row: int, col: int) -> float:
        return self._vals[self._index(row, col)]

    def get_cols(self) -> list[list[float]]:
        """Return the columns as lists."""
        n = self.size
        return [self._vals[c * n:(c + 1) * n] for c in range(n)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SquareMat):
            return NotImplemented
        return self.size == other.size and self._vals == other._vals

    def __repr__(self) -> str:
        return f"SquareMat({self.get_cols()!r})"