"""Structured two-dimensional meshes for finite difference schemes."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from os import PathLike
from pathlib import Path


@dataclass(frozen=True)
class PhysicalCoordinate:
    """A point of the physical domain."""

    x: float
    y: float


class Boundary(Enum):
    """A side of the computational domain.

    Bottom is the row where the second index is zero and top the row where it is
    highest; left and right are the columns where the first index is lowest and
    highest.
    """

    TOP = auto()
    BOTTOM = auto()
    LEFT = auto()
    RIGHT = auto()


@dataclass(frozen=True)
class SimpleGrid:
    """A uniform grid with constant spacings."""

    dx: float
    dy: float


@dataclass(frozen=True)
class ComplexPhysDomain:
    """Per-point transformation factors of a curvilinear domain."""

    factors: tuple[tuple[float, float, float, float], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "factors", tuple(tuple(f) for f in self.factors))


MeshScaling = SimpleGrid | ComplexPhysDomain


class FiniteDiffMesh:
    """A grid of solution values over the computational domain.

    Values are stored row by row: index ``(i, j)`` is column ``i`` of row ``j``.
    """

    def __init__(
        self,
        width: int,
        points: Sequence[PhysicalCoordinate],
        scaling: MeshScaling,
    ) -> None:
        if width < 1:
            raise ValueError("mesh width must be positive")
        if len(points) % width:
            raise ValueError("number of points must be a multiple of the width")
        self.width = width
        self.scaling = scaling
        self._points = tuple(points)
        self._values = [0.0] * len(self._points)

    @classmethod
    def from_num_points(
        cls,
        xmin: float,
        xmax: float,
        ymin: float,
        ymax: float,
        numx: int,
        numy: int,
    ) -> FiniteDiffMesh:
        """Build a uniform grid of ``numx`` by ``numy`` points spanning the box."""
        if numx < 2 or numy < 2:
            raise ValueError("a mesh needs at least two points in each direction")
        dx = (xmax - xmin) / (numx - 1)
        dy = (ymax - ymin) / (numy - 1)
        points = [
            PhysicalCoordinate(xmin + i * dx, ymin + j * dy)
            for j in range(numy)
            for i in range(numx)
        ]
        return cls(numx, points, SimpleGrid(dx, dy))

    @property
    def height(self) -> int:
        return len(self._values) // self.width

    @property
    def points(self) -> tuple[PhysicalCoordinate, ...]:
        return self._points

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    def _index(self, i: int, j: int) -> int:
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise IndexError(f"point ({i}, {j}) is outside the mesh")
        return i + j * self.width

    def fill_dirichlet_bc_vals(self, bound: Boundary, func: Callable[[float], float]) -> None:
        """Set the values on a boundary from a function of the coordinate along it."""
        last_row = self.height - 1
        last_col = self.width - 1
        match bound:
            case Boundary.BOTTOM:
                cells = [(i, 0) for i in range(self.width)]
            case Boundary.TOP:
                cells = [(i, last_row) for i in range(self.width)]
            case Boundary.LEFT:
                cells = [(0, j) for j in range(self.height)]
            case Boundary.RIGHT:
                cells = [(last_col, j) for j in range(self.height)]
            case _:
                raise ValueError(f"unknown boundary {bound!r}")

        along_x = bound in (Boundary.BOTTOM, Boundary.TOP)
        for i, j in cells:
            point = self._points[self._index(i, j)]
            self.set_at(i, j, func(point.x if along_x else point.y))

    def get_at(self, i: int, j: int) -> float:
        return self._values[self._index(i, j)]

    def set_at(self, i: int, j: int, value: float) -> None:
        self._values[self._index(i, j)] = float(value)

    def index_iter(self) -> Iterator[tuple[int, int]]:
        """Yield every ``(i, j)`` of the mesh, row by row."""
        for j in range(self.height):
            for i in range(self.width):
                yield i, j

    def save_coords(self, path: str | PathLike[str]) -> None:
        """Write one ``x y value`` line per point."""
        lines = (f"{p.x} {p.y} {v}\n" for p, v in zip(self._points, self._values))
        Path(path).write_text("".join(lines))

    def save_values(self, path: str | PathLike[str]) -> None:
        """Write the values as consecutive big-endian 64-bit floats."""
        Path(path).write_bytes(struct.pack(f">{len(self._values)}d", *self._values))