"""Finite difference schemes built from a PDE and a stencil, and a solver running them."""

from __future__ import annotations

import argparse
import math
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import partial

from discreet.args import ArgList, ArgParseError, ident_list, parse_stencil
from discreet.diff_eq import parse_pde
from discreet.expression import Variable
from discreet.mesh import Boundary, FiniteDiffMesh, SimpleGrid
from discreet.mesh_expr import (
    AtOffset,
    DiscretisationError,
    FunctionVal,
    MeshExpr,
    MeshNegate,
    MeshProd,
    MeshReciprocal,
    MeshSum,
    SymbolicConst,
    from_diff_eq,
)
from discreet.taylor import TaylorTable

_SPACINGS = {Variable.X: "dx", Variable.Y: "dy"}
_UNKNOWN = AtOffset(0, 0)

EXAMPLE_ARGS = (
    "equation: u_y + c * u_x = 0, "
    "stencil: [(-1, 0), (0, 0), (0, -1)], "
    "constants: [c], "
    "functions: [],"
)


def _leaves(expr: MeshExpr) -> Iterator[MeshExpr]:
    match expr:
        case MeshSum(items) | MeshProd(items):
            for item in items:
                yield from _leaves(item)
        case MeshNegate(inner) | MeshReciprocal(inner):
            yield from _leaves(inner)
        case _:
            yield expr


@dataclass(frozen=True)
class Scheme:
    """A discretised equation and the update formula for its unknown point."""

    stencil: tuple[tuple[int, int], ...]
    constants: tuple[str, ...]
    functions: tuple[str, ...]
    residual: MeshExpr
    update: MeshExpr

    @property
    def residual_source(self) -> str:
        return self.residual.render()

    @property
    def update_source(self) -> str:
        return self.update.render()


def build_scheme(
    equation: str,
    stencil: Iterable[tuple[int, int]],
    constants: Iterable[str],
    functions: Iterable[str],
) -> Scheme:
    """Discretise ``equation`` on ``stencil`` and solve it for the central point."""
    stencil = tuple((int(x), int(y)) for x, y in stencil)
    constants = tuple(constants)
    functions = tuple(functions)

    reserved = set(_SPACINGS.values()) & (set(constants) | set(functions))
    if reserved:
        raise DiscretisationError(
            f"The names {sorted(reserved)} are reserved for the mesh spacings."
        )

    eqn = parse_pde(equation)
    try:
        required = eqn.list_required_derivatives()
    except ValueError as exc:
        raise DiscretisationError(str(exc)) from None

    try:
        tables = {v: TaylorTable(stencil, v) for v in Variable}
    except ZeroDivisionError:
        raise DiscretisationError(
            "The stencil gives a singular Taylor table."
        ) from None

    derivatives: dict[tuple[Variable, int], MeshExpr] = {}
    for variable, order in required:
        approximation = tables[variable].get_scheme(order)
        if approximation is None:
            raise DiscretisationError(
                "Could not construct discretisation of derivative with this stencil."
            )
        spacing = MeshReciprocal(SymbolicConst(_SPACINGS[variable]))
        derivatives[(variable, order)] = MeshProd([approximation, *([spacing] * order)])

    residual = from_diff_eq(eqn, functions, derivatives)

    known = set(constants) | set(_SPACINGS.values())
    undeclared = sorted(
        {leaf.name for leaf in _leaves(residual) if isinstance(leaf, SymbolicConst)} - known
    )
    if undeclared:
        raise DiscretisationError(f"Undeclared constants in equation: {undeclared}.")

    update = residual.find_root_linear(_UNKNOWN)
    return Scheme(stencil, constants, functions, residual, update)


def scheme_from_args(text: str) -> Scheme:
    """Build a scheme from ``equation: ..., stencil: ..., constants: ..., functions: ...``."""
    args = ArgList.parse(text)

    equation = args.find_arg("equation")
    if equation is None:
        raise ArgParseError("Missing `equation` argument.")
    stencil_text = args.find_arg("stencil")
    if stencil_text is None:
        raise ArgParseError("Missing `stencil` argument.")

    constants_text = args.find_arg("constants")
    functions_text = args.find_arg("functions")
    return build_scheme(
        equation,
        parse_stencil(stencil_text),
        ident_list(constants_text) if constants_text is not None else [],
        ident_list(functions_text) if functions_text is not None else [],
    )


class FunctionValueMesh:
    """Values of known functions at every point of a mesh."""

    def __init__(self, width: int, values: Mapping[str, Sequence[float]]) -> None:
        self.width = width
        self._values = {name: tuple(vals) for name, vals in values.items()}

    @classmethod
    def from_functions(
        cls,
        mesh: FiniteDiffMesh,
        functions: Mapping[str, Callable[[float, float], float]],
    ) -> FunctionValueMesh:
        """Evaluate each function of the physical coordinates at every mesh point."""
        values = {
            name: [float(func(p.x, p.y)) for p in mesh.points]
            for name, func in functions.items()
        }
        return cls(mesh.width, values)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._values)

    def size(self) -> int:
        return len(next(iter(self._values.values()), ()))

    def get(self, name: str, i: int, j: int) -> float:
        return self._values[name][i + j * self.width]

    def callables(self) -> dict[str, Callable[[int, int], float]]:
        return {name: partial(self.get, name) for name in self._values}


def _interior(stencil: Sequence[tuple[int, int]], mesh: FiniteDiffMesh) -> Iterator[tuple[int, int]]:
    """Points past the first row and column whose whole stencil lies in the mesh."""
    xs = [x for x, _ in stencil] or [0]
    ys = [y for _, y in stencil] or [0]
    i_lo, i_hi = max(1, -min(xs)), mesh.width - max(0, max(xs))
    j_lo, j_hi = max(1, -min(ys)), mesh.height - max(0, max(ys))
    return ((i, j) for i, j in mesh.index_iter() if i_lo <= i < i_hi and j_lo <= j < j_hi)


class FiniteDiff:
    """Runs a scheme over a mesh."""

    def __init__(
        self,
        scheme: Scheme,
        consts: Mapping[str, float],
        mesh: FiniteDiffMesh,
        fns: FunctionValueMesh | None = None,
    ) -> None:
        missing = sorted(set(scheme.constants) - set(consts))
        if missing:
            raise ValueError(f"Missing values for constants {missing}.")
        needed = set(scheme.functions)
        available = fns.names if fns is not None else frozenset()
        if needed - available:
            raise ValueError(f"Missing values for functions {sorted(needed - available)}.")
        if fns is not None and fns.names and (
            fns.width != mesh.width or fns.size() != len(mesh.points)
        ):
            raise ValueError("Function values do not match the mesh.")
        self.scheme = scheme
        self.consts = dict(consts)
        self.mesh = mesh
        self.fns = fns

    def _context(self) -> tuple[dict[str, float], dict[str, Callable[[int, int], float]]]:
        match self.mesh.scaling:
            case SimpleGrid(dx, dy):
                consts = {**self.consts, "dx": dx, "dy": dy}
            case _:
                raise ValueError("Only meshes with a simple grid scaling are supported.")
        functions = self.fns.callables() if self.fns is not None else {}
        return consts, functions

    def run_iteration(self) -> None:
        """Update every interior point in place, row by row."""
        consts, functions = self._context()
        for i, j in _interior(self.scheme.stencil, self.mesh):
            value = self.scheme.update.evaluate(self.mesh.get_at, i, j, consts, functions)
            self.mesh.set_at(i, j, value)

    def get_error_stats(self) -> tuple[float, float]:
        """Return the mean and maximum absolute residual over the interior points."""
        consts, functions = self._context()
        count = 0
        mean = 0.0
        largest = 0.0
        for i, j in _interior(self.scheme.stencil, self.mesh):
            error = abs(self.scheme.residual.evaluate(self.mesh.get_at, i, j, consts, functions))
            total = mean * count + error
            count += 1
            mean = total / count
            largest = max(largest, error)
        return mean, largest


def main(argv: Sequence[str] | None = None) -> int:
    """Solve the linear advection example and save the mesh values."""
    parser = argparse.ArgumentParser(description="Run the linear advection example.")
    parser.add_argument("--output", default="MyMesh", help="file for the mesh values")
    parser.add_argument("--points", type=int, default=100, help="points in each direction")
    args = parser.parse_args(argv)

    mesh = FiniteDiffMesh.from_num_points(0.0, 6.0, 0.0, 3.0, args.points, args.points)
    mesh.fill_dirichlet_bc_vals(Boundary.BOTTOM, lambda x: math.exp(-((x - 3.0) ** 2)))

    method = FiniteDiff(scheme_from_args(EXAMPLE_ARGS), {"c": 0.5}, mesh)
    method.run_iteration()

    mean, largest = method.get_error_stats()
    print(f"Mean: {mean}. Max: {largest}")

    method.mesh.save_values(args.output)
    return 0