# discreet

`discreet` takes a partial differential equation and a stencil of mesh nodes
and builds a finite difference scheme on a uniform 2D grid. The steps are:

1. Parse the equation, written as `lhs = 0`.
2. Build a Taylor table on the stencil for each variable. The table gives the
   difference weights of every derivative the equation uses. Each derivative
   of order *n* is divided by `dx`ⁿ or `dy`ⁿ.
3. Solve the discretised equation for the unknown node at offset `(0, 0)`.
4. Evaluate the result over the points of a `FiniteDiffMesh`.

The package has no runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Writing equations

`discreet.diff_eq.parse_pde` reads an equation of the form `lhs = 0`. The
right-hand side must be the integer `0`. The left-hand side may use these
names and forms:

- `u` is the solution.
- `u_x`, `u_xx`, `u_y`, `u_yy` and so on are derivatives of `u`. A mixed name
  such as `u_xy` parses as a cross derivative, but building a scheme from it
  fails.
- Any other plain identifier is a constant. If the identifier is listed among
  the functions, it is a known function instead.
- The operators `+`, `-`, `*` and `/`, unary `-`, and parentheses.
- Number literals must be floating point, for example `2.0`. An integer
  literal is rejected.
- `a ^ 2.0` raises `a` to a whole non-negative power.

The parser raises `PdeParseError` for anything else, such as a function call
or a path like `a::b`.

Example, the advection equation with constant `c`:

```
u_y + c * u_x = 0
```

A stencil is a list of integer offsets `(i, j)` relative to the node being
solved for. Example: `[(-1, 0), (0, 0), (0, -1)]`.

## Taylor tables

`discreet.taylor.TaylorTable` builds the difference weights for one variable.
It uses the stencil points that lie on that variable's axis:

```python
from discreet.expression import Variable
from discreet.taylor import TaylorTable

table = TaylorTable([(0, 0), (1, 0)], Variable.X)
scheme = table.get_scheme(1)   # forward difference
print(scheme.render())
# ((-1.0 * mesh.get_at(i + (0), j + (0))) + (1.0 * mesh.get_at(i + (1), j + (0))))
```

`get_scheme` returns `None` when the derivative order is too high for the
stencil.

Mesh expressions live in `discreet.mesh_expr`. The base class is `MeshExpr`,
with the node types `AtOffset`, `MeshSum`, `MeshProd`, `MeshConstant`,
`SymbolicConst`, `FunctionVal`, `MeshNegate` and `MeshReciprocal`. They
support these operations:

- `simplify`
- `substitute`
- `differentiate`
- `find_root_linear`
- `render`, which gives source text
- `evaluate`

`discreet.matrix.SquareMat` is the small column-major matrix used to invert
the tables.

## Building and running a scheme

In `discreet.finite_diff`, `build_scheme(equation, stencil, constants,
functions)` returns a `Scheme`. A `Scheme` holds:

- the residual of the discretised equation;
- the update formula for the unknown node;
- the rendered text of both, in `residual_source` and `update_source`.

The names `dx` and `dy` are reserved for the grid spacings. A constant that
appears in the equation but is not declared is an error.

`scheme_from_args` does the same job from one argument string:

```
equation: u_y + c * u_x = 0, stencil: [(-1, 0), (0, 0), (0, -1)], constants: [c], functions: []
```

Errors are raised as subclasses of `ValueError`:

- `ArgParseError` for a malformed argument string;
- `PdeParseError` for an equation that cannot be parsed;
- `DiscretisationError` when the equation cannot be discretised on the
  stencil.

### The mesh

Prepare the mesh before running the scheme:

1. Create it with `FiniteDiffMesh.from_num_points(xmin, xmax, ymin, ymax,
   numx, numy)`.
2. Set boundary values with `fill_dirichlet_bc_vals(Boundary.BOTTOM, func)`.
   The boundary can also be `TOP`, `LEFT` or `RIGHT`. On the bottom and top
   boundaries `func` receives the x coordinate. On the left and right
   boundaries it receives the y coordinate.

Known functions of `(x, y)` are supplied through
`FunctionValueMesh.from_functions(mesh, {"f": func})`.

### The solver

```python
from discreet.finite_diff import FiniteDiff, build_scheme

scheme = build_scheme("u_y + c * u_x = 0", [(-1, 0), (0, 0), (0, -1)], ["c"], [])
solver = FiniteDiff(scheme, {"c": 0.5}, mesh)
solver.run_iteration()
mean, largest = solver.get_error_stats()
```

`run_iteration()` updates each interior point once, row by row. Interior
points are those past the first row and column whose whole stencil lies
inside the mesh.

`get_error_stats()` returns the mean and maximum absolute residual over the
same points.

A mesh can be written to disk in two ways:

- `save_values(path)` writes the values as big-endian 64-bit floats.
- `save_coords(path)` writes one `x y value` line per point.

## Command line

```
discreet [--output FILE] [--points N]
```

The command solves the advection example `u_y + 0.5 * u_x = 0` on
`[0, 6] × [0, 3]`. The bottom boundary is a Gaussian bump. The command runs
one iteration and prints the mean and maximum residual. It then saves the
values to `FILE`, which defaults to `MyMesh`. `N` is the number of points in
each direction and defaults to 100.

## Limitations

- The solver only runs on meshes with a uniform `SimpleGrid` scaling. A
  `ComplexPhysDomain` scaling can be represented, but running on it raises
  `ValueError`.
- Meshes cannot be built from a curvilinear physical domain.
- Cross derivatives such as `u_xy` are not discretised.