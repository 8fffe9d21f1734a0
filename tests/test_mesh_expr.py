import pytest

from discreet.expression import (
    Constant,
    CrossDerivative,
    Derivative,
    Negate,
    Prod,
    SolutionVal,
    Sum,
    SymbolicConstant,
    Variable,
)
from discreet.mesh_expr import (
    AtOffset,
    DiscretisationError,
    FunctionVal,
    MeshConstant,
    MeshNegate,
    MeshProd,
    MeshReciprocal,
    MeshSum,
    SymbolicConst,
    from_diff_eq,
)

U = AtOffset(0, 0)


def grid(values):
    return lambda i, j: values[(i, j)]


def test_product_rule():
    expr = MeshProd([U, U])
    assert expr.differentiate(U).simplify() == MeshSum([U, U])


def test_derivative_of_unrelated_value_is_zero():
    assert AtOffset(1, 0).differentiate(U) == MeshConstant(0.0)
    assert SymbolicConst("c").differentiate(U) == MeshConstant(0.0)
    assert U.differentiate(U) == MeshConstant(1.0)


def test_derivative_of_negation():
    assert MeshNegate(U).differentiate(U).simplify() == MeshNegate(MeshConstant(1.0))


def test_simplify_sum_drops_zeros_and_flattens():
    expr = MeshSum([MeshConstant(0.0), MeshSum([U, AtOffset(1, 0)]), AtOffset(0, 1)])
    assert expr.simplify() == MeshSum([U, AtOffset(1, 0), AtOffset(0, 1)])


def test_simplify_product_rules():
    assert MeshProd([MeshConstant(1.0), U]).simplify() == U
    assert MeshProd([MeshConstant(1.0)]).simplify() == MeshConstant(1.0)
    assert MeshProd([U, MeshConstant(0.0), U]).simplify() == MeshConstant(0.0)
    assert MeshNegate(MeshConstant(0.0)).simplify() == MeshConstant(0.0)
    assert MeshReciprocal(MeshConstant(1.0)).simplify() == MeshConstant(1.0)


def test_substitute_replaces_every_occurrence():
    expr = MeshSum([U, MeshNegate(MeshProd([U, AtOffset(1, 0)]))])
    result = expr.substitute(U, MeshConstant(2.0))
    assert result == MeshSum(
        [MeshConstant(2.0), MeshNegate(MeshProd([MeshConstant(2.0), AtOffset(1, 0)]))]
    )


def test_find_root_linear_forward_difference():
    expr = MeshSum(
        [
            MeshProd([MeshConstant(-1.0), U]),
            MeshProd([MeshConstant(1.0), AtOffset(1, 0)]),
        ]
    )
    root = expr.find_root_linear(U)
    values = {(1, 0): 3.0}
    assert root.evaluate(grid(values), 0, 0, {}, {}) == pytest.approx(3.0)


def test_find_root_satisfies_equation():
    # c * (u - u[-1, 0]) + (u - u[0, -1]) = 0
    expr = MeshSum(
        [
            MeshProd([SymbolicConst("c"), MeshSum([U, MeshNegate(AtOffset(-1, 0))])]),
            MeshSum([U, MeshNegate(AtOffset(0, -1))]),
        ]
    )
    root = expr.find_root_linear(U)
    values = {(-1, 0): 2.0, (0, -1): 5.0}
    consts = {"c": 0.5}
    u = root.evaluate(grid(values), 0, 0, consts, {})
    values[(0, 0)] = u
    assert expr.evaluate(grid(values), 0, 0, consts, {}) == pytest.approx(0.0)
    assert u == pytest.approx((0.5 * 2.0 + 5.0) / 1.5)


def test_evaluate_uses_functions_and_constants():
    expr = MeshProd([FunctionVal("f"), SymbolicConst("k"), MeshReciprocal(AtOffset(1, 1))])
    value = expr.evaluate(
        grid({(3, 4): 4.0}), 2, 3, {"k": 2.0}, {"f": lambda i, j: float(i + j)}
    )
    assert value == pytest.approx(5.0 * 2.0 / 4.0)


def test_render():
    expr = MeshSum([MeshProd([MeshConstant(-1.0), AtOffset(-1, 0)]), SymbolicConst("c")])
    assert expr.render() == "((-1.0 * mesh.get_at(i + (-1), j + (0))) + consts.c)"
    assert MeshNegate(MeshReciprocal(FunctionVal("f"))).render() == "(-(1.0 / fns.f(i, j)))"


def test_from_diff_eq():
    dx = MeshSum([MeshProd([MeshConstant(1.0), AtOffset(1, 0)])])
    dy = MeshSum([MeshProd([MeshConstant(1.0), AtOffset(0, 1)])])
    eq = Sum(
        [
            Derivative(Variable.Y, 1),
            Prod([SymbolicConstant("c"), Derivative(Variable.X, 1)]),
            Negate(Prod([SymbolicConstant("f"), SolutionVal()])),
            Constant(2.0),
        ]
    )
    result = from_diff_eq(eq, ["f"], {(Variable.X, 1): dx, (Variable.Y, 1): dy})
    assert result == MeshSum(
        [
            dy,
            MeshProd([SymbolicConst("c"), dx]),
            MeshNegate(MeshProd([FunctionVal("f"), U])),
            MeshConstant(2.0),
        ]
    )


def test_from_diff_eq_unknown_derivative():
    with pytest.raises(DiscretisationError, match="Unknown derivative"):
        from_diff_eq(Derivative(Variable.X, 2), [], {})


def test_from_diff_eq_cross_derivative():
    with pytest.raises(DiscretisationError):
        from_diff_eq(CrossDerivative([Variable.X, Variable.Y]), [], {})