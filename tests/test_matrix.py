import pytest

from discreet.matrix import SquareMat

COLS = [[1.0, -0.5, 1.0], [1.0, 0.0, 1.0], [0.5, 1.5, 1.0]]


def test_matrix_inv():
    inverse = SquareMat(COLS).invert()
    assert inverse == SquareMat([[-6.0, 8.0, -2.0], [-2.0, 2.0, 0.0], [6.0, -7.0, 2.0]])


def test_matrix_get_cols():
    assert SquareMat(COLS).get_cols() == COLS


def test_invert_leaves_original_untouched():
    mat = SquareMat(COLS)
    mat.invert()
    assert mat.get_cols() == COLS


def test_double_inverse_returns_original():
    mat = SquareMat([[2.0, 0.0], [0.0, 4.0]])
    assert mat.invert().invert() == mat


def test_identity():
    assert SquareMat.identity(2).get_cols() == [[1.0, 0.0], [0.0, 1.0]]
    assert SquareMat.identity(3).invert() == SquareMat.identity(3)


def test_get_at_is_row_then_column():
    mat = SquareMat(COLS)
    assert mat.get_at(1, 0) == -0.5
    assert mat.get_at(0, 2) == 0.5


def test_row_operations():
    mat = SquareMat([[1.0, 2.0], [3.0, 4.0]])
    mat.row_scale(0, 2.0)
    assert mat.get_cols() == [[2.0, 2.0], [6.0, 4.0]]
    mat.row_sub(1, 0, 1.0)
    assert mat.get_cols() == [[2.0, 0.0], [6.0, -2.0]]


def test_non_square_rejected():
    with pytest.raises(ValueError):
        SquareMat([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])


def test_singular_matrix_fails():
    with pytest.raises(ZeroDivisionError):
        SquareMat([[0.0, 0.0], [0.0, 0.0]]).invert()