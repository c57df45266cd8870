import pytest

from comap.errors import SingularMatrixError
from comap.interpolation.linalg import solve


def test_solve_simple_system():
    x = solve([[2.0, 1.0], [1.0, 3.0]], [4.0, 7.0])
    assert x == pytest.approx([1.0, 2.0])


def test_solve_pivots_past_zero_leading_entry():
    x = solve([[0.0, 1.0], [1.0, 0.0]], [2.0, 3.0])
    assert x == pytest.approx([3.0, 2.0])


def test_solve_indefinite_lagrange_system():
    # Same shape as a two-sample kriging system: zero in the corner.
    a = [[1.0, 0.5, 1.0], [0.5, 1.0, 1.0], [1.0, 1.0, 0.0]]
    b = [0.75, 0.75, 1.0]
    x = solve(a, b)
    assert x[0] == pytest.approx(0.5)
    assert x[1] == pytest.approx(0.5)
    assert x[0] + x[1] == pytest.approx(1.0)


def test_solve_does_not_mutate_inputs():
    a = [[4.0, 2.0], [1.0, 3.0]]
    b = [2.0, 1.0]
    solve(a, b)
    assert a == [[4.0, 2.0], [1.0, 3.0]]
    assert b == [2.0, 1.0]


def test_solve_raises_on_singular_matrix():
    with pytest.raises(SingularMatrixError):
        solve([[1.0, 2.0], [2.0, 4.0]], [1.0, 2.0])


def test_solve_rejects_bad_shapes():
    with pytest.raises(ValueError, match="square"):
        solve([[1.0, 2.0]], [1.0])
    with pytest.raises(ValueError, match="Right-hand side"):
        solve([[1.0, 0.0], [0.0, 1.0]], [1.0])
