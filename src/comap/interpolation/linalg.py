"""
Dense linear solver for small kriging systems.

The augmented ordinary-kriging matrix is symmetric but indefinite (the Lagrange
row has a zero on the diagonal), so Cholesky is out. Gaussian elimination with
partial pivoting is sufficient for the tens of sensors this project deals with.
"""

from __future__ import annotations

import math
from typing import Sequence

from comap.errors import SingularMatrixError


def solve(a: Sequence[Sequence[float]], b: Sequence[float]) -> list[float]:
    """Solve `a @ x = b` and return `x`.

    Neither input is mutated. Raises `SingularMatrixError` when a pivot is exactly
    zero after row swapping or the solution is not finite, and `ValueError` when
    the shapes do not line up.
    """
    n = len(a)
    if any(len(row) != n for row in a):
        raise ValueError("Matrix must be square")
    if len(b) != n:
        raise ValueError(f"Right-hand side has length {len(b)}, expected {n}")

    # Augmented copy [A | b].
    m = [[float(v) for v in row] + [float(b[i])] for i, row in enumerate(a)]

    for col in range(n):
        pivot_row = max(range(col, n), key=lambda r: abs(m[r][col]))
        if pivot_row != col:
            m[col], m[pivot_row] = m[pivot_row], m[col]

        pivot = m[col][col]
        if pivot == 0:
            raise SingularMatrixError(f"Zero pivot in column {col}")

        for r in range(col + 1, n):
            factor = m[r][col] / pivot
            if factor == 0:
                continue
            row, src = m[r], m[col]
            for c in range(col, n + 1):
                row[c] -= factor * src[c]

    x = [0.0] * n
    for i in range(n - 1, -1, -1):
        acc = m[i][n]
        for j in range(i + 1, n):
            acc -= m[i][j] * x[j]
        x[i] = acc / m[i][i]

    if not all(math.isfinite(v) for v in x):
        raise SingularMatrixError("Solution is not finite")
    return x
