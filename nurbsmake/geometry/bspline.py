"""
B-spline basis evaluation for the NURBS records.

Only the p+1 basis functions that are non-zero on a knot span are ever
needed. They are built degree by degree with the Cox-de Boor recursion

    N_{i,q}(xi) = (xi - u_i)/(u_{i+q} - u_i) * N_{i,q-1}(xi)
                + (u_{i+q+1} - xi)/(u_{i+q+1} - u_{i+1}) * N_{i+1,q-1}(xi)

with 0/0 taken as 0 (repeated knots). Keeping every intermediate degree
gives the table that derivatives are read from, using

    N'_{i,q} = a_{i,q} * N_{i,q-1} - a_{i+1,q} * N_{i+1,q-1},
    a_{i,q} = q / (u_{i+q} - u_i)
"""

import numpy as np
from typing import List, Optional

from ..discretization.knot_vector import KnotVector


def _safe_ratio(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    out = np.zeros(len(den))
    mask = den > 0
    out[mask] = num[mask] / den[mask]
    return out


def basis_table(kv: KnotVector, xi: float, span: int) -> List[np.ndarray]:
    """
    Non-zero basis functions of every degree up to p on one span.

    Returns:
        List whose entry q holds N_{span-q,q}(xi) .. N_{span,q}(xi)
    """
    u = kv.knots
    table = [np.ones(1)]
    for q in range(1, kv.degree + 1):
        lower = np.concatenate([[0.0], table[-1], [0.0]])
        i = np.arange(span - q, span + 1)
        left = _safe_ratio(xi - u[i], u[i + q] - u[i])
        right = _safe_ratio(u[i + q + 1] - xi, u[i + q + 1] - u[i + 1])
        table.append(left * lower[:-1] + right * lower[1:])
    return table


def eval_basis(kv: KnotVector, xi: float, span: Optional[int] = None) -> np.ndarray:
    """
    Evaluate the p+1 non-zero basis functions at xi.

    Parameters:
        kv: Knot vector
        xi: Parameter value
        span: Span index, looked up when omitted

    Returns:
        Array of shape (p+1,) holding N_{span-p,p}(xi) .. N_{span,p}(xi)
    """
    if span is None:
        span = kv.find_span(xi)
    return basis_table(kv, xi, span)[-1]


def eval_basis_ders(kv: KnotVector, xi: float, n_ders: int,
                    span: Optional[int] = None) -> np.ndarray:
    """
    Evaluate the non-zero basis functions and their derivatives at xi.

    Derivatives above the degree vanish and are not returned.

    Parameters:
        kv: Knot vector
        xi: Parameter value
        n_ders: Highest derivative wanted
        span: Span index, looked up when omitted

    Returns:
        Array of shape (min(n_ders, p)+1, p+1); row k is the k-th derivative
    """
    p = kv.degree
    u = kv.knots
    if span is None:
        span = kv.find_span(xi)

    table = basis_table(kv, xi, span)
    n_ders = min(n_ders, p)

    ders = np.zeros((n_ders + 1, p + 1))
    ders[0] = table[p]

    # Row r of coeffs expresses the k-th derivative of N_{span-p+r,p} in
    # the degree p-k functions N_{span-p,p-k} .. N_{span,p-k}
    coeffs = np.eye(p + 1)
    i = np.arange(span - p, span + 1)
    for k in range(1, n_ders + 1):
        q = p - k + 1
        a = _safe_ratio(np.full(p + 1, float(q)), u[i + q] - u[i])
        shifted = np.hstack([np.zeros((p + 1, 1)), coeffs[:, :-1]])
        coeffs = (coeffs - shifted) * a

        lower = np.zeros(p + 1)
        lower[k:] = table[p - k]
        ders[k] = coeffs @ lower

    return ders
