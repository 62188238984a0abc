"""Forward-difference approximation of a vector function's Jacobian."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

# Square root of float64 machine epsilon.
DEFAULT_STEP = 1.49e-8


def numerical_jacobian(
    func: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    f0: Optional[np.ndarray] = None,
    step: float = DEFAULT_STEP,
) -> np.ndarray:
    """
    Approximate ``d func / d x`` at ``x`` by forward differences.

    Each parameter j is perturbed by ``step * max(|x_j|, 1)`` so that large
    coefficients get a proportionally large step. ``f0`` is ``func(x)`` and is
    evaluated here when not supplied.

    Returns:
        Array of shape (len(f0), len(x)).
    """
    x = np.asarray(x, dtype=float)
    if f0 is None:
        f0 = np.asarray(func(x), dtype=float)
    jac = np.empty((f0.size, x.size), dtype=float)
    for j in range(x.size):
        h = step * max(abs(x[j]), 1.0)
        shifted = x.copy()
        shifted[j] += h
        # Use the representable step actually taken.
        h = shifted[j] - x[j]
        jac[:, j] = (np.asarray(func(shifted), dtype=float) - f0) / h
    return jac
