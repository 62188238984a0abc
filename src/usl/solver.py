"""Levenberg-Marquardt solver for small nonlinear least-squares problems.

Minimizes ``F(x) = 1/2 * ||r(x)||^2`` for a residual function ``r``. The
damping factor mu blends Gauss-Newton steps (small mu) with short
gradient-descent steps (large mu) and is adapted from the gain ratio between
the actual and the predicted reduction of F. The update rules follow
Madsen, Nielsen & Tingleff, "Methods for Non-Linear Least Squares Problems".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np

from .errors import NonConvergenceError
from .jacobian import DEFAULT_STEP, numerical_jacobian
from .log import get_logger

logger = get_logger(__name__)

ResidualFunc = Callable[[np.ndarray], np.ndarray]
JacobianFunc = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class SolverConfig:
    """Tuning knobs for the damped least-squares iteration."""

    tau: float = 1e-6
    eps1: float = 1e-8
    eps2: float = 1e-8
    max_iterations: int = 1000
    jacobian_step: float = DEFAULT_STEP

    def __post_init__(self) -> None:
        if self.tau <= 0:
            raise ValueError("Initial damping tau must be strictly positive.")
        if self.eps1 <= 0 or self.eps2 <= 0:
            raise ValueError("Convergence thresholds eps1 and eps2 must be strictly positive.")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1.")
        if self.jacobian_step <= 0:
            raise ValueError("jacobian_step must be strictly positive.")


@dataclass
class SolverResult:
    """Outcome of a converged run."""

    x: np.ndarray
    cost: float
    iterations: int
    reason: str

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["x"] = self.x.tolist()
        return payload


def levenberg_marquardt(
    residuals: ResidualFunc,
    x0: np.ndarray,
    config: Optional[SolverConfig] = None,
    jacobian: Optional[JacobianFunc] = None,
) -> SolverResult:
    """
    Find x minimizing the sum of squared residuals, starting from x0.

    When ``jacobian`` is omitted it is approximated by forward differences.

    Raises:
        NonConvergenceError: when the iteration budget runs out, the damped
            normal equations are singular, or the starting residuals are not
            finite.
    """
    config = config or SolverConfig()
    x = np.array(x0, dtype=float)

    def jac_at(point: np.ndarray, f: np.ndarray) -> np.ndarray:
        if jacobian is not None:
            return np.asarray(jacobian(point), dtype=float)
        return numerical_jacobian(residuals, point, f0=f, step=config.jacobian_step)

    f = np.asarray(residuals(x), dtype=float)
    if not np.all(np.isfinite(f)):
        raise NonConvergenceError(
            "residuals are not finite at the starting point",
            context={"x0": x.tolist()},
        )
    cost = 0.5 * float(f @ f)
    J = jac_at(x, f)
    A = J.T @ J
    g = J.T @ f

    mu = config.tau * float(np.max(np.diag(A)))
    nu = 2.0
    identity = np.eye(x.size)

    if np.max(np.abs(g)) <= config.eps1:
        return SolverResult(x=x, cost=cost, iterations=0, reason="gradient")

    for iteration in range(1, config.max_iterations + 1):
        try:
            h = np.linalg.solve(A + mu * identity, -g)
        except np.linalg.LinAlgError as exc:
            raise NonConvergenceError(
                f"damped normal equations are singular: {exc}",
                iterations=iteration,
                context={"x": x.tolist(), "mu": mu},
            ) from exc
        if not np.all(np.isfinite(h)):
            raise NonConvergenceError(
                "damped normal equations produced a non-finite step",
                iterations=iteration,
                context={"x": x.tolist(), "mu": mu},
            )

        if np.linalg.norm(h) <= config.eps2 * (np.linalg.norm(x) + config.eps2):
            return SolverResult(x=x, cost=cost, iterations=iteration, reason="step")

        x_new = x + h
        f_new = np.asarray(residuals(x_new), dtype=float)
        cost_new = 0.5 * float(f_new @ f_new)
        predicted = 0.5 * float(h @ (mu * h - g))
        rho = (cost - cost_new) / predicted if predicted > 0 else -1.0
        accepted = bool(np.isfinite(cost_new) and rho > 0)

        logger.debug(
            "lm.step",
            iteration=iteration,
            cost=cost,
            trial_cost=cost_new,
            mu=mu,
            accepted=accepted,
        )

        if accepted:
            x, f, cost = x_new, f_new, cost_new
            J = jac_at(x, f)
            A = J.T @ J
            g = J.T @ f
            if np.max(np.abs(g)) <= config.eps1:
                return SolverResult(x=x, cost=cost, iterations=iteration, reason="gradient")
            mu *= max(1.0 / 3.0, 1.0 - (2.0 * rho - 1.0) ** 3)
            nu = 2.0
        else:
            mu *= nu
            nu *= 2.0

    raise NonConvergenceError(
        f"no convergence after {config.max_iterations} iterations",
        iterations=config.max_iterations,
        context={"x": x.tolist(), "cost": cost, "mu": mu},
    )
