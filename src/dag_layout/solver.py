"""
Black-box optimization solvers used by the layout pipeline.

Layout phases only formulate problems; this module solves them:
- solve_milp: (mixed integer) linear programs via scipy.optimize.milp (HiGHS)
- solve_qp: convex quadratic programs with linear inequality constraints
  via scipy.optimize.minimize (SLSQP)

Both return a SolverResult rather than raising, so that callers can attach
context (layer, node pair) to the error they surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp, minimize
from scipy.sparse import issparse, sparray

# Slack allowed when checking a returned assignment against its constraints
FEASIBILITY_TOLERANCE = 1e-6


@dataclass
class SolverResult:
    """Result of a solver invocation."""

    x: Optional[np.ndarray]  # Variable assignment, None if none was found
    success: bool  # True if x is a feasible (near) optimal assignment
    status: str  # Status message from the solver


def solve_milp(
    c: np.ndarray,
    A_ub: Optional[Union[np.ndarray, sparray]] = None,
    b_ub: Optional[np.ndarray] = None,
    b_lb: Optional[np.ndarray] = None,
    lb: Optional[np.ndarray] = None,
    ub: Optional[np.ndarray] = None,
    integral: bool = True,
    time_limit: float = 30.0,
) -> SolverResult:
    """
    Minimize ``c @ x`` subject to ``b_lb <= A_ub @ x <= b_ub`` and ``lb <= x <= ub``.

    Args:
        c: Objective coefficients, one per variable
        A_ub: Inequality constraint matrix (rows x variables), dense or
            scipy.sparse; sparse matrices are passed to the solver as is
        b_ub: Inequality upper bounds
        b_lb: Inequality lower bounds (default -inf)
        lb: Variable lower bounds (default 0)
        ub: Variable upper bounds (default +inf)
        integral: If True, every variable must take an integer value
        time_limit: Maximum solver time in seconds

    Returns:
        SolverResult with the optimal assignment
    """
    c = np.asarray(c, dtype=float)
    num_vars = c.shape[0]
    if num_vars == 0:
        return SolverResult(x=np.zeros(0), success=True, status="empty")

    lower = np.zeros(num_vars) if lb is None else np.asarray(lb, dtype=float)
    upper = np.full(num_vars, np.inf) if ub is None else np.asarray(ub, dtype=float)
    integrality = np.ones(num_vars) if integral else np.zeros(num_vars)

    constraints = []
    if A_ub is not None and A_ub.shape[0]:
        matrix = A_ub if issparse(A_ub) else np.asarray(A_ub, dtype=float)
        lower_rows = -np.inf if b_lb is None else b_lb
        upper_rows = np.inf if b_ub is None else b_ub
        constraints.append(LinearConstraint(matrix, lower_rows, upper_rows))

    result = milp(
        c=c,
        constraints=constraints or None,
        integrality=integrality,
        bounds=Bounds(lb=lower, ub=upper),
        options={"time_limit": time_limit},
    )

    if result.x is None:
        return SolverResult(x=None, success=False, status=str(result.message))

    x = np.asarray(result.x)
    if integral:
        x = np.round(x)
    # status 1 is a time or iteration limit hit after a feasible solution was found
    return SolverResult(x=x, success=result.status in (0, 1), status=str(result.message))


def solve_qp(
    P: np.ndarray,
    q: Optional[np.ndarray] = None,
    A: Optional[np.ndarray] = None,
    b: Optional[np.ndarray] = None,
    x0: Optional[np.ndarray] = None,
    max_iter: int = 1000,
) -> SolverResult:
    """
    Minimize ``0.5 * x @ P @ x + q @ x`` subject to ``A @ x >= b``.

    ``P`` must be symmetric positive definite for the optimum to be unique.

    Args:
        P: Quadratic term (variables x variables)
        q: Linear term (default 0)
        A: Inequality constraint matrix (rows x variables)
        b: Inequality lower bounds
        x0: Starting point, ideally feasible
        max_iter: Maximum SLSQP iterations

    Returns:
        SolverResult with the optimal assignment. An assignment the solver
        did not certify is still reported as successful when it satisfies
        every constraint within FEASIBILITY_TOLERANCE.
    """
    P = np.asarray(P, dtype=float)
    num_vars = P.shape[0]
    if num_vars == 0:
        return SolverResult(x=np.zeros(0), success=True, status="empty")

    q = np.zeros(num_vars) if q is None else np.asarray(q, dtype=float)
    start = np.zeros(num_vars) if x0 is None else np.asarray(x0, dtype=float)

    def objective(x: np.ndarray) -> float:
        return float(0.5 * x @ P @ x + q @ x)

    def gradient(x: np.ndarray) -> np.ndarray:
        return P @ x + q

    constraints = []
    has_constraints = A is not None and len(A) > 0
    if has_constraints:
        A = np.asarray(A, dtype=float)
        b = np.asarray(b, dtype=float)
        constraints.append(
            {
                "type": "ineq",
                "fun": lambda x: A @ x - b,
                "jac": lambda x: A,
            }
        )

    result = minimize(
        objective,
        start,
        jac=gradient,
        constraints=constraints,
        method="SLSQP",
        options={"maxiter": max_iter, "ftol": 1e-12},
    )

    x = np.asarray(result.x)
    if not np.all(np.isfinite(x)):
        return SolverResult(x=None, success=False, status=str(result.message))

    feasible = not has_constraints or bool(np.all(A @ x - b >= -FEASIBILITY_TOLERANCE))
    return SolverResult(x=x, success=feasible, status=str(result.message))


__all__ = [
    "FEASIBILITY_TOLERANCE",
    "SolverResult",
    "solve_milp",
    "solve_qp",
]
