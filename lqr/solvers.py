# infinite-horizon LQR, fixed-point Riccati iteration

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np
import scipy.linalg as la

from .errors import InvalidCostWeights, InvalidStepCount
from .systems import CostWeights, LinearSystem

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 800


@dataclass(frozen=True)
class RiccatiSolution:
    """
    result of one solver invocation

    attributes
        P: iterated solution of the discrete algebraic Riccati equation (n x n)
        K: feedback gain (m x n), control law u = -K x
        iterations: number of Riccati updates actually performed
        converged: tolerance reached, None when no tolerance was requested
        delta: max |P_new - P| of the last update, None if no update ran
    """
    P: np.ndarray
    K: np.ndarray
    iterations: int
    converged: Optional[bool] = None
    delta: Optional[float] = None

    def closed_loop(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """A - B K"""
        return np.asarray(A, dtype=float) - np.atleast_2d(B) @ self.K

    def spectral_radius(self, A: np.ndarray, B: np.ndarray) -> float:
        """largest closed-loop eigenvalue magnitude"""
        return float(np.max(np.abs(la.eigvals(self.closed_loop(A, B)))))

    def is_stabilizing(self, A: np.ndarray, B: np.ndarray) -> bool:
        return self.spectral_radius(A, B) < 1.0

    def riccati_residual(self, A, B, Q, R) -> float:
        """
        max-abs residual of
            P = Q + A^T P A - A^T P B (R + B^T P B)^{-1} B^T P A
        """
        A = np.asarray(A, dtype=float)
        B = np.atleast_2d(np.asarray(B, dtype=float))
        Q = np.asarray(Q, dtype=float)
        R = np.atleast_2d(np.asarray(R, dtype=float))

        P = self.P
        S = R + B.T @ P @ B
        rhs = Q + A.T @ P @ A - (A.T @ P @ B) @ la.solve(S, B.T @ P @ A)
        return float(np.max(np.abs(rhs - P)))


class RiccatiSolver:
    """
    discrete-time infinite-horizon LQR by value iteration

    solves min sum_k [x_k^T Q x_k + u_k^T R u_k]
            s.t. x_{k+1} = A x_k + B u_k

    P is seeded with Q and updated a fixed number of times; with a
    tolerance the loop may stop earlier, otherwise every run performs
    exactly `iterations` updates and is bit-reproducible
    """

    def __init__(self, A, B, Q, R, iterations: int = DEFAULT_ITERATIONS,
                 tol: Optional[float] = None):
        """
        args:
            A: state transition matrix (n x n)
            B: control input matrix (n x m)
            Q: state cost matrix (n x n), or its diagonal
            R: control cost matrix (m x m), or a scalar when m == 1
            iterations: number of Riccati updates
            tol: optional early-stop threshold on max |P_new - P|
        """
        system = LinearSystem(A, B)
        weights = CostWeights(Q, R)
        weights.check_against(system)

        if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)):
            raise InvalidStepCount(f"iterations must be an integer, got {iterations!r}")
        if iterations < 0:
            raise InvalidStepCount(f"iterations must be >= 0, got {iterations}")
        if tol is not None and not tol > 0:
            raise ValueError(f"tol must be positive, got {tol}")

        self.system = system
        self.weights = weights
        self.A = system.A
        self.B = system.B
        self.Q = weights.Q
        self.R = weights.R
        self.iterations = int(iterations)
        self.tol = tol

        self.n = system.n  # state dimension
        self.m = system.m  # control dimension

        self.solution = None

    @classmethod
    def from_problem(cls, system: LinearSystem, weights: CostWeights,
                     iterations: int = DEFAULT_ITERATIONS,
                     tol: Optional[float] = None) -> 'RiccatiSolver':
        return cls(system.A, system.B, weights.Q, weights.R,
                   iterations=iterations, tol=tol)

    def solve(self) -> RiccatiSolution:
        """
        run the Riccati recursion and derive the gain

        returns:
            RiccatiSolution with P, K and iteration bookkeeping

        raises:
            InvalidCostWeights: S = R + B^T P B singular or non-finite
        """
        A, B, Q = self.A, self.B, self.Q

        P = Q.copy()
        delta = None
        converged = None if self.tol is None else False
        performed = 0

        for i in range(self.iterations):
            S = self._innovation(P, i + 1)

            AtPA = A.T @ P @ A
            AtPB = A.T @ P @ B
            BtPA = B.T @ P @ A

            P_new = Q + (AtPA - AtPB @ self._solve(S, BtPA, i + 1))

            delta = float(np.max(np.abs(P_new - P)))
            P = P_new
            performed = i + 1

            if self.tol is not None and delta < self.tol:
                converged = True
                break

        # K = S^{-1} B^T P A
        S = self._innovation(P, performed)
        K = self._solve(S, B.T @ P @ A, performed)

        P.setflags(write=False)
        K.setflags(write=False)
        self.solution = RiccatiSolution(P=P, K=K, iterations=performed,
                                        converged=converged, delta=delta)

        logger.debug("Riccati: %d iterations, last delta %s, K = %s",
                     performed, delta, K.tolist())
        if not self.solution.is_stabilizing(A, B):
            logger.warning("gain after %d iterations is not stabilizing "
                           "(spectral radius %.6f)",
                           performed, self.solution.spectral_radius(A, B))

        return self.solution

    def _innovation(self, P: np.ndarray, iteration: int) -> np.ndarray:
        """S = R + B^T P B, rejected when non-finite or numerically singular"""
        S = self.R + self.B.T @ P @ self.B

        if not np.all(np.isfinite(S)):
            raise InvalidCostWeights(
                f"R + B^T P B is not finite at iteration {iteration}")
        # a 1 x 1 S always has condition number 1, only m > 1 can trip this
        if np.linalg.cond(S) > 1.0 / np.finfo(float).eps:
            raise InvalidCostWeights(
                f"R + B^T P B is singular at iteration {iteration}")
        return S

    @staticmethod
    def _solve(S: np.ndarray, rhs: np.ndarray, iteration: int) -> np.ndarray:
        """S^{-1} rhs, after _innovation has screened S"""
        try:
            return la.solve(S, rhs)
        except la.LinAlgError as e:
            raise InvalidCostWeights(
                f"R + B^T P B cannot be inverted at iteration {iteration}") from e

    def get_feedback_gain(self) -> np.ndarray:
        """return computed feedback gain"""
        if self.solution is None:
            raise RuntimeError("call solve() first")
        return self.solution.K

    def get_cost_to_go(self) -> np.ndarray:
        """return cost-to-go matrix"""
        if self.solution is None:
            raise RuntimeError("call solve() first")
        return self.solution.P


def dlqr(A, B, Q, R, iterations: int = DEFAULT_ITERATIONS,
         tol: Optional[float] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    discrete LQR gain

    returns:
        K: feedback gain (m x n)
        P: cost-to-go matrix (n x n)
    """
    solution = RiccatiSolver(A, B, Q, R, iterations=iterations, tol=tol).solve()
    return solution.K, solution.P
