# discrete-time linear system and quadratic cost data structures

from dataclasses import dataclass
from typing import Tuple
import numpy as np
import scipy.linalg as la

from .errors import DimensionMismatch, InvalidCostWeights


def _frozen(array) -> np.ndarray:
    """float64 copy that cannot be written through"""
    out = np.array(array, dtype=float)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class LinearSystem:
    """
    discrete-time linear system x_{k+1} = A x_k + B u_k

    attributes
        A: state transition matrix (n x n)
        B: control input matrix (n x m)
    """
    A: np.ndarray
    B: np.ndarray

    def __post_init__(self):
        A = _frozen(self.A)
        B = _frozen(self.B)
        if B.ndim == 1:
            B = _frozen(B.reshape(-1, 1))

        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise DimensionMismatch(f"A must be square, got shape {A.shape}")
        if B.ndim != 2 or B.shape[0] != A.shape[0]:
            raise DimensionMismatch(
                f"B must have shape ({A.shape[0]}, m), got {B.shape}")

        object.__setattr__(self, 'A', A)
        object.__setattr__(self, 'B', B)

    @property
    def n(self) -> int:
        """state dimension"""
        return self.A.shape[0]

    @property
    def m(self) -> int:
        """control dimension"""
        return self.B.shape[1]

    def step(self, x: np.ndarray, u: np.ndarray) -> np.ndarray:
        """one state transition"""
        return self.A @ x + self.B @ np.atleast_1d(u)


@dataclass(frozen=True)
class CostWeights:
    """
    quadratic stage cost x^T Q x + u^T R u

    attributes
        Q: state cost (n x n), symmetric positive semidefinite;
           a 1-D array is taken as the diagonal
        R: control cost (m x m), symmetric positive definite;
           a scalar is taken as a 1 x 1 matrix
    """
    Q: np.ndarray
    R: np.ndarray

    def __post_init__(self):
        Q = np.array(self.Q, dtype=float)
        if Q.ndim == 1:
            Q = np.diag(Q)
        R = np.atleast_2d(np.array(self.R, dtype=float))

        _validate_state_cost(Q)
        _validate_control_cost(R)

        object.__setattr__(self, 'Q', _frozen(Q))
        object.__setattr__(self, 'R', _frozen(R))

    @property
    def shape(self) -> Tuple[int, int]:
        """(n, m) implied by the weights"""
        return self.Q.shape[0], self.R.shape[0]

    def check_against(self, system: LinearSystem):
        """raise DimensionMismatch unless Q is (n x n) and R is (m x m)"""
        if self.Q.shape != (system.n, system.n):
            raise DimensionMismatch(
                f"Q must have shape ({system.n}, {system.n}), got {self.Q.shape}")
        if self.R.shape != (system.m, system.m):
            raise DimensionMismatch(
                f"R must have shape ({system.m}, {system.m}), got {self.R.shape}")


def _validate_state_cost(Q: np.ndarray):
    if Q.ndim != 2 or Q.shape[0] != Q.shape[1]:
        raise DimensionMismatch(f"Q must be square, got shape {Q.shape}")
    if not np.all(np.isfinite(Q)):
        raise InvalidCostWeights("Q has non-finite entries")
    if not np.allclose(Q, Q.T, atol=1e-10):
        raise InvalidCostWeights("Q must be symmetric")

    eigs = la.eigvalsh(Q)
    if eigs.min() < -1e-10:
        raise InvalidCostWeights(
            f"Q must be positive semidefinite! Min eig: {eigs.min():.6e}")


def _validate_control_cost(R: np.ndarray):
    if R.ndim != 2 or R.shape[0] != R.shape[1]:
        raise DimensionMismatch(f"R must be square, got shape {R.shape}")
    if not np.all(np.isfinite(R)):
        raise InvalidCostWeights("R has non-finite entries")
    if not np.allclose(R, R.T, atol=1e-10):
        raise InvalidCostWeights("R must be symmetric")

    eigs = la.eigvalsh(R)
    if eigs.min() <= 0:
        raise InvalidCostWeights(
            f"R must be positive definite! Min eig: {eigs.min():.6e}")
