# fixed-step closed-loop simulation under saturated state feedback

import logging
from typing import Optional, Sequence, Tuple
import numpy as np

from lqr.errors import (DimensionMismatch, InvalidControlLimits,
                        InvalidStepCount, InvalidTimeStep)
from lqr.systems import LinearSystem

from .trajectory import Trajectory

logger = logging.getLogger(__name__)


class ClosedLoopSimulator:
    """
    drives x_{k+1} = A x_k + B u_k with u_k = clip(-K x_k, u_min, u_max)

    runs a fixed number of steps, no convergence or divergence detection;
    saturation is a hard clamp, no slew-rate limit
    """

    def __init__(self, A, B, K, control_limits: Optional[Tuple] = None):
        """
        args:
            A: state transition matrix (n x n)
            B: control input matrix (n x m)
            K: feedback gain (m x n)
            control_limits: (min, max), scalars or length-m arrays;
                            None leaves the control unbounded
        """
        system = LinearSystem(A, B)
        n, m = system.n, system.m

        K = np.array(K, dtype=float)
        if K.ndim == 1:
            K = K.reshape(1, -1)
        if K.shape != (m, n):
            raise DimensionMismatch(f"K must have shape ({m}, {n}), got {K.shape}")
        K.setflags(write=False)

        self.system = system
        self.A = system.A
        self.B = system.B
        self.K = K
        self.n = n
        self.m = m
        self.u_min, self.u_max = self._limits(control_limits, m)

    @classmethod
    def from_system(cls, system: LinearSystem, K,
                    control_limits: Optional[Tuple] = None) -> 'ClosedLoopSimulator':
        return cls(system.A, system.B, K, control_limits=control_limits)

    @staticmethod
    def _limits(control_limits, m: int) -> Tuple[np.ndarray, np.ndarray]:
        if control_limits is None:
            return np.full(m, -np.inf), np.full(m, np.inf)

        try:
            lo, hi = control_limits
        except (TypeError, ValueError) as e:
            raise InvalidControlLimits(
                f"control_limits must be a (min, max) pair, got {control_limits!r}") from e

        try:
            lo = np.broadcast_to(np.asarray(lo, dtype=float), (m,)).copy()
            hi = np.broadcast_to(np.asarray(hi, dtype=float), (m,)).copy()
        except ValueError as e:
            raise InvalidControlLimits(
                f"control limits must be scalars or length {m}") from e

        if np.any(np.isnan(lo)) or np.any(np.isnan(hi)):
            raise InvalidControlLimits("control limits must not be NaN")
        if np.any(lo > hi):
            raise InvalidControlLimits(f"control_min {lo} exceeds control_max {hi}")

        lo.setflags(write=False)
        hi.setflags(write=False)
        return lo, hi

    def control(self, x: np.ndarray) -> np.ndarray:
        """saturated control for one observed state"""
        u = -(self.K @ x)
        return np.clip(u, self.u_min, self.u_max)

    def simulate(self, x0: Sequence[float], dt: float, steps: int,
                 t0: float = 0.0) -> Trajectory:
        """
        simulate `steps` samples starting at x0

        args:
            x0: initial state (n,)
            dt: sample interval, > 0
            steps: number of samples, >= 0
            t0: time of the first sample

        returns:
            trajectory; sample k holds t0 + k dt, the state observed then
            and the saturated control computed from it
        """
        x = np.array(x0, dtype=float).reshape(-1)
        if x.shape != (self.n,):
            raise DimensionMismatch(f"x0 must have length {self.n}, got {x.shape[0]}")
        if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)):
            raise InvalidStepCount(f"steps must be an integer, got {steps!r}")
        if steps < 0:
            raise InvalidStepCount(f"steps must be >= 0, got {steps}")
        if not np.isfinite(dt) or dt <= 0:
            raise InvalidTimeStep(f"dt must be positive, got {dt}")

        time = t0 + np.arange(steps) * dt
        states = np.empty((steps, self.n))
        controls = np.empty((steps, self.m))

        for k in range(steps):
            u = self.control(x)

            # log before update
            states[k] = x
            controls[k] = u

            x = self.A @ x + self.B @ u

        trajectory = Trajectory(time=time, states=states, controls=controls,
                                final_state=x)

        if steps:
            logger.debug("simulated %d steps, %d saturated, final state %s",
                         steps, int(trajectory.saturated(self.u_min, self.u_max).sum()),
                         x.tolist())
        return trajectory
