"""
Configuration for the lane-keeping demo.

Every scalar the demo needs lives on one frozen value that is passed into
both the solver and the simulator.  The defaults reproduce the demo
run: a car at 10 m/s with a 2.5 m wheelbase sampled at 20 Hz for 30 s,
starting 1 m off the lane centre with a 0.2 rad heading error, steering
limited to +-0.6 rad.
"""

from __future__ import annotations

import dataclasses
import json
import math
import pathlib
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np

from lqr.errors import InvalidControlLimits, InvalidStepCount, InvalidTimeStep

Weights = Union[Tuple[float, ...], Tuple[Tuple[float, ...], ...]]


@dataclass(frozen=True)
class LaneKeepingConfig:
    """
    Parameters of one synthesis + simulation run.

    Attributes
    ----------
    v : float
        Forward speed in m/s.
    L : float
        Wheelbase in m.
    dt : float
        Sample interval in s.
    steps : int
        Number of simulation samples.
    Q : tuple
        State-cost weights on [ey, epsi], either the diagonal or the full
        2 x 2 matrix as nested tuples.
    R : float
        Steering effort weight.
    delta_min, delta_max : float
        Steering saturation bounds in rad.
    ey0, epsi0 : float
        Initial lateral error (m) and heading error (rad).
    riccati_iterations : int
        Number of Riccati updates.  800 is well past convergence for the
        default weights; runs are reproducible for a fixed count.
    riccati_tol : float, optional
        Early-stop threshold on the change of P.  None keeps the fixed count.
    """

    v: float = 10.0
    L: float = 2.5
    dt: float = 0.05
    steps: int = 600
    Q: Weights = (3.0, 1.5)
    R: float = 0.5
    delta_min: float = -0.6
    delta_max: float = 0.6
    ey0: float = 1.0
    epsi0: float = 0.20
    riccati_iterations: int = 800
    riccati_tol: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.v > 0:
            raise ValueError(f"v must be positive, got {self.v}")
        if not self.L > 0:
            raise ValueError(f"L must be positive, got {self.L}")
        if not (isinstance(self.dt, (int, float)) and math.isfinite(self.dt)
                and self.dt > 0):
            raise InvalidTimeStep(f"dt must be positive, got {self.dt}")
        if isinstance(self.steps, bool) or not isinstance(self.steps, (int, np.integer)):
            raise InvalidStepCount(f"steps must be an integer, got {self.steps!r}")
        if self.steps < 0:
            raise InvalidStepCount(f"steps must be >= 0, got {self.steps}")
        object.__setattr__(self, "steps", int(self.steps))
        if self.delta_min > self.delta_max:
            raise InvalidControlLimits(
                f"delta_min {self.delta_min} exceeds delta_max {self.delta_max}")

        object.__setattr__(self, "Q", _as_tuple(self.Q))

    def state_cost(self) -> np.ndarray:
        """Q as a 2 x 2 matrix."""

        Q = np.array(self.Q, dtype=float)
        return np.diag(Q) if Q.ndim == 1 else Q

    def control_cost(self) -> np.ndarray:
        """R as a 1 x 1 matrix."""

        return np.array([[self.R]], dtype=float)

    def initial_state(self) -> np.ndarray:
        return np.array([self.ey0, self.epsi0], dtype=float)

    def control_limits(self) -> Tuple[float, float]:
        return self.delta_min, self.delta_max

    def replace(self, **changes: Any) -> "LaneKeepingConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        out = dataclasses.asdict(self)
        out["Q"] = [list(row) if isinstance(row, tuple) else row for row in self.Q]
        return out

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "LaneKeepingConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"unknown configuration options: {', '.join(unknown)}")
        return cls(**dict(values))


def _as_tuple(weights) -> Weights:
    if isinstance(weights, np.ndarray):
        weights = weights.tolist()
    return tuple(_as_tuple(w) if isinstance(w, (list, tuple)) else float(w)
                 for w in weights)


def load_config(path: pathlib.Path | str) -> LaneKeepingConfig:
    """Read a JSON object of configuration options; missing keys keep defaults."""

    with open(path, "r", encoding="utf-8") as fh:
        values = json.load(fh)
    if not isinstance(values, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return LaneKeepingConfig.from_dict(values)


DEFAULT_CONFIG = LaneKeepingConfig()
