# time-ordered closed-loop samples

from dataclasses import dataclass
from typing import Iterator, NamedTuple
import numpy as np


class Sample(NamedTuple):
    """state observed at time t and the control computed from it"""
    t: float
    x: np.ndarray
    u: np.ndarray


@dataclass(frozen=True)
class Trajectory:
    """
    simulation output, one sample per step in increasing time order

    attributes
        time: sample times (N,)
        states: pre-update states (N x n)
        controls: saturated controls applied at each sample (N x m)
        final_state: state after the last transition (n,), x0 when N == 0
    """
    time: np.ndarray
    states: np.ndarray
    controls: np.ndarray
    final_state: np.ndarray

    def __post_init__(self):
        for name in ('time', 'states', 'controls', 'final_state'):
            getattr(self, name).setflags(write=False)

    def __len__(self) -> int:
        return self.time.shape[0]

    def __iter__(self) -> Iterator[Sample]:
        for k in range(len(self)):
            yield self[k]

    def __getitem__(self, k: int) -> Sample:
        return Sample(float(self.time[k]), self.states[k], self.controls[k])

    @property
    def n(self) -> int:
        return self.final_state.shape[0]

    @property
    def m(self) -> int:
        return self.controls.shape[1]

    def saturated(self, control_min, control_max) -> np.ndarray:
        """mask of samples where some control sits on a bound"""
        lo = np.broadcast_to(np.asarray(control_min, dtype=float), (self.m,))
        hi = np.broadcast_to(np.asarray(control_max, dtype=float), (self.m,))
        return np.any((self.controls <= lo) | (self.controls >= hi), axis=1)

    def cost(self, Q: np.ndarray, R: np.ndarray) -> float:
        """accumulated stage cost sum_k x_k^T Q x_k + u_k^T R u_k"""
        Q = np.asarray(Q, dtype=float)
        R = np.atleast_2d(np.asarray(R, dtype=float))

        cost = 0.0
        for _, x, u in self:
            cost += x @ Q @ x
            cost += u @ R @ u
        return float(cost)
