# lane-keeping records, run summary and CSV sink

import logging
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple
import numpy as np

from closedloop.trajectory import Trajectory

logger = logging.getLogger(__name__)

CSV_HEADER = "t,ey,epsi,delta"


class LaneKeepingRecord(NamedTuple):
    time: float           # s
    lateral_error: float  # m
    heading_error: float  # rad
    control: float        # steering angle, rad


def records(trajectory: Trajectory) -> Iterator[LaneKeepingRecord]:
    """one record per simulation step, in time order"""
    for t, x, u in trajectory:
        yield LaneKeepingRecord(t, float(x[0]), float(x[1]), float(u[0]))


@dataclass(frozen=True)
class LaneKeepingSummary:
    """final state and gain of a run, read-only view over computed data"""
    final_lateral_error: float
    final_heading_error: float
    gain: np.ndarray

    @classmethod
    def from_run(cls, trajectory: Trajectory, K: np.ndarray) -> 'LaneKeepingSummary':
        ey, epsi = trajectory.final_state
        return cls(float(ey), float(epsi), np.array(K, dtype=float).reshape(-1))

    def lines(self) -> List[str]:
        gain = ", ".join(f"{k:.4f}" for k in self.gain)
        return [
            f"Final ey={self.final_lateral_error:.4f}, epsi={self.final_heading_error:.4f}",
            f"Gain K = [{gain}]",
        ]

    def __str__(self) -> str:
        return "\n".join(self.lines())


def write_csv(trajectory: Trajectory, path) -> None:
    """
    write t,ey,epsi,delta rows with six-decimal fixed-point formatting

    args:
        trajectory: lane-keeping trajectory (n = 2, m = 1)
        path: file name or open text handle
    """
    if trajectory.n != 2 or trajectory.m != 1:
        raise ValueError(
            f"expected [ey, epsi] states and one control, got n={trajectory.n}, m={trajectory.m}")

    table = np.column_stack([trajectory.time, trajectory.states, trajectory.controls])
    np.savetxt(path, table.reshape(-1, 4), fmt="%.6f", delimiter=",",
               header=CSV_HEADER, comments="")

    logger.info("wrote %d samples to %s", len(trajectory), path)
