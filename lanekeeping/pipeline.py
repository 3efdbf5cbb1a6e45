# end-to-end lane keeping, Riccati synthesis then closed-loop simulation

import logging
from dataclasses import dataclass
from typing import Optional

from closedloop.simulator import ClosedLoopSimulator
from closedloop.trajectory import Trajectory
from lqr.solvers import RiccatiSolution, RiccatiSolver
from lqr.systems import CostWeights, LinearSystem

from .config import LaneKeepingConfig
from .export import LaneKeepingSummary
from .model import lateral_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaneKeepingResult:
    config: LaneKeepingConfig
    system: LinearSystem
    weights: CostWeights
    solution: RiccatiSolution
    trajectory: Trajectory

    @property
    def gain(self):
        return self.solution.K

    def summary(self) -> LaneKeepingSummary:
        return LaneKeepingSummary.from_run(self.trajectory, self.solution.K)


def run_lane_keeping(config: Optional[LaneKeepingConfig] = None) -> LaneKeepingResult:
    """
    synthesize the steering gain and simulate the lane-keeping loop

    the gain flows one way, solver -> simulator; nothing is written to disk
    """
    if config is None:
        config = LaneKeepingConfig()

    system = lateral_model(config.v, config.L, config.dt)
    weights = CostWeights(config.state_cost(), config.control_cost())

    solver = RiccatiSolver.from_problem(system, weights,
                                        iterations=config.riccati_iterations,
                                        tol=config.riccati_tol)
    solution = solver.solve()

    simulator = ClosedLoopSimulator.from_system(system, solution.K,
                                                control_limits=config.control_limits())
    trajectory = simulator.simulate(config.initial_state(), config.dt, config.steps)

    result = LaneKeepingResult(config, system, weights, solution, trajectory)
    for line in result.summary().lines():
        logger.info(line)
    return result
