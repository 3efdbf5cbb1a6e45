# closed-loop simulation of linear plants under saturated state feedback

from .trajectory import Sample, Trajectory
from .simulator import ClosedLoopSimulator

__all__ = ['Sample', 'Trajectory', 'ClosedLoopSimulator']
