# LQR module, Riccati synthesis of state-feedback gains

from .errors import (LQRError, InvalidCostWeights, InvalidTimeStep,
                     InvalidStepCount, DimensionMismatch, InvalidControlLimits)
from .systems import LinearSystem, CostWeights
from .solvers import RiccatiSolver, RiccatiSolution, dlqr

__all__ = ['LQRError', 'InvalidCostWeights', 'InvalidTimeStep',
           'InvalidStepCount', 'DimensionMismatch', 'InvalidControlLimits',
           'LinearSystem', 'CostWeights',
           'RiccatiSolver', 'RiccatiSolution', 'dlqr']
