# error taxonomy for synthesis and simulation entry points


class LQRError(ValueError):
    """base class, raised before any output is produced"""


class InvalidCostWeights(LQRError):
    """R not positive definite, Q not symmetric PSD, or S singular"""


class InvalidTimeStep(LQRError):
    """dt <= 0 or not finite"""


class InvalidStepCount(LQRError):
    """negative or non-integer step/iteration count"""


class DimensionMismatch(LQRError):
    """A, B, Q, R, K or x0 inconsistent with the state/control dimension"""


class InvalidControlLimits(LQRError):
    """control_min > control_max, or limits of the wrong shape"""
