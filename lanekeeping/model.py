# kinematic lateral model linearized around straight motion

import numpy as np

from lqr.systems import LinearSystem


def lateral_model(v: float, L: float, dt: float) -> LinearSystem:
    """
    discrete lateral error dynamics, state [ey, epsi], control delta

        ey_{k+1}   = ey_k + dt * v * epsi_k
        epsi_{k+1} = epsi_k + dt * v / L * delta_k

    args:
        v: forward speed (m/s)
        L: wheelbase (m)
        dt: sample interval (s)
    """
    A = np.array([[1.0, dt * v],
                  [0.0, 1.0]])
    B = np.array([[0.0],
                  [dt * v / L]])
    return LinearSystem(A, B)
