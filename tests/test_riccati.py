# tests for Riccati solver

import numpy as np
import scipy.linalg as la
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from lqr.solvers import RiccatiSolver, dlqr
from lqr.systems import CostWeights, LinearSystem
from lqr.errors import DimensionMismatch, InvalidCostWeights, InvalidStepCount


A_LANE = np.array([[1.0, 0.5], [0.0, 1.0]])
B_LANE = np.array([[0.0], [0.2]])
Q_LANE = np.diag([3.0, 1.5])
R_LANE = np.array([[0.5]])


def scalar_dare(a, b, q, r):
    """positive root of b^2 p^2 + (r - q b^2 - a^2 r) p - q r = 0"""
    c1 = r - q * b**2 - a**2 * r
    p = (-c1 + np.sqrt(c1**2 + 4 * b**2 * q * r)) / (2 * b**2)
    k = a * b * p / (r + b**2 * p)
    return p, k


def test_riccati_scalar_golden_ratio():
    """x+ = x + u with unit weights converges to the golden ratio"""
    solver = RiccatiSolver([[1.0]], [[1.0]], [[1.0]], [[1.0]], iterations=200)
    solution = solver.solve()

    phi = (1 + np.sqrt(5)) / 2
    assert abs(solution.P[0, 0] - phi) < 1e-6
    assert abs(solution.K[0, 0] - (phi - 1)) < 1e-6
    assert solution.iterations == 200
    assert solution.converged is None

    print(f"Riccati golden ratio test passed, K = {solution.K[0, 0]:.6f}")


def test_riccati_scalar_closed_form():
    """open-loop unstable scalar plant against the analytic DARE root"""
    a, b, q, r = 1.2, 0.5, 2.0, 0.3
    p_exact, k_exact = scalar_dare(a, b, q, r)

    K, P = dlqr([[a]], [[b]], [[q]], r, iterations=500)

    assert K.shape == (1, 1)
    assert abs(P[0, 0] - p_exact) < 1e-6
    assert abs(K[0, 0] - k_exact) < 1e-6

    print(f"Riccati scalar closed form test passed, K = {K[0, 0]:.6f}")


def test_riccati_matches_scipy_dare():
    """800 iterations on the lane model reach the DARE fixed point"""
    solution = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800).solve()

    P_ref = la.solve_discrete_are(A_LANE, B_LANE, Q_LANE, R_LANE)
    K_ref = la.solve(R_LANE + B_LANE.T @ P_ref @ B_LANE, B_LANE.T @ P_ref @ A_LANE)

    np.testing.assert_allclose(solution.P, P_ref, rtol=1e-6, atol=1e-9)
    np.testing.assert_allclose(solution.K, K_ref, rtol=1e-6, atol=1e-9)
    assert solution.riccati_residual(A_LANE, B_LANE, Q_LANE, R_LANE) < 1e-8
    assert solution.is_stabilizing(A_LANE, B_LANE)
    assert solution.spectral_radius(A_LANE, B_LANE) < 1.0

    print(f"Riccati vs scipy DARE test passed, K = {solution.K.ravel()}")


def test_riccati_lane_gain_values():
    """gain of the 800-iteration lane run, pinned"""
    K, _ = dlqr(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800)

    np.testing.assert_allclose(K, [[1.65450796442676, 3.54609014525108]], rtol=1e-7)

    # with t = sqrt(3 S), S = R + B^T P B, the 2 x 1 DARE reduces to
    # t^4 - 0.3 t^3 - 3.18 t^2 - 0.45 t + 2.25 = 0 and K1 = 3 / t
    t = 3.0 / K[0, 0]
    assert abs(t**4 - 0.3 * t**3 - 3.18 * t**2 - 0.45 * t + 2.25) < 1e-10

    delta0 = np.clip(-(K[0, 0] * 1.0 + K[0, 1] * 0.20), -0.6, 0.6)
    assert delta0 == -0.6

    print(f"Riccati lane gain test passed, K = {K.ravel()}")


def test_riccati_gain_differences_shrink():
    """|K_{N+1} - K_N| is non-increasing"""
    gains = [dlqr([[1.0]], [[1.0]], [[1.0]], [[1.0]], iterations=N)[0][0, 0]
             for N in range(1, 40)]
    diffs = np.abs(np.diff(gains))
    for d_prev, d_next in zip(diffs[:-1], diffs[1:]):
        assert d_next <= d_prev + 1e-15

    lane_gains = [dlqr(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=N)[0]
                  for N in (5, 6, 10, 11, 20, 21, 40, 41)]
    lane_diffs = [np.max(np.abs(lane_gains[i + 1] - lane_gains[i]))
                  for i in range(0, len(lane_gains), 2)]
    for d_prev, d_next in zip(lane_diffs[:-1], lane_diffs[1:]):
        assert d_next <= d_prev or d_next < 1e-12

    print("Riccati convergence test passed")


def test_riccati_fixed_count_is_reproducible():
    """identical inputs give bit-identical gains"""
    first = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800).solve()
    second = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800).solve()

    assert np.array_equal(first.K, second.K)
    assert np.array_equal(first.P, second.P)

    print("Riccati reproducibility test passed")


def test_riccati_tolerance_stops_early():
    """opt-in tolerance ends the loop once P stops moving"""
    fixed = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800).solve()
    early = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=800, tol=1e-10).solve()

    assert early.converged is True
    assert early.iterations < 800
    assert early.delta < 1e-10
    np.testing.assert_allclose(early.K, fixed.K, rtol=1e-8)

    starved = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=1, tol=1e-12).solve()
    assert starved.converged is False
    assert starved.iterations == 1

    print(f"Riccati tolerance test passed ({early.iterations} iterations)")


def test_riccati_zero_iterations():
    """without updates the gain comes straight from P = Q"""
    solution = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=0).solve()

    S = R_LANE + B_LANE.T @ Q_LANE @ B_LANE
    K_expected = np.linalg.inv(S) @ B_LANE.T @ Q_LANE @ A_LANE

    np.testing.assert_allclose(solution.P, Q_LANE)
    np.testing.assert_allclose(solution.K, K_expected)
    assert solution.iterations == 0
    assert solution.delta is None


def test_riccati_multi_input():
    """n x m recursion is not tied to the 2 x 1 lane model"""
    dt = 0.1
    A = np.array([[1.0, dt, 0.0],
                  [0.0, 1.0, dt],
                  [0.0, 0.0, 1.0]])
    B = np.array([[0.0, 0.0],
                  [dt, 0.0],
                  [0.0, dt]])
    Q = np.eye(3)
    R = np.diag([0.5, 2.0])

    solution = RiccatiSolver(A, B, Q, R, iterations=2000).solve()
    P_ref = la.solve_discrete_are(A, B, Q, R)

    assert solution.K.shape == (2, 3)
    np.testing.assert_allclose(solution.P, P_ref, rtol=1e-6)
    assert solution.is_stabilizing(A, B)


def test_riccati_from_problem():
    system = LinearSystem(A_LANE, B_LANE)
    weights = CostWeights([3.0, 1.5], 0.5)

    via_problem = RiccatiSolver.from_problem(system, weights).solve()
    direct = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE).solve()

    assert np.array_equal(via_problem.K, direct.K)


def test_riccati_does_not_mutate_inputs():
    A, B, Q, R = A_LANE.copy(), B_LANE.copy(), Q_LANE.copy(), R_LANE.copy()
    RiccatiSolver(A, B, Q, R, iterations=50).solve()

    assert np.array_equal(A, A_LANE)
    assert np.array_equal(B, B_LANE)
    assert np.array_equal(Q, Q_LANE)
    assert np.array_equal(R, R_LANE)


def test_riccati_accessors_before_solve():
    solver = RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE)
    with pytest.raises(RuntimeError):
        solver.get_feedback_gain()
    with pytest.raises(RuntimeError):
        solver.get_cost_to_go()

    solution = solver.solve()
    assert solver.get_feedback_gain() is solution.K
    assert solver.get_cost_to_go() is solution.P


@pytest.mark.parametrize("R", [0.0, -0.5, [[0.0]], [[-1.0]]])
def test_riccati_rejects_non_positive_R(R):
    with pytest.raises(InvalidCostWeights):
        RiccatiSolver(A_LANE, B_LANE, Q_LANE, R)


def test_riccati_rejects_bad_Q():
    with pytest.raises(InvalidCostWeights):
        RiccatiSolver(A_LANE, B_LANE, [[1.0, 0.5], [0.0, 1.0]], R_LANE)
    with pytest.raises(InvalidCostWeights):
        RiccatiSolver(A_LANE, B_LANE, np.diag([1.0, -1.0]), R_LANE)


def test_riccati_singular_S_is_reported():
    """overflowing P makes S non-finite, reported instead of returning NaN"""
    with np.errstate(all='ignore'):
        with pytest.raises(InvalidCostWeights):
            RiccatiSolver([[1e200]], [[1.0]], [[1.0]], [[1.0]], iterations=5).solve()


def test_riccati_ill_conditioned_S_is_reported():
    """a nearly singular multi-input S is rejected before the solve"""
    B = np.array([[1.0, 0.0],
                  [0.0, 0.0]])
    R = np.diag([1.0, 1e-20])

    solver = RiccatiSolver(np.eye(2), B, np.eye(2), R, iterations=10)
    with pytest.raises(InvalidCostWeights, match="singular at iteration 1"):
        solver.solve()
    assert solver.solution is None


def test_riccati_singular_solve_is_reported():
    with pytest.raises(InvalidCostWeights, match="cannot be inverted"):
        RiccatiSolver._solve(np.zeros((2, 2)), np.ones((2, 1)), 3)


def test_riccati_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, np.eye(3), R_LANE)
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, Q_LANE, np.eye(2))
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, np.ones((3, 1)), Q_LANE, R_LANE)
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(np.ones((2, 3)), B_LANE, Q_LANE, R_LANE)

    # cost weights that are not square
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, np.ones((2, 3)), 0.5)
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, np.ones((2, 2, 2)), 0.5)
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, 3.0, 0.5)
    with pytest.raises(DimensionMismatch):
        RiccatiSolver(A_LANE, B_LANE, Q_LANE, np.ones((1, 2)))


@pytest.mark.parametrize("iterations", [-1, 2.5, True])
def test_riccati_rejects_bad_iteration_count(iterations):
    with pytest.raises(InvalidStepCount):
        RiccatiSolver(A_LANE, B_LANE, Q_LANE, R_LANE, iterations=iterations)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
