# LQR lane keeping example

import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from lanekeeping import LaneKeepingConfig, run_lane_keeping, write_csv


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("="*80)
    print("LQR lane keeping with a kinematic lateral model")
    print("="*80)

    # x = [ey, epsi]
    # u = [delta]
    config = LaneKeepingConfig()

    print(f"  Speed: v = {config.v} m/s, wheelbase L = {config.L} m")
    print(f"  Sampling: dt = {config.dt} s, {config.steps} steps")
    print(f"  Initial state: ey = {config.ey0} m, epsi = {config.epsi0} rad")

    print(f"\nSolving Riccati equation ({config.riccati_iterations} iterations)...")
    result = run_lane_keeping(config)

    out_path = "lqr_log.csv"
    write_csv(result.trajectory, out_path)

    print("\nLQR lane keeping simulation finished.")
    print(f"CSV saved to {out_path} (t, ey, epsi, delta).")
    print(result.summary())

    print(f"\nTrajectory with first 5 steps:")
    print(f"  k    t       ey        epsi      delta")
    print(f"  " + "-"*42)
    for k, (t, x, u) in enumerate(result.trajectory):
        if k >= 5:
            break
        print(f"  {k:2d}  {t:5.2f}  {x[0]:8.4f}  {x[1]:8.4f}  {u[0]:8.4f}")

    print("\n" + "="*80)


if __name__ == '__main__':
    main()
