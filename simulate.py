"""Fly a scripted operator session with the multicopter flight controller.

Per tick: the operator schedule gives the held commands, the flight
controller turns them into rotor spin rates, the dynamics turn those into a
world-frame wrench, and MuJoCo integrates the wrench.

Usage:
    python simulate.py                          # default session, headless
    python simulate.py --render                 # MuJoCo viewer
    python simulate.py --plot                   # save plots to ./plots/sim/
    python simulate.py --seconds 20             # longer session
    python simulate.py --schedule session.json  # custom operator schedule
"""

import argparse
import json
import logging
import os
import time

import numpy as np
import matplotlib.pyplot as plt

from envs import MulticopterEnv
from multicopter import (
    DEFAULT_GAINS, OperatorInput, TickContext, TickStatus,
    default_quadcopter, load_vehicle, step_vehicle,
)

PLOTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "plots", "sim")

# (start [s], end [s], held commands)
DEFAULT_SCHEDULE = [
    (2.0, 3.0, ["ascend"]),
    (4.0, 5.5, ["forward"]),
    (6.5, 7.5, ["yaw_left"]),
    (8.0, 9.0, ["right"]),
    (10.0, 11.0, ["descend"]),
]


def load_schedule(path: str) -> list:
    """Read [{"start": s, "end": s, "keys": [...]}, ...] from JSON."""
    with open(path) as f:
        return [(e["start"], e["end"], e["keys"]) for e in json.load(f)]


def operator_at(schedule, t: float) -> OperatorInput:
    """Operator snapshot at time t: union of every schedule entry active at t."""
    keys = set()
    for start, end, held in schedule:
        if start <= t < end:
            keys.update(held)
    return OperatorInput.from_keys(keys)


def plot_session(data: dict, save_dir: str = PLOTS_DIR):
    """Generate performance plots for one simulated session."""
    os.makedirs(save_dir, exist_ok=True)

    t = np.array(data["times"])
    pos = np.array(data["positions"])
    alt_sp = np.array(data["desired_altitudes"])
    att = np.rad2deg(np.array(data["attitudes"]))
    des_att = np.rad2deg(np.array(data["des_attitudes"]))
    omegas = np.array(data["motor_commands"])
    thrust = np.array(data["thrust"])
    scale = np.array(data["saturation_scale"])

    fig, axes = plt.subplots(3, 2, figsize=(14, 11))
    fig.suptitle("Multicopter flight session", fontsize=14)

    ax = axes[0, 0]
    ax.plot(t, pos[:, 2], color="b", label="altitude")
    ax.plot(t, alt_sp, color="b", linestyle="--", alpha=0.5, label="desired")
    ax.set_ylabel("Altitude (m)")
    ax.set_title("Altitude hold (solid=actual, dashed=desired)")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[0, 1]
    ax.plot(pos[:, 0], pos[:, 1], color="k")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("y (m)")
    ax.set_title("Ground track")
    ax.axis("equal")
    ax.grid(True, alpha=0.3)

    ax = axes[1, 0]
    for i, (label, color) in enumerate(zip(["roll", "pitch"], ["r", "g"])):
        ax.plot(t, att[:, i], color=color, label=label)
        ax.plot(t, des_att[:, i], color=color, linestyle="--", alpha=0.5)
    ax.set_ylabel("Angle (deg)")
    ax.set_title("Attitude (solid=actual, dashed=desired)")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1, 1]
    ax.plot(t, att[:, 2], color="b")
    ax.set_ylabel("Yaw (deg)")
    ax.set_title("Heading")
    ax.grid(True, alpha=0.3)

    ax = axes[2, 0]
    for i in range(omegas.shape[1]):
        ax.plot(t, omegas[:, i], label=f"M{i+1}")
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Spin rate (rad/s)")
    ax.set_title("Motor commands")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[2, 1]
    ax.plot(t, thrust, color="k", label="thrust (N)")
    ax.plot(t, scale, color="r", label="saturation scale")
    ax.set_xlabel("Time (s)")
    ax.set_title("Total thrust / saturation scale")
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    filepath = os.path.join(save_dir, "session.png")
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    print(f"  Plot saved to {filepath}")


def run(seconds: float = 12.0, render: bool = False, plot: bool = False,
        gains_file: str | None = None, vehicle_file: str | None = None,
        schedule_file: str | None = None) -> dict:
    """Run one session and return the recorded data."""
    gains = DEFAULT_GAINS
    if gains_file and os.path.exists(gains_file):
        with open(gains_file) as f:
            gains = json.load(f)
        print(f"Loaded gains from {gains_file}")

    vehicle = load_vehicle(vehicle_file, gains) if vehicle_file else default_quadcopter(gains)
    schedule = load_schedule(schedule_file) if schedule_file else DEFAULT_SCHEDULE
    env = MulticopterEnv(vehicle, render_mode="human" if render else None)
    env.reset()

    data = {
        "times": [], "positions": [], "attitudes": [], "des_attitudes": [],
        "desired_altitudes": [], "motor_commands": [], "thrust": [], "saturation_scale": [],
    }
    skipped = 0
    steps = int(round(seconds / env.dt))
    print(f"Flying {vehicle} for {seconds:.1f}s ({steps} ticks)")

    for step in range(steps):
        t = step * env.dt
        ctx = TickContext(dt=env.dt, gravity=env.gravity, operator=operator_at(schedule, t))
        state = env.state
        result = step_vehicle(vehicle, state, ctx)

        if result.status is TickStatus.PAUSED:
            continue
        if result.reset_requested:
            env.reset()
            continue
        if result.ok:
            force, torque = result.force, result.torque
        else:
            skipped += 1
            force, torque = np.zeros(3), np.zeros(3)

        _, _, terminated, _, info = env.apply_force_torque(force, torque, result.control_inputs)

        data["times"].append(t)
        data["positions"].append(state.position.copy())
        data["attitudes"].append(state.attitude.copy())
        data["des_attitudes"].append(result.diag["des_att"].copy())
        data["desired_altitudes"].append(result.diag["desired_altitude"])
        data["motor_commands"].append(result.control_inputs.copy())
        data["thrust"].append(result.diag["thrust"])
        data["saturation_scale"].append(result.diag["saturation_scale"])

        if render:
            env.render()
            time.sleep(env.dt)

        if step % 100 == 0:
            s = info["state"]
            print(f"  t={t:5.2f}s: pos=[{s[0]:.2f}, {s[1]:.2f}, {s[2]:.2f}], "
                  f"yaw={np.rad2deg(s[5]):.1f}deg, omegas={np.round(result.control_inputs, 1)}")

        if terminated:
            print(f"  TERMINATED at t={t:.2f}s (state out of bounds)")
            break

    env.close()

    final = env.state
    print("\n=== Session Summary ===")
    print(f"Ticks:          {len(data['times'])}")
    print(f"Skipped ticks:  {skipped}")
    print(f"Final position: {np.round(final.position, 3)}")
    print(f"Final attitude: {np.round(np.rad2deg(final.attitude), 2)} deg")
    if data["desired_altitudes"]:
        print(f"Altitude error: {data['desired_altitudes'][-1] - final.altitude:+.3f} m")

    if plot and data["times"]:
        plot_session(data)

    return data


def main():
    parser = argparse.ArgumentParser(description="Multicopter flight controller session")
    parser.add_argument("--seconds", type=float, default=12.0,
                        help="Simulated session length in seconds")
    parser.add_argument("--render", action="store_true",
                        help="Open the MuJoCo viewer")
    parser.add_argument("--plot", action="store_true",
                        help="Save plots to ./plots/sim/")
    parser.add_argument("--gains", type=str, default=None,
                        help="Path to custom flight gains JSON file")
    parser.add_argument("--vehicle", type=str, default=None,
                        help="Path to a vehicle layout JSON file")
    parser.add_argument("--schedule", type=str, default=None,
                        help="Path to an operator schedule JSON file")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    run(
        seconds=args.seconds,
        render=args.render,
        plot=args.plot,
        gains_file=args.gains,
        vehicle_file=args.vehicle,
        schedule_file=args.schedule,
    )


if __name__ == "__main__":
    main()
