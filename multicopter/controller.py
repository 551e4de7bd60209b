"""Cascaded altitude/attitude hold controller for the multicopter.

Architecture:
    Operator input → altitude set-point, bank angles, yaw rate
    Altitude PID → desired vertical thrust (gravity compensated)
    Tilt compensation → total thrust needed along the body up axis
    Attitude PD → roll / pitch / yaw demands (body-frame rates)
    Motor mixing → per-rotor thrust proportions around a 1/N baseline
    Saturation-preserving scaling → no rotor asked for negative thrust
    Proportions × thrust → per-rotor spin rates [rad/s]
"""

import json
import os

import numpy as np

from .drone_config import WORLD_UP

# ── Load default gains from flight_gains.json ──
_GAINS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "flight_gains.json")
with open(_GAINS_PATH) as _f:
    DEFAULT_GAINS = json.load(_f)


def angle_diff(target: float, source: float) -> float:
    """Shortest signed angular difference target - source in range [-pi, pi]."""
    return (target - source + np.pi) % (2.0 * np.pi) - np.pi


def mixing_signs(propellers) -> np.ndarray:
    """(N, 3) matrix of ±1/0 giving each rotor's roll, pitch and yaw authority.

    Roll and pitch signs follow the moment a rotor's thrust produces about the
    body x and y axes (left/right and front/back placement); the yaw sign is
    the rotor's reaction torque sign.
    """
    signs = np.zeros((len(propellers), 3))
    for i, propeller in enumerate(propellers):
        moment = np.cross(propeller.position, propeller.direction)
        signs[i, 0] = np.sign(moment[0])
        signs[i, 1] = np.sign(moment[1])
        signs[i, 2] = propeller.rotation_direction.sign
    return signs


def mix_torques(roll: float, pitch: float, yaw: float, signs: np.ndarray) -> np.ndarray:
    """Torque-derived proportion offsets: ±roll ±pitch ±yaw per rotor."""
    return signs @ np.array([roll, pitch, yaw], dtype=np.float64)


def scale_proportions(offsets: np.ndarray, baseline: float) -> tuple[np.ndarray, float]:
    """Add offsets to the baseline, shrinking all of them by one shared factor.

    If any offset is below -baseline the rotor would need negative thrust.
    The shared factor is min(-baseline / offset) over those rotors, so the
    ratios between offsets are preserved.

    Returns:
        (proportions, scale) with scale in (0, 1]
    """
    offsets = np.asarray(offsets, dtype=np.float64)
    saturated = offsets < -baseline
    scale = 1.0
    if np.any(saturated):
        scale = float(np.min(-baseline / offsets[saturated]))
    # clip rounding residue on the binding rotor
    return np.maximum(baseline + scale * offsets, 0.0), scale


def tilt_compensated_thrust(vertical_thrust: float, tilt_coefficient: float, cutoff: float) -> float:
    """Total thrust that yields ``vertical_thrust`` at the given tilt.

    Zero when the vehicle is close to sideways/inverted (coefficient at or
    below ``cutoff``) or when negative lift is requested.
    """
    if tilt_coefficient <= cutoff or vertical_thrust < 0.0:
        return 0.0
    return vertical_thrust / tilt_coefficient


class FlightController:
    """Altitude-hold and attitude-hold controller producing rotor spin rates.

    Persistent state is the desired altitude (latched on the first tick) and
    the altitude integral. Both survive across ticks until ``reset()``.
    """

    def __init__(self, gains: dict | None = None):
        g = gains or DEFAULT_GAINS
        # Altitude gains
        self.kp_alt = g["altitude"]["kp"]
        self.kd_alt = g["altitude"]["kd"]
        self.ki_alt = g["altitude"]["ki"]
        # Attitude gains (roll and pitch)
        self.kp_att = g["attitude"]["kp"]
        self.kd_att = g["attitude"]["kd"]
        # Yaw gains
        self.kp_yaw = g["yaw"]["kp"]
        self.kd_yaw = g["yaw"]["kd"]
        # Operator set-points
        op = g["operator"]
        self.bank_angle = np.deg2rad(op["bank_angle_deg"])
        self.yaw_rate = op["yaw_rate"]
        self.climb_rate = op["climb_rate"]
        self.tilt_cutoff = g["limits"]["tilt_cutoff"]
        # Persistent state
        self.desired_altitude: float | None = None
        self.altitude_integral = 0.0

    def reset(self):
        """Clear the altitude latch and integral (explicit vehicle reset)."""
        self.desired_altitude = None
        self.altitude_integral = 0.0

    def setpoints(self, operator, dt: float) -> tuple[float, float, float, float]:
        """Map held operator commands to set-points.

        Does not touch the altitude latch or integral.

        Returns:
            (desired roll, desired pitch, desired yaw rate, altitude change)
        """
        climb = self.climb_rate * dt * (int(operator.ascend) - int(operator.descend))
        des_pitch = self.bank_angle * (int(operator.forward) - int(operator.backward))
        des_roll = self.bank_angle * (int(operator.right) - int(operator.left))
        des_yaw_rate = self.yaw_rate * (int(operator.yaw_left) - int(operator.yaw_right))
        return des_roll, des_pitch, des_yaw_rate, climb

    def compute(self, state, vehicle, ctx) -> tuple[np.ndarray, dict]:
        """Compute per-rotor spin rates for one tick.

        Args:
            state: VehicleState settled at the end of the previous tick
            vehicle: Vehicle providing the rotor layout and mass
            ctx: TickContext with dt, gravity and operator input

        Returns:
            omegas: Per-rotor spin rates [rad/s] in the vehicle's rotor order
            diag: Diagnostics dict with set-points, thrust and mixing data
        """
        propellers = vehicle.multicopter.propellers
        roll, pitch, yaw = state.attitude
        wx, wy, wz = state.body_angular_velocity

        # ── 1. Latch hover altitude on the first tick ──
        if self.desired_altitude is None:
            self.desired_altitude = state.altitude

        # ── 2. Operator input → set-points ──
        des_roll, des_pitch, des_yaw_rate, climb = self.setpoints(ctx.operator, ctx.dt)
        self.desired_altitude += climb
        # yaw is rate controlled: the angle set-point follows the vehicle
        des_yaw = yaw

        # ── 3. Altitude PID → vertical thrust ──
        alt_err = self.desired_altitude - state.altitude
        self.altitude_integral += alt_err * ctx.dt
        vertical_velocity = float(np.dot(state.velocity, WORLD_UP))
        pid = (self.kp_alt * alt_err
               + self.kd_alt * -vertical_velocity
               + self.ki_alt * self.altitude_integral)
        vertical_thrust = pid - vehicle.mass * float(np.dot(ctx.gravity, WORLD_UP))

        # ── 4. Tilt compensation ──
        tilt = float(np.dot(state.body_up, WORLD_UP))
        thrust = tilt_compensated_thrust(vertical_thrust, tilt, self.tilt_cutoff)

        # ── 5. Attitude PD ──
        roll_torque = self.kp_att * angle_diff(des_roll, roll) - self.kd_att * wx
        pitch_torque = self.kp_att * angle_diff(des_pitch, pitch) - self.kd_att * wy
        yaw_torque = self.kp_yaw * angle_diff(des_yaw, yaw) + self.kd_yaw * (des_yaw_rate - wz)

        # ── 6-7. Mixing + saturation-preserving scaling ──
        baseline = 1.0 / len(propellers)
        offsets = mix_torques(roll_torque, pitch_torque, yaw_torque, mixing_signs(propellers))
        proportions, scale = scale_proportions(offsets, baseline)

        # ── 8. Rotor thrust share → spin rate ──
        omegas = np.zeros(len(propellers))
        for i, propeller in enumerate(propellers):
            if propeller.thrust_constant > 0.0:
                omegas[i] = np.sqrt(thrust * proportions[i] / propeller.thrust_constant)

        diag = {
            "des_att": np.array([des_roll, des_pitch, des_yaw]),
            "des_yaw_rate": des_yaw_rate,
            "desired_altitude": self.desired_altitude,
            "altitude_error": alt_err,
            "vertical_thrust": vertical_thrust,
            "thrust": thrust,
            "torques": np.array([roll_torque, pitch_torque, yaw_torque]),
            "proportions": proportions,
            "saturation_scale": scale,
        }
        return omegas, diag
