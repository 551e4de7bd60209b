"""Airframe dynamics: net force and torque of a multirotor for one instant.

Equations adapted from "Modelling and control of quadcopter"
(Luukkonen, Aalto University, 2011). Rigid-body integration is left to the
caller: this module only evaluates the wrench (or the accelerations it
produces) for the current pose and rotor commands.
"""

from typing import NamedTuple, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from .errors import DegenerateConstruction, InvalidInputLength
from .propeller import PropellerInfo, propeller_force, propeller_reaction_torque


class ForceTorque(NamedTuple):
    """Net world-frame force [N] and torque [N·m]."""
    force: np.ndarray
    torque: np.ndarray


class Accelerations(NamedTuple):
    """World-frame linear [m/s²] and angular [rad/s²] acceleration."""
    linear: np.ndarray
    angular: np.ndarray


def gyroscopic_torque(angular_velocity: np.ndarray, inertia: np.ndarray) -> np.ndarray:
    """Euler coupling term omega × (I·omega); both factors in the same frame."""
    return np.cross(angular_velocity, inertia @ angular_velocity)


def world_inertia(orientation: Rotation, inertia: np.ndarray) -> np.ndarray:
    """Rotate a body-frame inertia tensor into the world frame: R·I·Rᵀ."""
    R = orientation.as_matrix()
    return R @ inertia @ R.T


class Multicopter:
    """Ordered, non-empty rotor layout of a vehicle.

    The order of ``propellers`` fixes the order of the control-input vector.
    """

    def __init__(self, propellers: Sequence[PropellerInfo]):
        propellers = tuple(propellers)
        if not propellers:
            raise DegenerateConstruction("Don't try to simulate a 0-copter")
        self._propellers = propellers

    @property
    def propellers(self) -> tuple[PropellerInfo, ...]:
        return self._propellers

    def __len__(self) -> int:
        return len(self._propellers)

    def _check_inputs(self, control_inputs) -> np.ndarray:
        omegas = np.asarray(control_inputs, dtype=np.float64).reshape(-1)
        if omegas.shape[0] != len(self._propellers):
            raise InvalidInputLength(len(self._propellers), omegas.shape[0])
        return omegas

    def body_wrench(self, control_inputs) -> ForceTorque:
        """Net thrust and propeller torque in the body frame."""
        omegas = self._check_inputs(control_inputs)

        # the force of each prop
        forces = [propeller_force(p, w) for p, w in zip(self._propellers, omegas)]
        thrust = np.sum(forces, axis=0)

        # thrust moment about the center of mass plus signed rotor drag;
        # drag is a scalar about the thrust axis, independent of position
        torque = np.zeros(3)
        for propeller, force, omega in zip(self._propellers, forces, omegas):
            torque += np.cross(propeller.position, force)
            torque += propeller_reaction_torque(propeller, omega) * propeller.direction

        return ForceTorque(thrust, torque)

    def force_torque(self, orientation: Rotation, angular_velocity, control_inputs,
                     inertia: np.ndarray) -> ForceTorque:
        """Net world-frame force and torque for the current pose and rotor rates.

        Args:
            orientation: Body -> world rotation
            angular_velocity: World-frame angular velocity [rad/s]
            control_inputs: Per-rotor spin rates [rad/s], one per propeller
            inertia: 3x3 inertia tensor in the body frame [kg·m²]

        Returns:
            ForceTorque with both vectors in the world frame

        Raises:
            InvalidInputLength: if len(control_inputs) != number of rotors
        """
        thrust, propeller_torque = self.body_wrench(control_inputs)
        omega = np.asarray(angular_velocity, dtype=np.float64)

        force = orientation.apply(thrust)
        torque = orientation.apply(propeller_torque) - gyroscopic_torque(
            omega, world_inertia(orientation, np.asarray(inertia, dtype=np.float64))
        )
        return ForceTorque(force, torque)

    def accelerations(self, orientation: Rotation, angular_velocity, control_inputs,
                      mass: float, inertia: np.ndarray,
                      external_force=None, external_torque=None) -> Accelerations:
        """Linear and angular acceleration instead of a wrench.

        ``external_force`` / ``external_torque`` (world frame) are added before
        dividing by mass and applying the inverse world-frame inertia, e.g.
        gravity ``mass * g`` or a collision response.
        """
        if mass <= 0.0:
            raise DegenerateConstruction("Mass must be positive")
        force, torque = self.force_torque(orientation, angular_velocity, control_inputs, inertia)
        if external_force is not None:
            force = force + np.asarray(external_force, dtype=np.float64)
        if external_torque is not None:
            torque = torque + np.asarray(external_torque, dtype=np.float64)

        I_world = world_inertia(orientation, np.asarray(inertia, dtype=np.float64))
        return Accelerations(force / mass, np.linalg.solve(I_world, torque))
