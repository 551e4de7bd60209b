"""Net force/torque of the airframe."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from multicopter import (
    DegenerateConstruction, InvalidInputLength, Multicopter, PropellerInfo,
    RotationDirection, VehicleState, default_quadcopter,
)
from multicopter.drone_config import G, GRAVITY, MASS, THRUST_CONSTANT
from multicopter.dynamics import gyroscopic_torque

IDENTITY = Rotation.identity()


def test_empty_layout_is_rejected():
    with pytest.raises(DegenerateConstruction):
        Multicopter([])


def test_wrong_input_length_is_rejected():
    vehicle = default_quadcopter()
    with pytest.raises(InvalidInputLength) as exc:
        vehicle.multicopter.force_torque(IDENTITY, np.zeros(3), [1.0, 2.0, 3.0], vehicle.inertia)
    assert exc.value.expected == 4
    assert exc.value.received == 3


def test_zero_spin_and_zero_rate_gives_no_wrench():
    vehicle = default_quadcopter()
    force, torque = vehicle.multicopter.force_torque(IDENTITY, np.zeros(3), np.zeros(4), vehicle.inertia)
    np.testing.assert_array_equal(force, np.zeros(3))
    np.testing.assert_array_equal(torque, np.zeros(3))


def test_hover_spin_rate_balances_weight():
    vehicle = default_quadcopter()
    omega = np.sqrt(MASS * G / 4 / THRUST_CONSTANT)
    force, torque = vehicle.force_torque(VehicleState.at_rest(2.0), [omega] * 4)
    np.testing.assert_allclose(force, [0.0, 0.0, MASS * G], atol=1e-9)
    np.testing.assert_allclose(torque, np.zeros(3), atol=1e-12)


def test_force_is_rotated_into_world_frame():
    vehicle = default_quadcopter()
    omega = vehicle.hover_spin_rate()
    rolled = Rotation.from_euler("x", 90, degrees=True)
    force, _ = vehicle.multicopter.force_torque(rolled, np.zeros(3), [omega] * 4, vehicle.inertia)
    np.testing.assert_allclose(force, [0.0, -MASS * G, 0.0], atol=1e-9)


def test_off_center_rotor_produces_thrust_moment():
    rotor = PropellerInfo([0.1, 0.0, 0.0], thrust_constant=1e-3, drag_constant=0.0)
    force, torque = Multicopter([rotor]).force_torque(IDENTITY, np.zeros(3), [100.0], np.eye(3))
    np.testing.assert_allclose(force, [0.0, 0.0, 10.0])
    np.testing.assert_allclose(torque, [0.0, -1.0, 0.0])


def test_drag_torque_acts_about_rotor_axis():
    ccw = PropellerInfo([0.0, 0.0, 0.0], thrust_constant=0.0, drag_constant=1e-4)
    cw = PropellerInfo([0.0, 0.0, 0.0], thrust_constant=0.0, drag_constant=1e-4,
                       rotation_direction=RotationDirection.CLOCKWISE)
    _, t_ccw = Multicopter([ccw]).force_torque(IDENTITY, np.zeros(3), [100.0], np.eye(3))
    _, t_cw = Multicopter([cw]).force_torque(IDENTITY, np.zeros(3), [100.0], np.eye(3))
    np.testing.assert_allclose(t_ccw, [0.0, 0.0, 1.0])
    np.testing.assert_allclose(t_cw, [0.0, 0.0, -1.0])


def test_gyroscopic_term_vanishes_for_isotropic_inertia():
    vehicle = default_quadcopter()
    omega = np.array([1.0, -2.0, 3.0])
    tilted = Rotation.from_euler("xyz", [0.3, -0.2, 1.1])
    _, torque = vehicle.multicopter.force_torque(tilted, omega, np.zeros(4), 0.01 * np.eye(3))
    np.testing.assert_allclose(torque, np.zeros(3), atol=1e-15)


def test_gyroscopic_term_vanishes_without_rotation():
    np.testing.assert_array_equal(gyroscopic_torque(np.zeros(3), np.diag([1.0, 2.0, 3.0])), np.zeros(3))


def test_gyroscopic_coupling_for_anisotropic_inertia():
    vehicle = default_quadcopter()
    inertia = np.diag([1.0, 2.0, 3.0])
    _, torque = vehicle.multicopter.force_torque(IDENTITY, [1.0, 1.0, 0.0], np.zeros(4), inertia)
    # omega x (I omega) = [1, 1, 0] x [1, 2, 0] = [0, 0, 1]
    np.testing.assert_allclose(torque, [0.0, 0.0, -1.0])


def test_force_torque_is_pure():
    vehicle = default_quadcopter()
    orientation = Rotation.from_euler("xyz", [0.1, 0.2, 0.3])
    omega = np.array([0.4, -0.5, 0.6])
    inputs = [310.0, 350.0, 390.0, 330.0]
    inertia = np.diag([0.01, 0.02, 0.03])
    first = vehicle.multicopter.force_torque(orientation, omega, inputs, inertia)
    second = vehicle.multicopter.force_torque(orientation, omega, inputs, inertia)
    assert np.array_equal(first.force, second.force)
    assert np.array_equal(first.torque, second.torque)


def test_accelerations_at_hover_cancel_gravity():
    vehicle = default_quadcopter()
    omega = vehicle.hover_spin_rate()
    linear, angular = vehicle.accelerations(VehicleState.at_rest(1.0), [omega] * 4, gravity=GRAVITY)
    np.testing.assert_allclose(linear, np.zeros(3), atol=1e-9)
    np.testing.assert_allclose(angular, np.zeros(3), atol=1e-9)


def test_accelerations_apply_inverse_inertia():
    rotor = PropellerInfo([0.1, 0.0, 0.0], thrust_constant=1e-3, drag_constant=0.0)
    linear, angular = Multicopter([rotor]).accelerations(
        IDENTITY, np.zeros(3), [100.0], mass=2.0, inertia=np.diag([0.1, 0.2, 0.3]),
    )
    np.testing.assert_allclose(linear, [0.0, 0.0, 5.0])
    np.testing.assert_allclose(angular, [0.0, -5.0, 0.0])


def test_accelerations_need_positive_mass():
    vehicle = default_quadcopter()
    with pytest.raises(DegenerateConstruction):
        vehicle.multicopter.accelerations(IDENTITY, np.zeros(3), np.zeros(4), 0.0, vehicle.inertia)
