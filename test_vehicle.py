"""Vehicle construction, layouts and serialization."""

import json
import os

import numpy as np
import pytest

from multicopter import (
    DegenerateConstruction, Multicopter, PropellerInfo, TickContext, Vehicle,
    VehicleState, default_quadcopter, load_vehicle,
)
from multicopter.drone_config import G, HOVER_SPIN_RATE

PLUS_QUAD = os.path.join(os.path.dirname(os.path.abspath(__file__)), "vehicles", "plus_quad.json")


def test_empty_rotor_list_fails_construction():
    with pytest.raises(DegenerateConstruction):
        Vehicle([])


def test_singular_inertia_fails_construction():
    rotors = [PropellerInfo.from_position([0.0, 0.0, 0.0])]
    with pytest.raises(DegenerateConstruction):
        Vehicle(Multicopter(rotors), mass=1.0, inertia=np.diag([1.0, 0.0, 1.0]))
    with pytest.raises(DegenerateConstruction):
        Vehicle(Multicopter(rotors), mass=1.0, inertia=np.ones((2, 2)))


def test_non_positive_mass_fails_construction():
    rotors = [PropellerInfo.from_position([0.0, 0.0, 0.0])]
    with pytest.raises(DegenerateConstruction):
        Vehicle(Multicopter(rotors), mass=0.0)


def test_diagonal_inertia_shorthand():
    rotors = [PropellerInfo.from_position([0.0, 0.0, 0.0])]
    vehicle = Vehicle(rotors, mass=1.0, inertia=[0.1, 0.2, 0.3])
    np.testing.assert_array_equal(vehicle.inertia, np.diag([0.1, 0.2, 0.3]))
    assert vehicle.rotor_count == 1


def test_default_quadcopter_hover_rate():
    vehicle = default_quadcopter()
    assert vehicle.rotor_count == 4
    assert vehicle.hover_spin_rate() == pytest.approx(HOVER_SPIN_RATE)


def test_plus_layout_hovers():
    vehicle = load_vehicle(PLUS_QUAD)
    assert vehicle.name == "plus_quad"
    omega = vehicle.hover_spin_rate()
    force, torque = vehicle.force_torque(VehicleState.at_rest(1.0), [omega] * 4)
    np.testing.assert_allclose(force, [0.0, 0.0, vehicle.mass * G], atol=1e-9)
    np.testing.assert_allclose(torque, np.zeros(3), atol=1e-12)


def test_plus_layout_controller_holds_hover():
    vehicle = load_vehicle(PLUS_QUAD)
    omegas, _ = vehicle.controller.compute(VehicleState.at_rest(1.0), vehicle, TickContext())
    np.testing.assert_allclose(omegas, [vehicle.hover_spin_rate()] * 4, rtol=1e-9)


def test_json_round_trip(tmp_path):
    vehicle = default_quadcopter()
    path = tmp_path / "quad.json"
    path.write_text(json.dumps(vehicle.to_dict()))
    restored = load_vehicle(str(path))
    assert restored.rotor_count == vehicle.rotor_count
    assert restored.mass == vehicle.mass
    np.testing.assert_array_equal(restored.inertia, vehicle.inertia)
    for a, b in zip(restored.multicopter.propellers, vehicle.multicopter.propellers):
        np.testing.assert_array_equal(a.position, b.position)
        assert a.rotation_direction is b.rotation_direction


def test_layout_without_propellers_is_rejected():
    with pytest.raises(DegenerateConstruction):
        Vehicle.from_dict({"mass": 1.0, "propellers": []})


def test_each_vehicle_owns_its_controller():
    a, b = default_quadcopter(), default_quadcopter()
    assert a.controller is not b.controller


def test_hover_rate_uses_every_thrust_constant():
    rotors = [
        PropellerInfo([0.05, 0.0, 0.0], thrust_constant=1.0e-6),
        PropellerInfo([-0.05, 0.0, 0.0], thrust_constant=3.0e-6),
    ]
    vehicle = Vehicle(rotors, mass=0.1)
    omega = vehicle.hover_spin_rate()
    assert omega == pytest.approx(np.sqrt(0.1 * G / 4.0e-6))
    force, _ = vehicle.force_torque(VehicleState.at_rest(1.0), [omega] * 2)
    assert force[2] == pytest.approx(vehicle.mass * G)


def test_hover_rate_without_lift_is_rejected():
    vehicle = Vehicle([PropellerInfo([0.0, 0.0, 0.0], thrust_constant=0.0)], mass=0.1)
    with pytest.raises(ValueError):
        vehicle.hover_spin_rate()
