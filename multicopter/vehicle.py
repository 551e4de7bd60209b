"""Vehicle aggregate: rotor layout, mass, inertia and its flight controller."""

import json

import numpy as np

from .controller import FlightController
from .drone_config import ARM_OFFSET, GRAVITY, INERTIA, MASS, WORLD_UP
from .dynamics import Accelerations, ForceTorque, Multicopter
from .errors import DegenerateConstruction
from .propeller import PropellerInfo, RotationDirection


class Vehicle:
    """One simulated multicopter.

    Raises DegenerateConstruction for an empty rotor list, a non-positive
    mass or an inertia tensor that is not an invertible 3x3 matrix.
    """

    def __init__(self, multicopter: Multicopter, mass: float = MASS, inertia=INERTIA,
                 controller: FlightController | None = None, name: str = "quadcopter"):
        if not isinstance(multicopter, Multicopter):
            multicopter = Multicopter(multicopter)
        inertia = np.array(inertia, dtype=np.float64)
        if inertia.shape == (3,):
            inertia = np.diag(inertia)
        if inertia.shape != (3, 3):
            raise DegenerateConstruction(f"Inertia tensor must be 3x3, got shape {inertia.shape}")
        if not np.all(np.isfinite(inertia)) or abs(np.linalg.det(inertia)) < 1e-12:
            raise DegenerateConstruction("Inertia tensor is not invertible")
        if not mass > 0.0:
            raise DegenerateConstruction(f"Mass must be positive, got {mass}")

        self.name = name
        self.multicopter = multicopter
        self.mass = float(mass)
        self.inertia = inertia
        self.controller = controller or FlightController()

    @property
    def rotor_count(self) -> int:
        return len(self.multicopter)

    def force_torque(self, state, control_inputs) -> ForceTorque:
        return self.multicopter.force_torque(
            state.orientation, state.angular_velocity, control_inputs, self.inertia,
        )

    def accelerations(self, state, control_inputs, gravity=None, external_force=None,
                      external_torque=None) -> Accelerations:
        """Accelerations including gravity (when given) and any external wrench."""
        force = np.zeros(3) if external_force is None else np.asarray(external_force, dtype=np.float64)
        if gravity is not None:
            force = force + self.mass * np.asarray(gravity, dtype=np.float64)
        return self.multicopter.accelerations(
            state.orientation, state.angular_velocity, control_inputs,
            self.mass, self.inertia, external_force=force, external_torque=external_torque,
        )

    def hover_spin_rate(self, gravity=GRAVITY) -> float:
        """Equal spin rate on every rotor that balances gravity when level.

        Sums every rotor's vertical lift coefficient k_t * (direction . up), so
        mixed thrust constants and tilted rotors are accounted for.
        """
        weight = -self.mass * float(np.dot(gravity, WORLD_UP))
        lift = sum(p.thrust_constant * float(np.dot(p.direction, WORLD_UP))
                   for p in self.multicopter.propellers)
        if lift <= 0.0:
            raise ValueError(f"{self.name} produces no upward thrust when level")
        return float(np.sqrt(weight / lift))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mass": self.mass,
            "inertia": self.inertia.tolist(),
            "propellers": [p.to_dict() for p in self.multicopter.propellers],
        }

    @classmethod
    def from_dict(cls, data: dict, gains: dict | None = None) -> "Vehicle":
        propellers = [PropellerInfo.from_dict(p) for p in data.get("propellers", [])]
        return cls(
            Multicopter(propellers),
            mass=data.get("mass", MASS),
            inertia=data.get("inertia", INERTIA),
            controller=FlightController(gains),
            name=data.get("name", "quadcopter"),
        )

    def __repr__(self) -> str:
        return f"Vehicle(name={self.name!r}, rotors={self.rotor_count}, mass={self.mass})"


def load_vehicle(path: str, gains: dict | None = None) -> Vehicle:
    """Load a vehicle layout from a JSON file (see ``Vehicle.to_dict``)."""
    with open(path) as f:
        return Vehicle.from_dict(json.load(f), gains=gains)


def default_quadcopter(gains: dict | None = None) -> Vehicle:
    """X-configuration quadcopter; diagonal rotor pairs share a spin direction."""
    ccw, cw = RotationDirection.COUNTER_CLOCKWISE, RotationDirection.CLOCKWISE
    a = ARM_OFFSET
    propellers = [
        PropellerInfo.from_position([a, a, 0.0], ccw),     # front left
        PropellerInfo.from_position([-a, a, 0.0], cw),     # back left
        PropellerInfo.from_position([a, -a, 0.0], cw),     # front right
        PropellerInfo.from_position([-a, -a, 0.0], ccw),   # back right
    ]
    return Vehicle(Multicopter(propellers), mass=MASS, inertia=INERTIA,
                   controller=FlightController(gains))
