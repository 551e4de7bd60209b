"""Multicopter force/torque model and flight controller."""

from .context import OperatorInput, TickContext
from .controller import DEFAULT_GAINS, FlightController
from .dynamics import Accelerations, ForceTorque, Multicopter
from .errors import DegenerateConstruction, InvalidInputLength, MulticopterError
from .propeller import PropellerInfo, RotationDirection, propeller_force, propeller_reaction_torque
from .simulation import TickResult, TickStatus, step_fleet, step_vehicle
from .state import VehicleState
from .vehicle import Vehicle, default_quadcopter, load_vehicle
from . import drone_config

__all__ = [
    "Accelerations", "DEFAULT_GAINS", "DegenerateConstruction", "FlightController",
    "ForceTorque", "InvalidInputLength", "Multicopter", "MulticopterError",
    "OperatorInput", "PropellerInfo", "RotationDirection", "TickContext",
    "TickResult", "TickStatus", "Vehicle", "VehicleState", "default_quadcopter",
    "drone_config", "load_vehicle", "propeller_force",
    "propeller_reaction_torque", "step_fleet", "step_vehicle",
]
