"""Single-rotor thrust and reaction-torque model.

Control inputs are idealized rotor angular rates (rad/s). Thrust and drag
both scale with the squared rate, so the sign of the rate carries no
physical meaning here.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .drone_config import BODY_UP, DRAG_CONSTANT, THRUST_CONSTANT
from .errors import DegenerateConstruction


class RotationDirection(Enum):
    COUNTER_CLOCKWISE = "ccw"
    CLOCKWISE = "cw"

    @property
    def sign(self) -> float:
        """+1 for counter-clockwise, -1 for clockwise."""
        return 1.0 if self is RotationDirection.COUNTER_CLOCKWISE else -1.0


@dataclass(frozen=True, eq=False)
class PropellerInfo:
    """Static configuration of one rotor.

    Attributes:
        position: Offset from the center of mass, body frame [m], shape (3,)
        direction: Unit thrust direction, body frame, shape (3,)
        thrust_constant: k_t, thrust = k_t * omega²
        drag_constant: k_d, reaction torque = k_d * omega²
        rotation_direction: Spin direction, sets the reaction torque sign
    """

    position: np.ndarray
    direction: np.ndarray = field(default_factory=lambda: BODY_UP.copy())
    thrust_constant: float = THRUST_CONSTANT
    drag_constant: float = DRAG_CONSTANT
    rotation_direction: RotationDirection = RotationDirection.COUNTER_CLOCKWISE

    def __post_init__(self):
        position = np.array(self.position, dtype=np.float64)
        direction = np.array(self.direction, dtype=np.float64)
        if position.shape != (3,) or direction.shape != (3,):
            raise DegenerateConstruction("Propeller position and direction must be 3-vectors")
        norm = np.linalg.norm(direction)
        if not np.isfinite(norm) or norm == 0.0:
            raise DegenerateConstruction("Propeller thrust direction must be non-zero")
        if self.thrust_constant < 0.0 or self.drag_constant < 0.0:
            raise DegenerateConstruction("Propeller constants must be non-negative")

        position.setflags(write=False)
        direction = direction / norm
        direction.setflags(write=False)
        # frozen dataclass: bypass __setattr__ for the normalized copies
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "direction", direction)
        object.__setattr__(self, "thrust_constant", float(self.thrust_constant))
        object.__setattr__(self, "drag_constant", float(self.drag_constant))
        object.__setattr__(self, "rotation_direction", RotationDirection(self.rotation_direction))

    @classmethod
    def from_position(cls, position, rotation_direction=RotationDirection.COUNTER_CLOCKWISE) -> "PropellerInfo":
        """Up-facing rotor with the default constants at ``position``."""
        return cls(position=position, rotation_direction=rotation_direction)

    def to_dict(self) -> dict:
        return {
            "position": self.position.tolist(),
            "direction": self.direction.tolist(),
            "thrust_constant": self.thrust_constant,
            "drag_constant": self.drag_constant,
            "rotation_direction": self.rotation_direction.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PropellerInfo":
        return cls(
            position=data["position"],
            direction=data.get("direction", BODY_UP),
            thrust_constant=data.get("thrust_constant", THRUST_CONSTANT),
            drag_constant=data.get("drag_constant", DRAG_CONSTANT),
            rotation_direction=RotationDirection(
                data.get("rotation_direction", RotationDirection.COUNTER_CLOCKWISE.value)
            ),
        )


def propeller_force(propeller: PropellerInfo, omega: float) -> np.ndarray:
    """Thrust vector of one rotor in the body frame: k_t * omega² * direction."""
    return propeller.thrust_constant * omega ** 2 * propeller.direction


def propeller_reaction_torque(propeller: PropellerInfo, omega: float) -> float:
    """Signed drag torque about the rotor axis: ±k_d * omega²."""
    return propeller.rotation_direction.sign * propeller.drag_constant * omega ** 2
