"""Per-tick inputs passed explicitly into the controller and dynamics."""

from dataclasses import dataclass, field

import numpy as np

from .drone_config import DT, GRAVITY


@dataclass(frozen=True)
class OperatorInput:
    """Snapshot of the operator's held commands for one tick."""

    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False
    yaw_left: bool = False
    yaw_right: bool = False
    ascend: bool = False
    descend: bool = False
    reset: bool = False
    pause: bool = False

    @classmethod
    def from_keys(cls, keys) -> "OperatorInput":
        """Build from an iterable of held command names, e.g. {"forward", "ascend"}."""
        keys = set(keys)
        unknown = keys - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown operator commands: {sorted(unknown)}")
        return cls(**{name: True for name in keys})


@dataclass(frozen=True, eq=False)
class TickContext:
    """Elapsed tick time [s], world gravity [m/s²] and the operator snapshot."""

    dt: float = DT
    gravity: np.ndarray = field(default_factory=lambda: GRAVITY.copy())
    operator: OperatorInput = field(default_factory=OperatorInput)
