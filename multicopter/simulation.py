"""Per-tick driver: controller first, then dynamics, per vehicle.

Errors are per vehicle: an invalid control-input length is logged and
returned as a ``TickResult`` status, never raised to the caller, so one
vehicle's bad input cannot stop the others.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .errors import InvalidInputLength

logger = logging.getLogger(__name__)


class TickStatus(Enum):
    OK = "ok"
    PAUSED = "paused"
    INVALID_INPUT_LENGTH = "invalid_input_length"


@dataclass(eq=False)
class TickResult:
    """Outcome of one tick for one vehicle.

    ``force`` and ``torque`` (world frame) are None unless status is OK.
    """

    status: TickStatus
    control_inputs: np.ndarray | None = None
    force: np.ndarray | None = None
    torque: np.ndarray | None = None
    reset_requested: bool = False
    error: InvalidInputLength | None = None
    diag: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is TickStatus.OK


def step_vehicle(vehicle, state, ctx, control_inputs=None) -> TickResult:
    """Advance one vehicle by one tick.

    Args:
        vehicle: Vehicle to command
        state: VehicleState settled at the end of the previous tick
        ctx: TickContext for this tick
        control_inputs: Optional externally supplied spin rates; bypasses the
            flight controller when given

    Returns:
        TickResult with the commanded spin rates and the world-frame wrench
    """
    operator = ctx.operator
    if operator.pause:
        return TickResult(TickStatus.PAUSED)

    if operator.reset:
        vehicle.controller.reset()

    diag = {}
    if control_inputs is None:
        control_inputs, diag = vehicle.controller.compute(state, vehicle, ctx)
    control_inputs = np.asarray(control_inputs, dtype=np.float64)

    try:
        force, torque = vehicle.force_torque(state, control_inputs)
    except InvalidInputLength as err:
        logger.error("%s: skipping force/torque this tick: %s", vehicle.name, err)
        return TickResult(
            TickStatus.INVALID_INPUT_LENGTH,
            control_inputs=control_inputs,
            reset_requested=operator.reset,
            error=err,
            diag=diag,
        )

    logger.debug("%s: omegas=%s force=%s torque=%s", vehicle.name, control_inputs, force, torque)
    return TickResult(
        TickStatus.OK,
        control_inputs=control_inputs,
        force=force,
        torque=torque,
        reset_requested=operator.reset,
        diag=diag,
    )


def step_fleet(fleet, ctx) -> list[TickResult]:
    """Step independent vehicles with a shared context.

    Args:
        fleet: Iterable of (vehicle, state) or (vehicle, state, control_inputs)
            entries; explicit spin rates belong to their own entry only
        ctx: TickContext shared by every vehicle this tick

    Returns:
        One TickResult per entry, in fleet order
    """
    results = []
    for vehicle, state, *override in fleet:
        control_inputs = override[0] if override else None
        results.append(step_vehicle(vehicle, state, ctx, control_inputs))
    failed = sum(1 for r in results if r.status is TickStatus.INVALID_INPUT_LENGTH)
    if failed:
        logger.warning("%d of %d vehicles skipped this tick", failed, len(results))
    return results
