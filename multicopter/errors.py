"""Error taxonomy for the multicopter core."""


class MulticopterError(Exception):
    """Base class for all multicopter errors."""


class InvalidInputLength(MulticopterError):
    """Control-input vector length does not match the rotor count.

    Recoverable: the tick driver skips the vehicle's force/torque for that
    tick and reports the condition instead of stopping the simulation.
    """

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Incorrect control input length: expected {expected}, got {received}"
        )


class DegenerateConstruction(MulticopterError):
    """A vehicle or rotor layout cannot be built from the given parameters."""
