"""Linear thruster actuator handle.

A thruster applies force along its single fixed local axis. The output is
set as an absolute override in Newtons, limited to [0, max_thrust].
"""

from typing import Optional

import numpy as np

from navcomputer.dynamics.frame import Frame


class Thruster:
    """Single thruster mounted on a ship.

    Attributes:
        frame: Current world pose of the thruster
        max_thrust: Maximum thrust output (N)
        name: Display name
        thrust_override: Current thrust override (N)
        closed: True once the thruster is detached or destroyed
    """

    def __init__(
        self,
        frame: Optional[Frame] = None,
        max_thrust: float = 1.0e5,
        name: str = "Thruster",
    ):
        self.frame = frame if frame is not None else Frame()
        self.max_thrust = max_thrust
        self.name = name

        self._thrust_override = 0.0
        self.closed = False

    @property
    def thrust_override(self) -> float:
        return self._thrust_override

    @thrust_override.setter
    def thrust_override(self, value: float) -> None:
        self._thrust_override = float(np.clip(value, 0.0, self.max_thrust))

    @property
    def thrust_override_percentage(self) -> float:
        """Override as a fraction of max thrust (0 to 1)."""
        if self.max_thrust <= 0:
            return 0.0
        return self._thrust_override / self.max_thrust

    def close(self) -> None:
        """Mark thruster as detached."""
        self._thrust_override = 0.0
        self.closed = True

    def get_state(self) -> dict:
        return {
            "name": self.name,
            "thrustOverride": self._thrust_override,
            "maxThrust": self.max_thrust,
            "closed": self.closed,
        }
