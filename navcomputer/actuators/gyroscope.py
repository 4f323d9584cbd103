"""Gyroscope actuator handle.

A gyroscope applies a commanded angular rate about its own local axes:
pitch about right (x), yaw about up (y) and roll about backward (z).
Commands follow the controller's rotation-error convention, so the body
turns by the negated command vector (positive yaw turns the nose toward
the gyro's +x).

While the override flag is clear the gyroscope applies no command.

Typical large-grid gyroscope specs:
    - Max rate: ~pi rad/s per axis
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.dynamics.frame import Frame


class Gyroscope:
    """Single gyroscope mounted on a ship.

    Attributes:
        frame: Current world pose of the gyroscope
        max_rate: Maximum commanded rate per axis (rad/s)
        name: Display name
        pitch: Commanded pitch rate (rad/s)
        yaw: Commanded yaw rate (rad/s)
        roll: Commanded roll rate (rad/s)
        gyro_override: True while the command is being applied
        closed: True once the gyroscope is detached or destroyed
    """

    def __init__(
        self,
        frame: Optional[Frame] = None,
        max_rate: float = np.pi,
        name: str = "Gyroscope",
    ):
        self.frame = frame if frame is not None else Frame()
        self.max_rate = max_rate
        self.name = name

        self.pitch = 0.0
        self.yaw = 0.0
        self.roll = 0.0
        self.gyro_override = False
        self.closed = False

    def set_override(self, pitch: float, yaw: float, roll: float) -> None:
        """Write a rate command and take exclusive control.

        Each axis is clipped to +/- max_rate.
        """
        self.pitch, self.yaw, self.roll = (
            float(v) for v in np.clip([pitch, yaw, roll], -self.max_rate, self.max_rate)
        )
        self.gyro_override = True

    def release(self) -> None:
        """Clear the command and release exclusive control."""
        self.pitch = 0.0
        self.yaw = 0.0
        self.roll = 0.0
        self.gyro_override = False

    def close(self) -> None:
        """Mark gyroscope as detached. It is pruned from registries."""
        self.release()
        self.closed = True

    def get_command(self) -> NDArray[np.float64]:
        """Get current command [pitch, yaw, roll] (rad/s)."""
        return np.array([self.pitch, self.yaw, self.roll])

    def get_state(self) -> dict:
        return {
            "name": self.name,
            "pitch": self.pitch,
            "yaw": self.yaw,
            "roll": self.roll,
            "override": self.gyro_override,
            "closed": self.closed,
        }
