"""Rate shaping: rotation error to commanded angular rate.

Pitch and yaw are driven by their PID controllers. Inside the slowdown
band (|error| < slowdown_angle) the PID output is replaced by a
proportional coast term:

    rate = updates_per_second * 0.5 * error

which removes half of the remaining error per tick, so the body settles
on the setpoint instead of overshooting it.

Roll is neither PID-controlled nor slowdown-shaped: the raw roll error is
passed through as the roll rate.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.control.pid import PIDController


# Fraction of the remaining error removed per tick inside the slowdown band
COAST_FACTOR = 0.5


def shape_rate(
    rotation_error: NDArray[np.float64],
    pitch_pid: Optional[PIDController],
    yaw_pid: Optional[PIDController],
    updates_per_second: float,
    slowdown_angle: float,
) -> NDArray[np.float64]:
    """Convert a rotation error vector to a commanded rate.

    Args:
        rotation_error: [pitch, yaw, roll] rotation error (rad)
        pitch_pid: Pitch controller, or None for no pitch correction
        yaw_pid: Yaw controller, or None for no yaw correction
        updates_per_second: Control tick rate (Hz)
        slowdown_angle: Small-angle threshold for the coast term (rad)

    Returns:
        Commanded rate [pitch, yaw, roll] in body coordinates (rad/s)
    """
    rate = np.zeros(3)

    for axis, pid in ((0, pitch_pid), (1, yaw_pid)):
        error = float(rotation_error[axis])
        if pid is not None:
            rate[axis] = pid.control(error)
        if abs(error) < slowdown_angle:
            rate[axis] = updates_per_second * COAST_FACTOR * error

    rate[2] = rotation_error[2]

    return rate


class RateShaper:
    """Rate shaper owning the pitch/yaw controllers.

    Attributes:
        pitch_pid: Pitch axis controller (optional)
        yaw_pid: Yaw axis controller (optional)
        updates_per_second: Control tick rate (Hz)
        slowdown_angle: Coast band threshold (rad)
    """

    def __init__(
        self,
        pitch_pid: Optional[PIDController],
        yaw_pid: Optional[PIDController],
        updates_per_second: float,
        slowdown_angle: float,
    ):
        """Initialize rate shaper.

        Raises:
            ValueError: If updates_per_second is not positive or
                slowdown_angle is negative
        """
        if not updates_per_second > 0:
            raise ValueError("updates_per_second must be positive")
        if not slowdown_angle >= 0:
            raise ValueError("slowdown_angle must be non-negative")

        self.pitch_pid = pitch_pid
        self.yaw_pid = yaw_pid
        self.updates_per_second = updates_per_second
        self.slowdown_angle = slowdown_angle

    def compute(self, rotation_error: NDArray[np.float64]) -> NDArray[np.float64]:
        """Compute commanded rate for this tick."""
        return shape_rate(
            rotation_error,
            self.pitch_pid,
            self.yaw_pid,
            self.updates_per_second,
            self.slowdown_angle,
        )

    def reset(self) -> None:
        """Reset controller history on both axes."""
        for pid in (self.pitch_pid, self.yaw_pid):
            if pid is not None:
                pid.reset()
