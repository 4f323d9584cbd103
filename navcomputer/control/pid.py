"""Single-axis PID controller.

Control Law:
    u = Kp * e + Ki * sum(e * dt) + Kd * (e - e_prev) / dt

where:
    e: error signal for this tick
    dt: fixed tick period given at construction (s)

The derivative term is zero on the first call after construction or
reset, so a large initial error does not produce a derivative kick.
No output clamping or anti-windup is applied here; callers shape the
output downstream.
"""

import math


# Smallest accepted tick period (s)
MIN_TIME_STEP = 1e-6


class PIDController:
    """PID controller for one rotational axis.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        dt: Tick period (s)
    """

    def __init__(self, kp: float, ki: float, kd: float, dt: float):
        """Initialize PID controller.

        Args:
            kp: Proportional gain
            ki: Integral gain
            kd: Derivative gain
            dt: Fixed tick period (s)

        Raises:
            ValueError: If dt is zero, negative, near zero or NaN
        """
        if not (dt > MIN_TIME_STEP and math.isfinite(dt)):
            raise ValueError("dt must be positive")

        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.dt = dt

        self._integral = 0.0
        self._last_error = 0.0
        self._value = 0.0
        self._first_run = True

    def control(self, error: float) -> float:
        """Compute control output for the current error.

        Args:
            error: Error value for this tick

        Returns:
            Control output
        """
        if self._first_run:
            derivative = 0.0
            self._first_run = False
        else:
            derivative = (error - self._last_error) / self.dt

        self._integral += error * self.dt
        self._last_error = error

        self._value = self.kp * error + self.ki * self._integral + self.kd * derivative
        return self._value

    @property
    def integral(self) -> float:
        """Accumulated integral of the error."""
        return self._integral

    @property
    def value(self) -> float:
        """Last control output."""
        return self._value

    def reset(self) -> None:
        """Clear integral, previous error and derivative history."""
        self._integral = 0.0
        self._last_error = 0.0
        self._value = 0.0
        self._first_run = True
