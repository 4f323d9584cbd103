"""Navigation computer: orientation control facade.

Owns the target forward/up vectors, the align mode, the on/off status and
the actuator registries, and runs one control tick at a time:

    1. Resolve the up vector from the align mode
    2. Optionally level the body against it (align to horizon)
    3. Compute the rotation error
    4. Shape it into a commanded rate
    5. Fan the rate out to every gyroscope
    6. Emit the diagnostic snapshot to the debug sink

Scheduling is external: the caller invokes tick() once per fixed period.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.actuators.gyroscope import Gyroscope
from navcomputer.actuators.thruster import Thruster
from navcomputer.control.gyro_override import apply_gyro_override, release_gyros
from navcomputer.control.orientation import rotation_error
from navcomputer.control.pid import PIDController
from navcomputer.control.rate_shaper import RateShaper
from navcomputer.control.thrust_groups import ThrustDirection, ThrustGroups
from navcomputer.dynamics.vector import as_vector, format_vector, is_zero, round_vector


logger = logging.getLogger(__name__)


class AlignMode(Enum):
    """Source of the up reference.

    Only one source is consulted per tick.
    """
    NONE = "none"
    NATURAL = "natural"
    ARTIFICIAL = "artificial"
    TOTAL = "total"
    TARGET = "target"

    @classmethod
    def parse(cls, name: str) -> "AlignMode":
        """Parse a mode name (case-insensitive, "off" means NONE).

        Raises:
            ValueError: If name is not a known mode
        """
        key = name.strip().lower()
        if key == "off":
            return cls.NONE
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown align mode: {name}")


class NavStatus(Enum):
    OFF = "off"
    ON = "on"

    @classmethod
    def parse(cls, name: str) -> "NavStatus":
        """Parse "on"/"off" (case-insensitive).

        Raises:
            ValueError: If name is not a known status
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown nav status: {name}")


class NavComputer:
    """Orientation controller for one reference body.

    The reference is any object exposing a ``frame`` attribute (world
    pose) and ``get_natural_gravity()``, ``get_artificial_gravity()`` and
    ``get_total_gravity()`` returning world-frame vectors.

    Attributes:
        align_mode: Current up reference source
        precision: Decimal places used in the diagnostic snapshot
    """

    def __init__(
        self,
        reference,
        pitch_pid: Optional[PIDController],
        yaw_pid: Optional[PIDController],
        updates_per_second: float,
        slowdown_angle: float,
        debug: Optional[Callable[[str], None]] = None,
        precision: int = 6,
    ):
        """Initialize navigation computer.

        Args:
            reference: Reference body (see class docstring)
            pitch_pid: Pitch controller, or None
            yaw_pid: Yaw controller, or None
            updates_per_second: Control tick rate (Hz)
            slowdown_angle: Coast band threshold (rad)
            debug: Sink for the diagnostic snapshot (logs at DEBUG if None)
            precision: Decimal places in the diagnostic snapshot
        """
        self._reference = reference
        self._rate_shaper = RateShaper(pitch_pid, yaw_pid, updates_per_second, slowdown_angle)
        self._debug = debug if debug is not None else logger.debug
        self.precision = precision

        self._gyros: list[Gyroscope] = []
        self._thrust_groups = ThrustGroups()

        self._align_mode = AlignMode.NONE
        self._status = NavStatus.OFF

        self._forward_vector = np.zeros(3)
        self._up_vector = np.zeros(3)
        self._rotation_pyr = np.zeros(3)
        self._rotation_speed_pyr = np.zeros(3)

    def add_gyro(self, gyro: Optional[Gyroscope]) -> None:
        if gyro is not None:
            self._gyros.append(gyro)

    def add_gyros(self, gyros: Iterable[Gyroscope]) -> None:
        for gyro in gyros:
            self.add_gyro(gyro)

    def add_thrust(self, thruster: Optional[Thruster]) -> Optional[ThrustDirection]:
        """Classify and register a thruster against the reference frame."""
        return self._thrust_groups.add(thruster, self._reference.frame)

    def add_thrusts(self, thrusters: Iterable[Thruster]) -> None:
        for thruster in thrusters:
            self.add_thrust(thruster)

    @property
    def gyros(self) -> list[Gyroscope]:
        return list(self._gyros)

    @property
    def thrust_groups(self) -> ThrustGroups:
        return self._thrust_groups

    def test_thruster(self, direction: ThrustDirection, power: float) -> None:
        """Fire a thruster bucket at ``power`` percent."""
        self._thrust_groups.test_thruster(direction, power)

    def _prune_closed(self) -> None:
        live = [gyro for gyro in self._gyros if not gyro.closed]
        removed = len(self._gyros) - len(live)
        removed += self._thrust_groups.prune()
        if removed:
            logger.info("Removed %d closed actuator(s)", removed)
        self._gyros = live

    @property
    def status(self) -> NavStatus:
        return self._status

    @property
    def align_mode(self) -> AlignMode:
        return self._align_mode

    @align_mode.setter
    def align_mode(self, mode: AlignMode) -> None:
        if not isinstance(mode, AlignMode):
            raise ValueError(f"Unknown align mode: {mode!r}")
        self._align_mode = mode

    @property
    def forward_vector(self) -> NDArray[np.float64]:
        return self._forward_vector.copy()

    @property
    def up_vector(self) -> NDArray[np.float64]:
        return self._up_vector.copy()

    @property
    def rotation_pyr(self) -> NDArray[np.float64]:
        """Last rotation error [pitch, yaw, roll] (rad)."""
        return self._rotation_pyr.copy()

    @property
    def rotation_speed_pyr(self) -> NDArray[np.float64]:
        """Last commanded rate [pitch, yaw, roll] (rad/s)."""
        return self._rotation_speed_pyr.copy()

    def set_forward_vector(self, forward) -> None:
        """Set the target forward direction (world frame)."""
        self._forward_vector = as_vector(forward)

    def set_up_vector(self, up) -> None:
        """Set the up reference directly (used with AlignMode.TARGET)."""
        self._up_vector = as_vector(up)

    def set_status(self, status: NavStatus) -> None:
        """Switch control on or off.

        Switching off releases every gyroscope before returning. Safe to
        call repeatedly.

        Raises:
            ValueError: If status is not a NavStatus
        """
        if not isinstance(status, NavStatus):
            raise ValueError(f"Unknown nav status: {status!r}")
        if status == NavStatus.OFF:
            self._prune_closed()
            release_gyros(self._gyros)
        if status != self._status:
            logger.info("Nav status %s -> %s", self._status.name, status.name)
        self._status = status

    def update(self) -> None:
        """Refresh the up vector from the align mode.

        Gravity points down, so the up vector is the negated sample.
        """
        mode = self.align_mode
        if mode == AlignMode.NATURAL:
            self._up_vector = -as_vector(self._reference.get_natural_gravity())
        elif mode == AlignMode.ARTIFICIAL:
            self._up_vector = -as_vector(self._reference.get_artificial_gravity())
        elif mode == AlignMode.TOTAL:
            self._up_vector = -as_vector(self._reference.get_total_gravity())
        elif mode == AlignMode.NONE:
            self._up_vector = np.zeros(3)

    def align_to_horizon(self) -> bool:
        """Point forward along the horizon, keeping the body level.

        forward = left x up, so a level body keeps its heading.

        Returns:
            False if there is no up reference
        """
        if is_zero(self._up_vector):
            return False
        self.set_forward_vector(np.cross(self._reference.frame.left, self._up_vector))
        return True

    def control(self) -> None:
        """Compute and apply the gyroscope command for this tick."""
        if self._status == NavStatus.OFF:
            return

        self._prune_closed()
        frame = self._reference.frame

        up = None if is_zero(self._up_vector) else self._up_vector
        self._rotation_pyr = rotation_error(self._forward_vector, up, frame)
        self._rotation_speed_pyr = self._rate_shaper.compute(self._rotation_pyr)
        apply_gyro_override(self._rotation_speed_pyr, frame, self._gyros)

    def read_data(self) -> str:
        """Build the diagnostic snapshot and send it to the debug sink."""
        lines = [
            f"Forward Vector: {format_vector(self._forward_vector, self.precision)}",
            f"Rotation PYR: {format_vector(self._rotation_pyr, self.precision)}",
            f"Rotation Speed PYR: {format_vector(self._rotation_speed_pyr, self.precision)}",
        ]
        text = "\n".join(lines) + "\n"
        self._debug(text)
        return text

    def tick(self, align_to_horizon: bool = True) -> None:
        """Run one full control tick. Does nothing while OFF.

        Args:
            align_to_horizon: Derive forward from the up vector first.
                Ignored in TARGET mode, where the caller owns forward.
        """
        if self._status == NavStatus.OFF:
            return

        self.update()
        if align_to_horizon and self.align_mode != AlignMode.TARGET:
            self.align_to_horizon()
        self.control()
        self.read_data()

    def reset(self) -> None:
        """Switch off and clear vectors and controller history."""
        self.set_status(NavStatus.OFF)
        self._rate_shaper.reset()
        self._forward_vector = np.zeros(3)
        self._up_vector = np.zeros(3)
        self._rotation_pyr = np.zeros(3)
        self._rotation_speed_pyr = np.zeros(3)

    def get_state(self) -> dict:
        """Get controller state as plain Python types."""
        return {
            "status": self._status.name,
            "alignMode": self.align_mode.name,
            "forwardVector": round_vector(self._forward_vector, self.precision).tolist(),
            "upVector": round_vector(self._up_vector, self.precision).tolist(),
            "rotationPYR": round_vector(self._rotation_pyr, self.precision).tolist(),
            "rotationSpeedPYR": round_vector(self._rotation_speed_pyr, self.precision).tolist(),
            "gyroCount": len(self._gyros),
            "thrustGroups": self._thrust_groups.counts(),
        }
