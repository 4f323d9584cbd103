"""Direction-keyed thruster groups and the thruster test helpers.

Each thruster is classified once, when registered, by comparing its
forward axis with the reference body's six cardinal axes. Thrusters that
match none are dropped.
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from navcomputer.actuators.thruster import Thruster
from navcomputer.dynamics.frame import Frame


logger = logging.getLogger(__name__)

# Max per-component difference for two axes to count as the same direction
ALIGNMENT_TOLERANCE = 1e-6


class ThrustDirection(Enum):
    """Thruster bucket, in test order."""
    FORWARD = 0
    BACKWARD = 1
    LEFT = 2
    RIGHT = 3
    UP = 4
    DOWN = 5


def classify_thrust(reference: Frame, thruster_frame: Frame) -> Optional[ThrustDirection]:
    """Find the reference axis matching a thruster's forward axis.

    Args:
        reference: World pose of the reference body
        thruster_frame: World pose of the thruster

    Returns:
        Matching direction, or None if the thruster is not axis-aligned
    """
    thrust_forward = thruster_frame.forward
    axes = (
        (ThrustDirection.FORWARD, reference.forward),
        (ThrustDirection.BACKWARD, reference.backward),
        (ThrustDirection.LEFT, reference.left),
        (ThrustDirection.RIGHT, reference.right),
        (ThrustDirection.UP, reference.up),
        (ThrustDirection.DOWN, reference.down),
    )
    for direction, axis in axes:
        if np.allclose(axis, thrust_forward, rtol=0.0, atol=ALIGNMENT_TOLERANCE):
            return direction
    return None


class ThrustGroups:
    """Six thruster buckets keyed by ThrustDirection."""

    def __init__(self):
        self._groups: dict[ThrustDirection, list[Thruster]] = {
            direction: [] for direction in ThrustDirection
        }

    def add(self, thruster: Optional[Thruster], reference: Frame) -> Optional[ThrustDirection]:
        """Classify and register a thruster.

        Returns:
            Bucket the thruster was added to, or None if it was dropped
        """
        if thruster is None:
            return None

        direction = classify_thrust(reference, thruster.frame)
        if direction is None:
            logger.debug("Dropping thruster %s: not aligned with reference", thruster.name)
            return None

        self._groups[direction].append(thruster)
        return direction

    def get(self, direction: ThrustDirection) -> list[Thruster]:
        return list(self._groups[direction])

    def all(self) -> list[Thruster]:
        return [t for direction in ThrustDirection for t in self._groups[direction]]

    def counts(self) -> dict[str, int]:
        return {direction.name: len(group) for direction, group in self._groups.items()}

    def prune(self) -> int:
        """Remove closed thrusters. Returns number removed."""
        removed = 0
        for direction, group in self._groups.items():
            live = [t for t in group if not t.closed]
            removed += len(group) - len(live)
            self._groups[direction] = live
        return removed

    def test_thruster(self, direction: ThrustDirection, power: float) -> None:
        """Fire every thruster in a bucket.

        Args:
            direction: Bucket to fire
            power: Output in percent of max thrust, clamped to [0, 100]
        """
        fraction = float(np.clip(power, 0.0, 100.0)) / 100.0
        for thruster in self._groups[direction]:
            if thruster.closed:
                continue
            thruster.thrust_override = fraction * thruster.max_thrust

    def clear(self) -> None:
        """Zero the override on every registered thruster."""
        for thruster in self.all():
            thruster.thrust_override = 0.0

    def __len__(self) -> int:
        return sum(len(group) for group in self._groups.values())


class ThrustTestSequence:
    """Fires each thruster bucket in turn for a fixed number of ticks.

    Buckets are visited in ThrustDirection order. Each one is held at
    ``power`` percent while active and cut when the sequence moves on.
    """

    def __init__(self, groups: ThrustGroups, period_ticks: int = 13, power: float = 100.0):
        """Initialize test sequence.

        Raises:
            ValueError: If period_ticks is less than 1
        """
        if period_ticks < 1:
            raise ValueError("period_ticks must be at least 1")
        self._groups = groups
        self.period_ticks = period_ticks
        self.power = power
        self._tick = 0
        self._state = 0
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def direction(self) -> Optional[ThrustDirection]:
        """Bucket currently firing, or None when idle."""
        if not self._active:
            return None
        return ThrustDirection(self._state)

    def start(self) -> None:
        """Start (or restart) from the first bucket."""
        self._groups.clear()
        self._tick = 0
        self._state = 0
        self._active = True
        logger.info("Thruster test started")

    def stop(self) -> None:
        """Abort the sequence and cut all thrusters."""
        self._groups.clear()
        self._active = False

    def step(self) -> None:
        """Advance by one tick."""
        if not self._active:
            return

        direction = ThrustDirection(self._state)
        self._groups.test_thruster(direction, self.power)

        self._tick += 1
        if self._tick % self.period_ticks == 0:
            self._groups.test_thruster(direction, 0.0)
            self._state += 1

        if self._state >= len(ThrustDirection):
            self._active = False
            logger.info("Thruster test finished")
