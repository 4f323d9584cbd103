"""Simulation engine for the navigation computer.

Manages simulation time and state, drives one control tick per fixed
period and provides telemetry.
"""

import logging
import math
import threading
from enum import Enum, auto
from typing import Optional, Union

import numpy as np

from navcomputer.config import Config, get_config
from navcomputer.control.nav_computer import AlignMode, NavComputer, NavStatus
from navcomputer.control.pid import PIDController
from navcomputer.control.thrust_groups import ThrustTestSequence
from navcomputer.dynamics.frame import LOCAL_FORWARD
from navcomputer.dynamics.vector import angle_between, as_vector
from navcomputer.simulation.ship import Ship


logger = logging.getLogger(__name__)


class SimulationState(Enum):
    """Simulation state enumeration."""
    STOPPED = auto()
    RUNNING = auto()
    PAUSED = auto()


class SimulationEngine:
    """Main simulation engine.

    Each step runs ``time_warp`` control ticks (rounded, at least one).
    Every tick runs the navigation computer pipeline, advances the
    thruster test sequence and integrates the ship over one tick period.

    Stepping and every mutator share one lock, so commands issued from
    another thread land between ticks, never inside one.

    Attributes:
        dt: Tick period (seconds)
        sim_time: Current simulation time (seconds)
        state: Current simulation state
        ship: The ship being simulated
        nav: Navigation computer controlling the ship
    """

    def __init__(
        self,
        dt: Optional[float] = None,
        time_warp: Optional[float] = None,
        config: Optional[Config] = None,
    ):
        """Initialize simulation engine.

        Args:
            dt: Tick period in seconds (defaults to 1 / updates_per_second)
            time_warp: Ticks per step (overrides config)
            config: Configuration object (uses global config if None)
        """
        if config is None:
            config = get_config()

        nav_cfg = config.nav
        sim_cfg = config.simulation

        self.dt = dt if dt is not None else 1.0 / nav_cfg.updates_per_second
        self._time_warp = time_warp if time_warp is not None else sim_cfg.time_warp
        self.sim_time = 0.0
        self.state = SimulationState.STOPPED
        self._lock = threading.RLock()

        self.ship = Ship(config=config)

        self._last_diagnostics = ""
        self.nav = NavComputer(
            self.ship,
            PIDController(nav_cfg.pitch_pid.kp, nav_cfg.pitch_pid.ki, nav_cfg.pitch_pid.kd, self.dt),
            PIDController(nav_cfg.yaw_pid.kp, nav_cfg.yaw_pid.ki, nav_cfg.yaw_pid.kd, self.dt),
            updates_per_second=1.0 / self.dt,
            slowdown_angle=nav_cfg.slowdown_angle,
            debug=self._record_diagnostics,
            precision=nav_cfg.precision,
        )
        self.nav.add_gyros(self.ship.gyroscopes)
        self.nav.add_thrusts(self.ship.thrusters)

        self._initial_align_mode = AlignMode.parse(nav_cfg.align_mode)
        self._initial_align_to_horizon = nav_cfg.align_to_horizon
        self.nav.align_mode = self._initial_align_mode
        self._align_to_horizon = self._initial_align_to_horizon

        self._thrust_test = ThrustTestSequence(
            self.nav.thrust_groups,
            period_ticks=config.thrust_test.period_ticks,
            power=config.thrust_test.power,
        )

        # Text commands: "<keyword> <argument>"
        self._commands = {
            "nav": self.set_nav_status,
            "align": self.set_align_mode,
        }

    def _record_diagnostics(self, text: str) -> None:
        self._last_diagnostics = text
        logger.debug(text)

    @property
    def time_warp(self) -> float:
        """Get current time warp factor."""
        return self._time_warp

    def set_time_warp(self, time_warp: float) -> None:
        """Set time warp factor.

        Args:
            time_warp: Ticks per step (must be positive)

        Raises:
            ValueError: If time_warp is not a positive finite number
        """
        if isinstance(time_warp, bool) or not isinstance(time_warp, (int, float)):
            raise ValueError(f"time_warp must be a number, got {time_warp!r}")
        if not (time_warp > 0 and math.isfinite(time_warp)):
            raise ValueError("time_warp must be positive")
        with self._lock:
            self._time_warp = time_warp

    @property
    def align_to_horizon(self) -> bool:
        return self._align_to_horizon

    def set_align_to_horizon(self, enabled: bool) -> None:
        with self._lock:
            self._align_to_horizon = bool(enabled)

    @property
    def last_diagnostics(self) -> str:
        """Most recent diagnostic snapshot from the navigation computer."""
        return self._last_diagnostics

    def start(self) -> None:
        """Start or resume simulation."""
        with self._lock:
            self.state = SimulationState.RUNNING

    def pause(self) -> None:
        """Pause simulation."""
        with self._lock:
            if self.state == SimulationState.RUNNING:
                self.state = SimulationState.PAUSED

    def stop(self) -> None:
        """Stop simulation."""
        with self._lock:
            self.state = SimulationState.STOPPED

    def reset(self) -> None:
        """Reset simulation to initial state."""
        with self._lock:
            self.sim_time = 0.0
            self.state = SimulationState.STOPPED
            self._thrust_test.stop()
            self.nav.reset()
            self.nav.align_mode = self._initial_align_mode
            self._align_to_horizon = self._initial_align_to_horizon
            self.ship.reset()
            self._last_diagnostics = ""

    def step(self) -> None:
        """Advance simulation by one step.

        Only advances if the simulation is running.
        """
        with self._lock:
            if self.state != SimulationState.RUNNING:
                return

            ticks = max(1, int(round(self._time_warp)))
            for _ in range(ticks):
                self.nav.tick(align_to_horizon=self._align_to_horizon)
                self._thrust_test.step()
                self.ship.update(self.dt)

            self.sim_time += self.dt * ticks

    def set_nav_status(self, status: Union[str, NavStatus]) -> None:
        """Switch the navigation computer on or off.

        Raises:
            ValueError: If status is not "on", "off" or a NavStatus
        """
        if isinstance(status, str):
            status = NavStatus.parse(status)
        elif not isinstance(status, NavStatus):
            raise ValueError(f"Unknown nav status: {status!r}")
        with self._lock:
            self.nav.set_status(status)

    def set_align_mode(self, mode: Union[str, AlignMode]) -> None:
        """Select the up reference source.

        Raises:
            ValueError: If mode is not a known align mode
        """
        if isinstance(mode, str):
            mode = AlignMode.parse(mode)
        elif not isinstance(mode, AlignMode):
            raise ValueError(f"Unknown align mode: {mode!r}")
        with self._lock:
            self.nav.align_mode = mode
        logger.info("Align mode set to %s", mode.name)

    def set_forward_vector(self, forward) -> None:
        """Set target forward direction (world frame).

        Raises:
            ValueError: If forward is not three finite numbers
        """
        forward = as_vector(forward)
        with self._lock:
            self.nav.set_forward_vector(forward)

    def set_up_vector(self, up) -> None:
        """Set up reference directly (world frame).

        Raises:
            ValueError: If up is not three finite numbers
        """
        up = as_vector(up)
        with self._lock:
            self.nav.set_up_vector(up)

    def start_thrust_test(self) -> None:
        with self._lock:
            self._thrust_test.start()

    def stop_thrust_test(self) -> None:
        with self._lock:
            self._thrust_test.stop()

    @property
    def thrust_test_active(self) -> bool:
        return self._thrust_test.active

    def handle_command(self, text: str) -> bool:
        """Dispatch a text command such as ``nav on`` or ``align natural``.

        Keywords are case-insensitive. Commands with fewer than two
        tokens, unknown keywords and invalid arguments are ignored.

        Returns:
            True if the command was applied
        """
        if not isinstance(text, str):
            return False
        tokens = text.split()
        if len(tokens) < 2:
            return False

        handler = self._commands.get(tokens[0].lower())
        if handler is None:
            return False

        try:
            handler(tokens[1])
        except ValueError as e:
            logger.warning("Ignoring command %r: %s", text, e)
            return False
        return True

    def get_alignment_error(self) -> float:
        """Angle between the ship's forward axis and the target (degrees)."""
        forward_world = self.ship.frame.to_world(LOCAL_FORWARD)
        return float(np.degrees(angle_between(forward_world, self.nav.forward_vector)))

    def get_telemetry(self) -> dict:
        """Get telemetry snapshot (JSON serializable)."""
        with self._lock:
            thrust_direction = self._thrust_test.direction
            return {
                "timestamp": self.sim_time,
                "state": self.state.name,
                "timeWarp": self._time_warp,
                "alignToHorizon": self._align_to_horizon,
                "alignmentError": self.get_alignment_error(),
                "nav": self.nav.get_state(),
                "ship": self.ship.get_state(),
                "thrustTest": {
                    "active": self._thrust_test.active,
                    "direction": thrust_direction.name if thrust_direction is not None else None,
                },
                "diagnostics": self._last_diagnostics,
            }
