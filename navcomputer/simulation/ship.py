"""Simulated ship: the reference body the navigation computer controls.

Provides the world pose, the gravity samples and the mounted actuators,
and integrates the ship's attitude from the gyroscope commands.

Gyroscope response:
    Each overriding gyroscope contributes its command rotated into world
    coordinates. The ship turns with the negated mean contribution, so a
    command equal to the rotation error turns the nose toward the target.
    With no gyroscope overriding the ship holds its attitude.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.actuators.gyroscope import Gyroscope
from navcomputer.actuators.thruster import Thruster
from navcomputer.config import Config, MountConfig, get_config
from navcomputer.dynamics.frame import Frame, make_orientation
from navcomputer.dynamics.vector import as_vector


def _mount_orientation(mount: MountConfig) -> NDArray[np.float64]:
    return make_orientation(as_vector(mount.forward), as_vector(mount.up))


class Ship:
    """Rigid ship with mounted gyroscopes and thrusters.

    Attributes:
        frame: World pose of the ship (reference block)
        angular_velocity: Angular velocity in world frame (rad/s)
        gyroscopes: Mounted gyroscopes
        thrusters: Mounted thrusters
    """

    def __init__(
        self,
        frame: Optional[Frame] = None,
        config: Optional[Config] = None,
    ):
        """Initialize ship.

        Args:
            frame: Initial world pose (overrides config if provided)
            config: Configuration object (uses global config if None)
        """
        if config is None:
            config = get_config()

        ship_cfg = config.ship
        sim_cfg = config.simulation

        # Store initial pose for reset
        if frame is not None:
            self._initial_frame = frame.copy()
        else:
            self._initial_frame = Frame.from_forward_up(
                ship_cfg.initial_forward, ship_cfg.initial_up
            )

        self.frame = self._initial_frame.copy()
        self.angular_velocity = np.zeros(3)

        self._natural_gravity = as_vector(sim_cfg.natural_gravity)
        self._artificial_gravity = as_vector(sim_cfg.artificial_gravity)

        # Actuators from config, each with its orientation relative to the ship
        self._mounts: list[tuple[object, NDArray[np.float64]]] = []

        self.gyroscopes: list[Gyroscope] = []
        for i, mount in enumerate(ship_cfg.gyroscope.mounts):
            gyro = Gyroscope(max_rate=ship_cfg.gyroscope.max_rate, name=f"Gyroscope {i + 1}")
            self.gyroscopes.append(gyro)
            self._mounts.append((gyro, _mount_orientation(mount)))

        self.thrusters: list[Thruster] = []
        for i, mount in enumerate(ship_cfg.thruster.mounts):
            thruster = Thruster(max_thrust=ship_cfg.thruster.max_thrust, name=f"Thruster {i + 1}")
            self.thrusters.append(thruster)
            self._mounts.append((thruster, _mount_orientation(mount)))

        self._update_actuator_frames()

    def _update_actuator_frames(self) -> None:
        for actuator, mount in self._mounts:
            actuator.frame = Frame(self.frame.orientation @ mount, self.frame.origin.copy())

    def get_natural_gravity(self) -> NDArray[np.float64]:
        """Natural (planetary) gravity in world frame (m/s^2)."""
        return self._natural_gravity.copy()

    def get_artificial_gravity(self) -> NDArray[np.float64]:
        """Artificial gravity in world frame (m/s^2)."""
        return self._artificial_gravity.copy()

    def get_total_gravity(self) -> NDArray[np.float64]:
        """Combined natural and artificial gravity (m/s^2)."""
        return self._natural_gravity + self._artificial_gravity

    def set_gravity(self, natural=None, artificial=None) -> None:
        """Replace the gravity fields (world frame)."""
        if natural is not None:
            self._natural_gravity = as_vector(natural)
        if artificial is not None:
            self._artificial_gravity = as_vector(artificial)

    def compute_angular_velocity(self) -> NDArray[np.float64]:
        """Angular velocity commanded by the gyroscopes (world frame)."""
        commands = [
            gyro.frame.to_world(gyro.get_command())
            for gyro in self.gyroscopes
            if gyro.gyro_override and not gyro.closed
        ]
        if not commands:
            return np.zeros(3)
        return -np.mean(commands, axis=0)

    def update(self, dt: float) -> None:
        """Advance ship attitude by one time step.

        Args:
            dt: Time step (seconds)
        """
        self.angular_velocity = self.compute_angular_velocity()
        self.frame = self.frame.rotated(self.angular_velocity * dt)
        self._update_actuator_frames()

    def get_state(self) -> dict:
        """Get ship state as plain Python types."""
        return {
            "forward": self.frame.forward.tolist(),
            "up": self.frame.up.tolist(),
            "angularVelocity": self.angular_velocity.tolist(),
            "gyroscopes": [gyro.get_state() for gyro in self.gyroscopes],
            "thrusters": [thruster.get_state() for thruster in self.thrusters],
        }

    def reset(self) -> None:
        """Reset ship to initial pose with all actuators released."""
        self.frame = self._initial_frame.copy()
        self.angular_velocity = np.zeros(3)
        for gyro in self.gyroscopes:
            gyro.release()
        for thruster in self.thrusters:
            thruster.thrust_override = 0.0
        self._update_actuator_frames()
