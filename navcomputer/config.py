"""Navigation computer and simulation configuration.

All tuning and simulation parameters are defined here and can be
overridden via config file.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
import json
from typing import Optional


logger = logging.getLogger(__name__)


@dataclass
class PIDConfig:
    """PID gains for one axis."""
    kp: float = 10.0
    ki: float = 0.0
    kd: float = 10.0


@dataclass
class NavConfig:
    """Navigation computer parameters."""
    updates_per_second: float = 10.0  # Control tick rate [Hz]
    slowdown_angle: float = math.pi / 36  # Coast band threshold [rad] (5 deg)
    pitch_pid: PIDConfig = field(default_factory=PIDConfig)
    yaw_pid: PIDConfig = field(default_factory=PIDConfig)
    align_to_horizon: bool = True
    align_mode: str = "off"  # off, natural, artificial, total, target
    precision: int = 6  # Diagnostic rounding [decimals]


@dataclass
class MountConfig:
    """Actuator orientation relative to the ship (ship local coordinates)."""
    forward: list[float] = field(default_factory=lambda: [0.0, 0.0, -1.0])
    up: list[float] = field(default_factory=lambda: [0.0, 1.0, 0.0])


def _default_gyro_mounts() -> list[MountConfig]:
    # Deliberately not aligned with the ship so the per-gyro transform matters
    return [
        MountConfig(forward=[0.0, 0.0, -1.0], up=[0.0, 1.0, 0.0]),
        MountConfig(forward=[1.0, 0.0, 0.0], up=[0.0, 0.0, 1.0]),
        MountConfig(forward=[0.0, 1.0, 0.0], up=[1.0, 0.0, 0.0]),
    ]


def _default_thruster_mounts() -> list[MountConfig]:
    return [
        MountConfig(forward=[0.0, 0.0, -1.0], up=[0.0, 1.0, 0.0]),
        MountConfig(forward=[0.0, 0.0, 1.0], up=[0.0, 1.0, 0.0]),
        MountConfig(forward=[-1.0, 0.0, 0.0], up=[0.0, 1.0, 0.0]),
        MountConfig(forward=[1.0, 0.0, 0.0], up=[0.0, 1.0, 0.0]),
        MountConfig(forward=[0.0, 1.0, 0.0], up=[0.0, 0.0, 1.0]),
        MountConfig(forward=[0.0, -1.0, 0.0], up=[0.0, 0.0, 1.0]),
    ]


@dataclass
class GyroscopeConfig:
    """Gyroscope parameters."""
    max_rate: float = math.pi  # Max rate per axis [rad/s]
    mounts: list[MountConfig] = field(default_factory=_default_gyro_mounts)


@dataclass
class ThrusterConfig:
    """Thruster parameters."""
    max_thrust: float = 1.0e5  # Max thrust [N]
    mounts: list[MountConfig] = field(default_factory=_default_thruster_mounts)


@dataclass
class ThrustTestConfig:
    """Thruster test sequence parameters."""
    period_ticks: int = 13  # Ticks per direction
    power: float = 100.0  # Output [%]


@dataclass
class ShipConfig:
    """Ship initial pose and actuators (world coordinates)."""
    initial_forward: list[float] = field(default_factory=lambda: [0.0, 0.0, -1.0])
    initial_up: list[float] = field(default_factory=lambda: [0.0, 1.0, 0.0])
    gyroscope: GyroscopeConfig = field(default_factory=GyroscopeConfig)
    thruster: ThrusterConfig = field(default_factory=ThrusterConfig)


@dataclass
class SimulationConfig:
    """Simulation parameters."""
    time_warp: float = 1.0  # Control ticks per engine step
    telemetry_rate: float = 10.0  # Telemetry rate [Hz]

    # Environment (constant gravity fields in world frame [m/s^2])
    natural_gravity: list[float] = field(default_factory=lambda: [0.0, -9.81, 0.0])
    artificial_gravity: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class Config:
    """Root configuration."""
    nav: NavConfig = field(default_factory=NavConfig)
    ship: ShipConfig = field(default_factory=ShipConfig)
    thrust_test: ThrustTestConfig = field(default_factory=ThrustTestConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


def _load_pid(data: dict, default: PIDConfig) -> PIDConfig:
    return PIDConfig(
        kp=data.get("kp", default.kp),
        ki=data.get("ki", default.ki),
        kd=data.get("kd", default.kd),
    )


def _load_mounts(data: list, default: list[MountConfig]) -> list[MountConfig]:
    if data is None:
        return default
    defaults = MountConfig()
    return [
        MountConfig(
            forward=m.get("forward", defaults.forward),
            up=m.get("up", defaults.up),
        )
        for m in data
    ]


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from JSON file or return defaults.

    Args:
        path: Path to config JSON file. If None, returns defaults.

    Returns:
        Configuration object
    """
    if path is None or not path.exists():
        return Config()

    with open(path) as f:
        data = json.load(f)

    # Build config from nested dict
    config = Config()

    if "nav" in data:
        nav = data["nav"]
        config.nav.updates_per_second = nav.get(
            "updates_per_second", config.nav.updates_per_second
        )
        config.nav.slowdown_angle = nav.get("slowdown_angle", config.nav.slowdown_angle)
        config.nav.pitch_pid = _load_pid(nav.get("pitch_pid", {}), config.nav.pitch_pid)
        config.nav.yaw_pid = _load_pid(nav.get("yaw_pid", {}), config.nav.yaw_pid)
        config.nav.align_to_horizon = nav.get("align_to_horizon", config.nav.align_to_horizon)
        config.nav.align_mode = nav.get("align_mode", config.nav.align_mode)
        config.nav.precision = nav.get("precision", config.nav.precision)

    if "ship" in data:
        ship = data["ship"]
        config.ship.initial_forward = ship.get("initial_forward", config.ship.initial_forward)
        config.ship.initial_up = ship.get("initial_up", config.ship.initial_up)

        if "gyroscope" in ship:
            gyro = ship["gyroscope"]
            config.ship.gyroscope.max_rate = gyro.get(
                "max_rate", config.ship.gyroscope.max_rate
            )
            config.ship.gyroscope.mounts = _load_mounts(
                gyro.get("mounts"), config.ship.gyroscope.mounts
            )

        if "thruster" in ship:
            thrust = ship["thruster"]
            config.ship.thruster.max_thrust = thrust.get(
                "max_thrust", config.ship.thruster.max_thrust
            )
            config.ship.thruster.mounts = _load_mounts(
                thrust.get("mounts"), config.ship.thruster.mounts
            )

    if "thrust_test" in data:
        test = data["thrust_test"]
        config.thrust_test.period_ticks = test.get(
            "period_ticks", config.thrust_test.period_ticks
        )
        config.thrust_test.power = test.get("power", config.thrust_test.power)

    if "simulation" in data:
        sim = data["simulation"]
        config.simulation.time_warp = sim.get("time_warp", config.simulation.time_warp)
        config.simulation.telemetry_rate = sim.get(
            "telemetry_rate", config.simulation.telemetry_rate
        )
        config.simulation.natural_gravity = sim.get(
            "natural_gravity", config.simulation.natural_gravity
        )
        config.simulation.artificial_gravity = sim.get(
            "artificial_gravity", config.simulation.artificial_gravity
        )

    logger.info("Loaded config from %s", path)
    return config


# Default config file path
CONFIG_FILE = Path(__file__).parent.parent / "config.json"

# Global state
_config: Optional[Config] = None
_config_mtime: float = 0.0


def get_config() -> Config:
    """Get global configuration instance.

    Auto-loads from config.json if it exists.
    """
    global _config, _config_mtime

    if _config is None:
        _config, _config_mtime = _load_config_with_mtime()

    return _config


def set_config(config: Config) -> None:
    """Set global configuration instance."""
    global _config
    _config = config


def reload_config() -> Config:
    """Force reload configuration from file."""
    global _config, _config_mtime
    _config, _config_mtime = _load_config_with_mtime()
    return _config


def check_config_changed() -> bool:
    """Check if config file has changed since last load.

    Returns:
        True if config file was modified and config was reloaded
    """
    global _config_mtime

    if not CONFIG_FILE.exists():
        return False

    current_mtime = CONFIG_FILE.stat().st_mtime
    if current_mtime > _config_mtime:
        reload_config()
        return True

    return False


def _load_config_with_mtime() -> tuple[Config, float]:
    """Load config and return with file mtime."""
    if CONFIG_FILE.exists():
        mtime = CONFIG_FILE.stat().st_mtime
        config = load_config(CONFIG_FILE)
        return config, mtime
    else:
        return Config(), 0.0
