"""Actuator handles driven by the navigation computer."""

from navcomputer.actuators.gyroscope import Gyroscope
from navcomputer.actuators.thruster import Thruster

__all__ = ["Gyroscope", "Thruster"]
