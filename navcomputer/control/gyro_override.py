"""Fan-out of a body-frame rate command to every gyroscope.

Gyroscopes may be mounted at any orientation relative to the reference
body, so the command is re-expressed for each one:

    rate_world = R_body @ rate_body
    rate_gyro  = R_gyro.T @ rate_world
"""

from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from navcomputer.actuators.gyroscope import Gyroscope
from navcomputer.dynamics.frame import Frame


def release_gyros(gyros: Iterable[Gyroscope]) -> None:
    """Clear every gyroscope command and release override."""
    for gyro in gyros:
        gyro.release()


def apply_gyro_override(
    rate_body: NDArray[np.float64],
    body_frame: Frame,
    gyros: Iterable[Gyroscope],
    engaged: bool = True,
) -> None:
    """Write the commanded rate to every gyroscope in its own frame.

    Args:
        rate_body: Commanded rate [pitch, yaw, roll] in body coordinates
        body_frame: World pose of the reference body
        gyros: Gyroscopes to command
        engaged: If False, release every gyroscope instead
    """
    if not engaged:
        release_gyros(gyros)
        return

    rate_world = body_frame.to_world(rate_body)

    for gyro in gyros:
        pitch, yaw, roll = gyro.frame.to_local(rate_world)
        gyro.set_override(pitch, yaw, roll)
