"""Rotation error between a body's forward axis and a target direction.

The error is returned as a pitch/yaw/roll rotation vector in the body's
local frame (right, up, backward): its direction is the rotation axis and
its magnitude the rotation angle in radians. Rotating the target direction
(in body coordinates) by this vector carries it onto the local forward
axis (0, 0, -1), so a positive yaw component means "turn the nose toward
+x".

With an up reference the solution is additionally constrained to keep the
body level (belly toward the reference) while facing the target. Without
one, or when forward and up are parallel, a pitch/yaw-only solution is
used.

Degenerate inputs never raise: every inverse cosine argument is clipped
to [-1, 1] and zero vectors are routed to explicit branches instead of
being normalized.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.dynamics.frame import Frame
from navcomputer.dynamics.vector import is_zero, safe_normalize


def _fallback_axis_angle(forward: NDArray[np.float64]) -> tuple[NDArray[np.float64], float]:
    """Pitch/yaw-only rotation for an unconstrained target direction."""
    axis = np.array([-forward[1], forward[0], 0.0])
    angle = float(np.arccos(np.clip(-forward[2], -1.0, 1.0)))
    return axis, angle


def _leveled_axis_angle(
    forward: NDArray[np.float64],
    left: NDArray[np.float64],
) -> tuple[NDArray[np.float64], float]:
    """Axis-angle of the target frame built from forward and left."""
    left = safe_normalize(left)
    up = np.cross(forward, left)

    # Rows are the target frame's right, up and backward axes in body coordinates
    m = np.array([-left, up, -forward])

    axis = np.array([
        m[2, 1] - m[1, 2],
        m[0, 2] - m[2, 0],
        m[1, 0] - m[0, 1],
    ])
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    angle = float(np.arccos(np.clip((trace - 1.0) * 0.5, -1.0, 1.0)))
    return axis, angle


def rotation_error(
    forward: NDArray[np.float64],
    up: Optional[NDArray[np.float64]],
    frame: Frame,
) -> NDArray[np.float64]:
    """Compute the rotation that aligns the body with a target direction.

    Args:
        forward: Target forward direction in world coordinates
        up: Up reference in world coordinates, or None
        frame: Current world pose of the body

    Returns:
        Rotation vector [pitch, yaw, roll] in body coordinates (rad).
        Zero if the target direction is zero (no target).
    """
    forward_local = frame.to_local(safe_normalize(forward))
    if is_zero(forward_local):
        return np.zeros(3)

    left = np.zeros(3)
    has_up = up is not None and not is_zero(up)
    if has_up:
        left = np.cross(frame.to_local(up), forward_local)

    if not has_up or is_zero(left):
        axis, angle = _fallback_axis_angle(forward_local)
    else:
        axis, angle = _leveled_axis_angle(forward_local, left)

    if is_zero(axis):
        # 0 or 180 degree flip: axis is undefined, use a pure yaw
        angle = 0.0 if forward_local[2] < 0 else np.pi
        return np.array([0.0, angle, 0.0])

    return safe_normalize(axis) * angle
