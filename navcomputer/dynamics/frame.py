"""Rigid body pose (orthonormal basis + origin) and rotation helpers.

Convention:
    The orientation matrix columns are the body's right, up and backward
    axes expressed in world coordinates. Local coordinates are therefore
    (right, up, backward) and the local forward axis is (0, 0, -1).

    v_world = R @ v_local
    v_local = R.T @ v_world
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from navcomputer.dynamics.vector import as_vector


LOCAL_FORWARD = np.array([0.0, 0.0, -1.0])


def axis_angle_matrix(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """Create rotation matrix from axis-angle representation (Rodrigues).

    Args:
        axis: Rotation axis (unit vector or will be normalized)
        angle: Rotation angle in radians (right-handed)

    Returns:
        3x3 rotation matrix. Identity if axis is zero.
    """
    axis_norm = np.linalg.norm(axis)
    if axis_norm < 1e-15:
        return np.eye(3)

    x, y, z = axis / axis_norm
    k = np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ])
    return np.eye(3) + np.sin(angle) * k + (1.0 - np.cos(angle)) * (k @ k)


def rotation_vector_matrix(rotation: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotation matrix for a rotation vector (axis * angle)."""
    return axis_angle_matrix(rotation, float(np.linalg.norm(rotation)))


def orthonormalize(m: NDArray[np.float64]) -> NDArray[np.float64]:
    """Project a near-rotation matrix back onto SO(3).

    Removes drift accumulated by repeated integration steps.
    """
    u, _, vt = np.linalg.svd(m)
    r = u @ vt
    if np.linalg.det(r) < 0:
        u[:, -1] = -u[:, -1]
        r = u @ vt
    return r


def make_orientation(
    forward: NDArray[np.float64],
    up: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Create orientation matrix from forward and up direction vectors.

    The forward direction is kept exactly; up is made orthogonal to it
    using Gram-Schmidt.

    Args:
        forward: Forward direction in world coordinates
        up: Approximate up direction in world coordinates

    Returns:
        3x3 orientation matrix (columns: right, up, backward)

    Raises:
        ValueError: If vectors are parallel or zero
    """
    forward_norm = np.linalg.norm(forward)
    if forward_norm < 1e-10:
        raise ValueError("forward is zero vector")
    backward = -forward / forward_norm

    up_proj = up - np.dot(up, backward) * backward
    up_norm = np.linalg.norm(up_proj)
    if up_norm < 1e-10:
        raise ValueError("forward and up are parallel")
    up_axis = up_proj / up_norm

    right = np.cross(up_axis, backward)

    return np.column_stack((right, up_axis, backward))


@dataclass
class Frame:
    """World pose of a body or actuator.

    Attributes:
        orientation: 3x3 matrix, columns are right/up/backward in world frame
        origin: Position in world frame
    """

    orientation: NDArray[np.float64] = field(default_factory=lambda: np.eye(3))
    origin: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.orientation = np.array(self.orientation, dtype=np.float64)
        self.origin = as_vector(self.origin)
        if self.orientation.shape != (3, 3):
            raise ValueError(f"Expected 3x3 orientation, got {self.orientation.shape}")

    @classmethod
    def from_forward_up(
        cls,
        forward,
        up,
        origin: Optional[NDArray[np.float64]] = None,
    ) -> "Frame":
        """Build a frame facing ``forward`` with ``up`` as the up reference."""
        orientation = make_orientation(as_vector(forward), as_vector(up))
        return cls(orientation, np.zeros(3) if origin is None else origin)

    @property
    def right(self) -> NDArray[np.float64]:
        return self.orientation[:, 0].copy()

    @property
    def left(self) -> NDArray[np.float64]:
        return -self.orientation[:, 0]

    @property
    def up(self) -> NDArray[np.float64]:
        return self.orientation[:, 1].copy()

    @property
    def down(self) -> NDArray[np.float64]:
        return -self.orientation[:, 1]

    @property
    def backward(self) -> NDArray[np.float64]:
        return self.orientation[:, 2].copy()

    @property
    def forward(self) -> NDArray[np.float64]:
        return -self.orientation[:, 2]

    def to_local(self, v: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate a world-frame direction into this frame (transpose)."""
        return self.orientation.T @ v

    def to_world(self, v: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate a local direction into the world frame."""
        return self.orientation @ v

    def rotated(self, rotation_world: NDArray[np.float64]) -> "Frame":
        """Return this frame rotated by a world-frame rotation vector."""
        orientation = rotation_vector_matrix(rotation_world) @ self.orientation
        return Frame(orthonormalize(orientation), self.origin.copy())

    def copy(self) -> "Frame":
        return Frame(self.orientation.copy(), self.origin.copy())
