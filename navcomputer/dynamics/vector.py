"""3D vector helpers shared by the controller and the simulation.

Vectors are numpy float64 arrays of shape (3,). Zero and unit tests use
tolerances so that degenerate geometry is caught before it reaches a
normalization or an inverse cosine.
"""

import numpy as np
from numpy.typing import NDArray


# Per-component magnitude below which a vector counts as zero
ZERO_TOLERANCE = 1e-4

# |length^2 - 1| below which a vector counts as already normalized
UNIT_TOLERANCE = 1e-9


def as_vector(v) -> NDArray[np.float64]:
    """Convert a sequence to a float64 3-vector (always a copy).

    Raises:
        ValueError: If the input is not three finite numbers
    """
    try:
        result = np.array(v, dtype=np.float64).reshape(-1)
    except TypeError:
        raise ValueError(f"Expected 3-element numeric vector, got {v!r}")
    if result.shape != (3,):
        raise ValueError(f"Expected 3-element vector, got {result.shape[0]}")
    if not np.all(np.isfinite(result)):
        raise ValueError(f"Vector components must be finite, got {result.tolist()}")
    return result


def is_zero(v: NDArray[np.float64], tolerance: float = ZERO_TOLERANCE) -> bool:
    """Check if every component is below tolerance in magnitude."""
    return bool(np.all(np.abs(v) < tolerance))


def is_unit(v: NDArray[np.float64], tolerance: float = UNIT_TOLERANCE) -> bool:
    """Check if vector has unit length."""
    return bool(abs(float(np.dot(v, v)) - 1.0) < tolerance)


def safe_normalize(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize vector to unit length.

    Args:
        v: 3D vector

    Returns:
        Unit vector. A zero vector is returned as zeros and an
        already-normalized vector is returned unchanged.
    """
    if is_zero(v):
        return np.zeros(3)
    if is_unit(v):
        return np.array(v, dtype=np.float64)
    return v / np.linalg.norm(v)


def angle_between(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Angle between two vectors in radians (0 if either is zero)."""
    if is_zero(a) or is_zero(b):
        return 0.0
    cos_angle = np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b))
    return float(np.arccos(np.clip(cos_angle, -1.0, 1.0)))


def round_vector(v: NDArray[np.float64], precision: int) -> NDArray[np.float64]:
    """Round each component to a fixed number of decimals.

    Negative zero is folded to zero so the formatted output is stable.
    """
    return np.round(v, precision) + 0.0


def format_vector(v: NDArray[np.float64], precision: int) -> str:
    """Format vector as ``{X:.. Y:.. Z:..}`` rounded to ``precision`` decimals."""
    x, y, z = (float(c) for c in round_vector(v, precision))
    return f"{{X:{x} Y:{y} Z:{z}}}"
