"""Unit tests for rigid body frames and rotation helpers.

Convention: orientation columns are right, up, backward in world frame.
Local forward axis is (0, 0, -1).
"""

import numpy as np
import pytest
from hypothesis import given, strategies as st

from navcomputer.dynamics.frame import (
    LOCAL_FORWARD,
    Frame,
    axis_angle_matrix,
    make_orientation,
    orthonormalize,
    rotation_vector_matrix,
)


angles = st.floats(min_value=-np.pi, max_value=np.pi, allow_nan=False, allow_infinity=False)


class TestFrameAxes:
    """Tests for frame axis accessors."""

    def test_identity_axes(self):
        """Identity frame: right=+X, up=+Y, forward=-Z."""
        frame = Frame()

        np.testing.assert_array_equal(frame.right, [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(frame.left, [-1.0, 0.0, 0.0])
        np.testing.assert_array_equal(frame.up, [0.0, 1.0, 0.0])
        np.testing.assert_array_equal(frame.down, [0.0, -1.0, 0.0])
        np.testing.assert_array_equal(frame.forward, [0.0, 0.0, -1.0])
        np.testing.assert_array_equal(frame.backward, [0.0, 0.0, 1.0])

    def test_local_forward_maps_to_forward(self):
        frame = Frame.from_forward_up([1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
        np.testing.assert_array_almost_equal(frame.to_world(LOCAL_FORWARD), frame.forward)

    def test_invalid_shape_raises(self):
        with pytest.raises(ValueError):
            Frame(orientation=np.eye(2))


class TestMakeOrientation:
    """Tests for building orientations from two vectors."""

    def test_facing_right(self):
        """Facing +X with +Y up: right axis becomes +Z."""
        m = make_orientation(np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))

        np.testing.assert_array_almost_equal(m[:, 0], [0.0, 0.0, 1.0])
        np.testing.assert_array_almost_equal(m[:, 1], [0.0, 1.0, 0.0])
        np.testing.assert_array_almost_equal(m[:, 2], [-1.0, 0.0, 0.0])

    def test_up_is_orthogonalized(self):
        m = make_orientation(np.array([0.0, 0.0, -1.0]), np.array([0.0, 1.0, 1.0]))
        np.testing.assert_array_almost_equal(m[:, 1], [0.0, 1.0, 0.0])

    def test_result_is_rotation(self):
        m = make_orientation(np.array([1.0, 2.0, 3.0]), np.array([0.0, 1.0, 0.0]))
        np.testing.assert_array_almost_equal(m.T @ m, np.eye(3))
        assert np.isclose(np.linalg.det(m), 1.0)

    def test_zero_forward_raises(self):
        with pytest.raises(ValueError, match="zero"):
            make_orientation(np.zeros(3), np.array([0.0, 1.0, 0.0]))

    def test_parallel_raises(self):
        with pytest.raises(ValueError, match="parallel"):
            make_orientation(np.array([0.0, 2.0, 0.0]), np.array([0.0, 1.0, 0.0]))


class TestTransforms:
    """Tests for local/world transforms."""

    def test_to_local_inverts_to_world(self):
        frame = Frame.from_forward_up([1.0, 1.0, 0.0], [0.0, 0.0, 1.0])
        v = np.array([0.3, -1.2, 2.5])

        np.testing.assert_array_almost_equal(frame.to_local(frame.to_world(v)), v)

    def test_world_forward_is_local_forward(self):
        frame = Frame.from_forward_up([0.0, -1.0, 0.0], [1.0, 0.0, 0.0])
        np.testing.assert_array_almost_equal(frame.to_local(frame.forward), LOCAL_FORWARD)


class TestRotationMatrices:
    """Tests for axis-angle rotation matrices."""

    def test_zero_axis_is_identity(self):
        np.testing.assert_array_equal(axis_angle_matrix(np.zeros(3), 1.0), np.eye(3))

    def test_quarter_turn_about_y(self):
        """+90 deg about +Y carries +X onto -Z (right-handed)."""
        r = axis_angle_matrix(np.array([0.0, 1.0, 0.0]), np.pi / 2)
        np.testing.assert_array_almost_equal(r @ [1.0, 0.0, 0.0], [0.0, 0.0, -1.0])

    def test_axis_is_normalized(self):
        r1 = axis_angle_matrix(np.array([0.0, 0.0, 5.0]), 0.3)
        r2 = axis_angle_matrix(np.array([0.0, 0.0, 1.0]), 0.3)
        np.testing.assert_array_almost_equal(r1, r2)

    def test_rotation_vector_matrix(self):
        r = rotation_vector_matrix(np.array([np.pi, 0.0, 0.0]))
        np.testing.assert_array_almost_equal(r @ [0.0, 1.0, 0.0], [0.0, -1.0, 0.0])

    @given(angles, angles, angles)
    def test_rotation_matrix_is_orthonormal(self, x, y, z):
        """Property: rotation matrices are orthonormal with det 1."""
        r = rotation_vector_matrix(np.array([x, y, z]))
        np.testing.assert_array_almost_equal(r.T @ r, np.eye(3), decimal=10)
        assert np.isclose(np.linalg.det(r), 1.0)

    def test_orthonormalize_removes_drift(self):
        drifted = np.eye(3) + 1e-3 * np.array([[0.0, 1.0, 0.0], [0.5, 0.0, 0.0], [0.0, 0.0, 0.2]])
        r = orthonormalize(drifted)
        np.testing.assert_array_almost_equal(r.T @ r, np.eye(3))
        assert np.isclose(np.linalg.det(r), 1.0)


class TestRotatedFrame:
    def test_rotated_turns_forward(self):
        """Rotating -90 deg about +Y turns forward (-Z) toward +X."""
        frame = Frame().rotated(np.array([0.0, -np.pi / 2, 0.0]))
        np.testing.assert_array_almost_equal(frame.forward, [1.0, 0.0, 0.0])

    def test_rotated_keeps_origin(self):
        frame = Frame(origin=np.array([1.0, 2.0, 3.0]))
        rotated = frame.rotated(np.array([0.1, 0.2, 0.3]))
        np.testing.assert_array_equal(rotated.origin, [1.0, 2.0, 3.0])

    def test_copy_is_independent(self):
        frame = Frame()
        clone = frame.copy()
        clone.orientation[0, 0] = 5.0
        assert frame.orientation[0, 0] == 1.0
