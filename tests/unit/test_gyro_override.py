"""Unit tests for fanning a rate command out to gyroscopes."""

import numpy as np

from navcomputer.actuators.gyroscope import Gyroscope
from navcomputer.control.gyro_override import apply_gyro_override, release_gyros
from navcomputer.dynamics.frame import Frame


class TestApplyGyroOverride:
    """Tests for per-gyroscope reprojection."""

    def test_aligned_gyro_gets_rate_unchanged(self):
        gyro = Gyroscope()

        apply_gyro_override(np.array([0.1, 0.2, 0.3]), Frame(), [gyro])

        np.testing.assert_array_almost_equal(gyro.get_command(), [0.1, 0.2, 0.3])
        assert gyro.gyro_override

    def test_yawed_gyro_sees_pitch_as_roll(self):
        """Gyro facing +x: body pitch (about +x) is its negative roll."""
        gyro = Gyroscope(frame=Frame.from_forward_up([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]))

        apply_gyro_override(np.array([0.1, 0.0, 0.0]), Frame(), [gyro])

        np.testing.assert_array_almost_equal(gyro.get_command(), [0.0, 0.0, -0.1])

    def test_world_rate_preserved_for_every_mount(self):
        """Each gyro's command maps back to the same world rate."""
        body = Frame.from_forward_up([1.0, 1.0, 0.0], [0.0, 0.0, 1.0])
        gyros = [
            Gyroscope(frame=Frame.from_forward_up([0.0, 0.0, -1.0], [0.0, 1.0, 0.0])),
            Gyroscope(frame=Frame.from_forward_up([1.0, 0.0, 0.0], [0.0, 0.0, 1.0])),
            Gyroscope(frame=Frame.from_forward_up([0.0, 1.0, 0.0], [1.0, 0.0, 0.0])),
        ]
        rate = np.array([0.2, -0.3, 0.1])

        apply_gyro_override(rate, body, gyros)

        expected = body.to_world(rate)
        for gyro in gyros:
            np.testing.assert_array_almost_equal(gyro.frame.to_world(gyro.get_command()), expected)

    def test_disengaged_releases(self):
        gyro = Gyroscope()
        gyro.set_override(0.1, 0.1, 0.1)

        apply_gyro_override(np.array([1.0, 1.0, 1.0]), Frame(), [gyro], engaged=False)

        np.testing.assert_array_equal(gyro.get_command(), [0.0, 0.0, 0.0])
        assert not gyro.gyro_override

    def test_no_gyros(self):
        apply_gyro_override(np.array([1.0, 0.0, 0.0]), Frame(), [])


class TestReleaseGyros:
    def test_release_is_idempotent(self):
        gyros = [Gyroscope(), Gyroscope()]
        for gyro in gyros:
            gyro.set_override(0.5, 0.5, 0.5)

        release_gyros(gyros)
        release_gyros(gyros)

        for gyro in gyros:
            assert not gyro.gyro_override
            np.testing.assert_array_equal(gyro.get_command(), [0.0, 0.0, 0.0])
