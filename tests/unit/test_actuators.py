"""Unit tests for gyroscope and thruster handles."""

import numpy as np
import pytest

from navcomputer.actuators import Gyroscope, Thruster


class TestGyroscope:
    """Tests for gyroscope commands."""

    def test_initial_state(self):
        gyro = Gyroscope()

        assert not gyro.gyro_override
        assert not gyro.closed
        np.testing.assert_array_equal(gyro.get_command(), [0.0, 0.0, 0.0])

    def test_override_sets_flag(self):
        gyro = Gyroscope()

        gyro.set_override(0.1, -0.2, 0.3)

        assert gyro.gyro_override
        np.testing.assert_array_almost_equal(gyro.get_command(), [0.1, -0.2, 0.3])

    def test_override_clipped_per_axis(self):
        gyro = Gyroscope(max_rate=1.0)

        gyro.set_override(5.0, -5.0, 0.5)

        np.testing.assert_array_equal(gyro.get_command(), [1.0, -1.0, 0.5])

    def test_release(self):
        gyro = Gyroscope()
        gyro.set_override(0.1, 0.1, 0.1)

        gyro.release()

        assert not gyro.gyro_override
        np.testing.assert_array_equal(gyro.get_command(), [0.0, 0.0, 0.0])

    def test_close_releases(self):
        gyro = Gyroscope()
        gyro.set_override(0.1, 0.1, 0.1)

        gyro.close()

        assert gyro.closed
        assert not gyro.gyro_override

    def test_state_is_plain_python(self):
        gyro = Gyroscope(name="G1")
        gyro.set_override(0.1, 0.2, 0.3)

        state = gyro.get_state()

        assert state["name"] == "G1"
        assert isinstance(state["pitch"], float)
        assert state["override"] is True


class TestThruster:
    """Tests for thruster overrides."""

    def test_override_clamped(self):
        thruster = Thruster(max_thrust=100.0)

        thruster.thrust_override = 250.0
        assert thruster.thrust_override == 100.0

        thruster.thrust_override = -5.0
        assert thruster.thrust_override == 0.0

    def test_percentage(self):
        thruster = Thruster(max_thrust=200.0)
        thruster.thrust_override = 50.0

        assert thruster.thrust_override_percentage == pytest.approx(0.25)

    def test_close_cuts_thrust(self):
        thruster = Thruster()
        thruster.thrust_override = 1000.0

        thruster.close()

        assert thruster.closed
        assert thruster.thrust_override == 0.0
