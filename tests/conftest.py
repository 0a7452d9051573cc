"""
Pytest configuration and shared fixtures for rocket tracker tests.
"""

import math
from itertools import cycle
from typing import Iterable, Sequence, Tuple

import numpy as np
import pytest

from state_estimation.rocket_tracker import RocketTrackerConfig
from state_estimation.sensors import BarometerInterface, IMUInterface
from utils.matrix import make_vector3, make_vector4


def axis_angle_quaternion(axis: Sequence[float], angle: float) -> np.ndarray:
    """Unit quaternion [w, x, y, z] rotating by angle (radians) about axis."""
    unit = np.asarray(axis, dtype=np.float64)
    unit = unit / np.linalg.norm(unit)
    return np.concatenate(([math.cos(angle / 2)], math.sin(angle / 2) * unit))


class FakeBarometer(BarometerInterface):
    """Barometer that replays a fixed sequence of altitudes forever."""

    def __init__(self, altitudes: Iterable[float]):
        super().__init__()
        self.run_count = 0
        self.set_readings(altitudes)

    def set_readings(self, altitudes: Iterable[float]) -> None:
        self._altitudes = cycle(list(altitudes))

    def run(self) -> None:
        self.run_count += 1
        self.data.altitude = next(self._altitudes)


class FakeIMU(IMUInterface):
    """IMU that replays rocket-frame accelerations at a fixed orientation."""

    def __init__(
        self,
        accelerations: Iterable[Tuple[float, float, float]],
        orientation: Sequence[float] = (1.0, 0.0, 0.0, 0.0),
    ):
        super().__init__()
        self.run_count = 0
        self.set_readings(accelerations, orientation)

    def set_readings(
        self,
        accelerations: Iterable[Tuple[float, float, float]],
        orientation: Sequence[float] = (1.0, 0.0, 0.0, 0.0),
    ) -> None:
        self._accelerations = cycle(list(accelerations))
        self.data.orientation_quat = make_vector4(*orientation)

    def run(self) -> None:
        self.run_count += 1
        self.data.acceleration = make_vector3(*next(self._accelerations))


@pytest.fixture
def barometer():
    """
    Barometer alternating between 99 m and 101 m.

    Population statistics: mean 100 m, variance 1 m^2.
    """
    return FakeBarometer([99.0, 101.0])


@pytest.fixture
def imu():
    """
    Upright IMU at rest alternating between -0.5 and 0.5 m/s^2 on the z axis.

    Readings are linear acceleration, gravity removed. Population
    statistics: mean 0 m/s^2, variance 0.25 m^2/s^4.
    """
    return FakeIMU([(0.0, 0.0, -0.5), (0.0, 0.0, 0.5)])


@pytest.fixture
def tracker_config(imu, barometer):
    """Small but complete tracker configuration."""
    return RocketTrackerConfig(
        imu=imu,
        barometer=barometer,
        dt=0.1,
        vertical_axis_index=2,
        kalman_gain_iterations=50,
        profile_sample_count=100,
    )
