"""
Interfaces for the sensor drivers consumed by the rocket tracker.

Drivers subclass these interfaces, talk to hardware inside ``run()``
and store the latest readings in the owned data record. Getters return
copies; the ``*_view`` getters lend a read-only view of the internal
storage for a single read without copying.

The tracker only relies on the method names, so any object providing
the same methods can stand in for a driver.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from utils.matrix import Vector, make_vector4


@dataclass
class IMUData:
    """
    Latest IMU readings.

    Attributes:
        acceleration: Linear acceleration in the rocket frame (m/s^2)
        magnetic: Magnetic field in the rocket frame (uT)
        orientation_euler: Roll, pitch, yaw (radians)
        orientation_quat: World-from-rocket unit quaternion [w, x, y, z]
    """

    acceleration: Vector = field(default_factory=lambda: Vector(3))
    magnetic: Vector = field(default_factory=lambda: Vector(3))
    orientation_euler: Vector = field(default_factory=lambda: Vector(3))
    orientation_quat: Vector = field(default_factory=lambda: make_vector4(1, 0, 0, 0))


@dataclass
class BarometerData:
    """
    Latest barometer readings.

    Attributes:
        altitude: Altitude derived from pressure (m)
        pressure: Static pressure (kPa)
        temperature: Temperature (C)
    """

    altitude: float = 0.0
    pressure: float = 0.0
    temperature: float = 0.0


class IMUInterface(ABC):
    """Base class for inertial measurement unit drivers."""

    def __init__(self):
        self.data = IMUData()

    @abstractmethod
    def run(self) -> None:
        """Refresh ``self.data`` from the device. May block on I/O."""

    def get_acceleration_vector(self) -> Vector:
        return self.data.acceleration.copy()

    def get_magnetic_vector(self) -> Vector:
        return self.data.magnetic.copy()

    def get_euler_orientation(self) -> Vector:
        return self.data.orientation_euler.copy()

    def get_quaternion_orientation(self) -> Vector:
        return self.data.orientation_quat.copy()

    def get_acceleration_vector_view(self) -> NDArray[np.float32]:
        return self.data.acceleration.view()

    def get_magnetic_vector_view(self) -> NDArray[np.float32]:
        return self.data.magnetic.view()

    def get_euler_orientation_view(self) -> NDArray[np.float32]:
        return self.data.orientation_euler.view()

    def get_quaternion_orientation_view(self) -> NDArray[np.float32]:
        return self.data.orientation_quat.view()


class BarometerInterface(ABC):
    """Base class for barometric altimeter drivers."""

    def __init__(self):
        self.data = BarometerData()

    @abstractmethod
    def run(self) -> None:
        """Refresh ``self.data`` from the device. May block on I/O."""

    def get_altitude(self) -> float:
        return self.data.altitude

    def get_pressure(self) -> float:
        return self.data.pressure

    def get_temperature(self) -> float:
        return self.data.temperature
