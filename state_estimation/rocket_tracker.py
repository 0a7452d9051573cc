"""
Rocket vertical state tracking.

Calibrates sensor noise on the launchpad, configures the Kalman filter
and fuses one barometer/IMU reading per control tick.

Usage:
    config = get_default_config()
    config.imu = MyImu()
    config.barometer = MyBarometer()

    tracker = RocketTracker(config)  # Profiles sensors; rocket must be still

    while flying:
        altitude, velocity, acceleration = tracker.track()
"""

import numbers
from dataclasses import dataclass
from typing import Optional, Tuple

from config.settings import get_settings
from state_estimation.kalman_filter import KalmanFilter
from state_estimation.sensors import BarometerInterface, IMUInterface
from utils.history import History
from utils.logger import get_logger
from utils.math_helpers import rotate_vector
from utils.matrix import Vector
from utils.telemetry_recorder import TelemetryRecorder

logger = get_logger(__name__)


@dataclass
class RocketTrackerConfig:
    """
    Configuration bundle for RocketTracker.

    Attributes:
        imu: IMU driver (required)
        barometer: Barometer driver (required)
        dt: Tracking timestep in seconds
        vertical_axis_index: World-frame acceleration component that points up
        kalman_gain_iterations: Gain warm-up iterations
        profile_sample_count: Readings per sensor used for noise calibration
        recorder: Optional recorder that receives every tracked tick
    """

    imu: Optional[IMUInterface]
    barometer: Optional[BarometerInterface]
    dt: float
    vertical_axis_index: int
    kalman_gain_iterations: int
    profile_sample_count: int = 1000
    recorder: Optional[TelemetryRecorder] = None

    def validate(self) -> None:
        """
        Check the configuration before any sensor is touched.

        Raises:
            ValueError: If a sensor is missing or a tunable has the wrong type
                or is out of range
        """
        if self.imu is None:
            raise ValueError("RocketTracker requires an IMU")
        if self.barometer is None:
            raise ValueError("RocketTracker requires a barometer")
        if not self.dt > 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        for name in ("vertical_axis_index", "kalman_gain_iterations", "profile_sample_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.vertical_axis_index not in (0, 1, 2):
            raise ValueError(
                f"vertical_axis_index must be 0, 1 or 2, got {self.vertical_axis_index}"
            )
        if self.kalman_gain_iterations < 0:
            raise ValueError(
                f"kalman_gain_iterations must be >= 0, got {self.kalman_gain_iterations}"
            )
        if self.profile_sample_count < 2:
            raise ValueError(
                f"profile_sample_count must be >= 2, got {self.profile_sample_count}"
            )


def get_default_config() -> RocketTrackerConfig:
    """
    Build a fresh configuration from settings.

    The IMU and barometer are left as None; the owner must supply both.
    When telemetry recording is enabled, a started recorder is attached.
    """
    settings = get_settings()
    tracker_settings = settings.tracker

    recorder = None
    if settings.logging.record_telemetry:
        recorder = TelemetryRecorder()
        recorder.start()

    return RocketTrackerConfig(
        imu=None,
        barometer=None,
        dt=tracker_settings.dt,
        vertical_axis_index=tracker_settings.vertical_axis_index,
        kalman_gain_iterations=tracker_settings.kalman_gain_iterations,
        profile_sample_count=tracker_settings.profile_sample_count,
        recorder=recorder,
    )


class RocketTracker:
    """
    Estimates altitude, vertical velocity and vertical acceleration.

    Construction blocks while each sensor is sampled
    ``profile_sample_count`` times. The rocket must be at rest on the
    launchpad: the mean altitude becomes the launchpad altitude and the
    sample variances become the filter's measurement noise.

    Args:
        config: Tracker configuration with both sensors set

    Raises:
        ValueError: If the configuration is invalid
    """

    def __init__(self, config: RocketTrackerConfig):
        config.validate()

        self._imu = config.imu
        self._barometer = config.barometer
        self._dt = config.dt
        self._vertical_axis_index = config.vertical_axis_index
        self._profile_sample_count = config.profile_sample_count
        self._recorder = config.recorder
        self._tick_count = 0

        self.kalman_filter = KalmanFilter()

        baro_variance, imu_variance, self._launchpad_altitude = self.profile_sensors()

        self.kalman_filter.set_delta_t(config.dt)
        self.kalman_filter.set_initial_state(self._launchpad_altitude, 0, 0)
        self.kalman_filter.set_sensor_variance(baro_variance, imu_variance)
        self.kalman_filter.compute_kg(config.kalman_gain_iterations)

        logger.info(
            "Rocket tracker initialized",
            launchpad_altitude=self._launchpad_altitude,
            baro_variance=baro_variance,
            imu_variance=imu_variance,
            dt=config.dt,
            kalman_gain_iterations=config.kalman_gain_iterations,
        )

    @property
    def launchpad_altitude(self) -> float:
        """Mean barometer altitude measured during calibration."""
        return self._launchpad_altitude

    @property
    def tick_count(self) -> int:
        """Number of completed track() calls."""
        return self._tick_count

    def profile_sensors(self) -> Tuple[float, float, float]:
        """
        Sample both sensors to estimate their noise and the launchpad altitude.

        Acceleration is sampled on the rocket-frame vertical axis; the
        rocket is assumed to be upright and still while profiling.

        Returns:
            (barometer altitude variance, IMU acceleration variance,
             launchpad altitude)
        """
        altitude_readings = History(self._profile_sample_count)
        while not altitude_readings.at_capacity():
            self._barometer.run()
            altitude_readings.add(self._barometer.get_altitude())

        baro_stdev = altitude_readings.get_stdev()
        launchpad_altitude = altitude_readings.get_mean()

        accel_readings = History(self._profile_sample_count)
        while not accel_readings.at_capacity():
            self._imu.run()
            accel_readings.add(
                float(self._imu.get_acceleration_vector_view()[self._vertical_axis_index])
            )

        imu_stdev = accel_readings.get_stdev()

        logger.debug(
            "Sensors profiled",
            samples=self._profile_sample_count,
            baro_stdev=baro_stdev,
            imu_stdev=imu_stdev,
        )

        return baro_stdev * baro_stdev, imu_stdev * imu_stdev, launchpad_altitude

    def track(self, run_sensors: bool = True) -> Vector:
        """
        Fuse the latest sensor readings into a new state estimate.

        Args:
            run_sensors: Refresh both sensors before reading them

        Returns:
            State estimate [altitude, velocity, acceleration]
        """
        if run_sensors:
            self._imu.run()
            self._barometer.run()

        # Vertical acceleration relative to the Earth
        orientation = self._imu.get_quaternion_orientation()
        accel_rocket = self._imu.get_acceleration_vector()
        accel_world = rotate_vector(orientation, accel_rocket)
        accel_vertical = float(accel_world[self._vertical_axis_index])

        # Floor at the launchpad. Readings drop sharply at liftoff as air
        # rushes through the avionics bay past the barometer.
        altitude = self._barometer.get_altitude()
        altitude = max(altitude, self._launchpad_altitude)

        estimate = self.kalman_filter.filter(altitude, accel_vertical)

        if self._recorder is not None:
            self._recorder.record(
                self._tick_count * self._dt, altitude, accel_vertical, estimate
            )
        self._tick_count += 1

        return estimate
