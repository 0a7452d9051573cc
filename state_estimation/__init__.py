"""
State estimation module for the rocket tracker.

This module handles:
- Vertical state estimation with a linear Kalman filter
- Startup sensor noise calibration and per-tick sensor fusion
- Interfaces for the IMU and barometer drivers
"""

from state_estimation.kalman_filter import KalmanFilter
from state_estimation.rocket_tracker import (
    RocketTracker,
    RocketTrackerConfig,
    get_default_config,
)
from state_estimation.sensors import BarometerInterface, IMUInterface

__all__ = [
    "KalmanFilter",
    "RocketTracker",
    "RocketTrackerConfig",
    "get_default_config",
    "BarometerInterface",
    "IMUInterface",
]
