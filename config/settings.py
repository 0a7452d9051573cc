"""
Centralized settings and tunable parameters for the rocket tracker.

All magic numbers and configuration values should be defined here,
making it easy to tune the system without modifying code logic.

Usage:
    from config.settings import get_settings
    settings = get_settings()
    print(settings.tracker.dt)
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings


class TrackerSettings(BaseSettings):
    """Settings for sensor calibration and Kalman filtering."""

    # Control loop timing
    dt: float = Field(
        default=0.1,
        gt=0.0,
        description="Tracking timestep in seconds"
    )

    # Index into the world-frame acceleration vector that points up.
    # 2 matches Adafruit IMUs; other parts may differ.
    vertical_axis_index: int = Field(
        default=2,
        ge=0,
        le=2,
        description="World-frame acceleration component treated as vertical"
    )

    # Kalman gain warm-up
    kalman_gain_iterations: int = Field(
        default=50,
        ge=0,
        description="Gain/covariance iterations run before the first filter step"
    )

    # Calibration
    profile_sample_count: int = Field(
        default=1000,
        ge=2,
        description="Readings per sensor used to estimate measurement variance"
    )


class LoggingSettings(BaseSettings):
    """Settings for logging and telemetry."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(
        default=True,
        description="Whether to log to file"
    )
    log_directory: str = Field(
        default="logs",
        description="Directory for log files"
    )

    # Telemetry recording
    record_telemetry: bool = Field(
        default=False,
        description="Attach a started telemetry recorder to default tracker configs"
    )
    telemetry_directory: str = Field(
        default="telemetry_data",
        description="Directory for telemetry recordings"
    )


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    This provides a single point of access for all system configuration.
    """

    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_prefix = "ROCKET_"  # Environment variables like ROCKET_TRACKER__DT
        env_nested_delimiter = "__"


@lru_cache()
def get_settings() -> Settings:
    """
    Get the global settings instance (cached singleton).

    Returns:
        Settings: The global settings object with all configuration.

    Example:
        settings = get_settings()
        dt = settings.tracker.dt
    """
    return Settings()
