"""
Telemetry recording for flight data analysis.

Records each tracking tick's raw observation and filtered estimate for
post-flight analysis and filter tuning.

Usage:
    recorder = TelemetryRecorder()
    recorder.start()

    # During the control loop (RocketTracker does this when given a recorder)
    recorder.record(timestamp, altitude_obs, accel_obs, estimate)

    recorder.stop()
    recorder.save("flight_001.csv")
"""

import csv
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from config.settings import get_settings
from utils.logger import get_logger

logger = get_logger(__name__)


CSV_HEADER = [
    "timestamp",
    "altitude_obs", "acceleration_obs",
    "altitude", "velocity", "acceleration",
]


@dataclass
class TelemetryFrame:
    """Single tracking tick."""

    timestamp: float  # Seconds since tracking started

    # Observation fed to the filter (clamped altitude, world-frame vertical accel)
    altitude_obs: float
    acceleration_obs: float

    # Filtered estimate
    altitude: float
    velocity: float
    acceleration: float


@dataclass
class TelemetryRecorder:
    """
    Records telemetry frames during flight.

    Stores frames in memory during flight, then saves to CSV.

    Attributes:
        frames: List of recorded telemetry frames
        is_recording: Whether recording is active
    """

    frames: List[TelemetryFrame] = field(default_factory=list)
    is_recording: bool = False

    def start(self) -> None:
        """Start recording telemetry, discarding previous frames."""
        self.frames = []
        self.is_recording = True
        logger.info("Telemetry recording started")

    def stop(self) -> None:
        """Stop recording telemetry."""
        self.is_recording = False
        logger.info("Telemetry recording stopped", frames=len(self.frames))

    def record(
        self,
        timestamp: float,
        altitude_obs: float,
        acceleration_obs: float,
        estimate: Sequence[float],
    ) -> bool:
        """
        Record a telemetry frame.

        Args:
            timestamp: Seconds since tracking started
            altitude_obs: Altitude fed to the filter (m)
            acceleration_obs: Vertical acceleration fed to the filter (m/s^2)
            estimate: Filtered (altitude, velocity, acceleration)

        Returns:
            True if the frame was recorded, False if recording is inactive
        """
        if not self.is_recording:
            return False

        altitude, velocity, acceleration = (float(value) for value in estimate)
        self.frames.append(
            TelemetryFrame(
                timestamp=timestamp,
                altitude_obs=altitude_obs,
                acceleration_obs=acceleration_obs,
                altitude=altitude,
                velocity=velocity,
                acceleration=acceleration,
            )
        )
        return True

    def save(self, filename: Optional[str] = None, directory: Optional[str] = None) -> Path:
        """
        Save recorded telemetry to CSV file.

        Args:
            filename: Output filename (auto-generated if not provided)
            directory: Output directory (settings value if not provided)

        Returns:
            Path to saved file
        """
        output_dir = Path(directory or get_settings().logging.telemetry_directory)
        output_dir.mkdir(parents=True, exist_ok=True)

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"telemetry_{timestamp}.csv"

        filepath = output_dir / filename

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for frame in self.frames:
                writer.writerow([
                    frame.timestamp,
                    frame.altitude_obs, frame.acceleration_obs,
                    frame.altitude, frame.velocity, frame.acceleration,
                ])

        logger.info("Telemetry saved", filepath=str(filepath), frames=len(self.frames))
        return filepath

    def get_statistics(self) -> dict:
        """
        Calculate statistics from recorded telemetry.

        Returns:
            Dictionary with flight statistics
        """
        if not self.frames:
            return {"error": "No telemetry data recorded"}

        altitudes = np.array([f.altitude for f in self.frames])
        velocities = np.array([f.velocity for f in self.frames])
        accelerations = np.array([f.acceleration for f in self.frames])
        apogee_index = int(np.argmax(altitudes))

        return {
            "duration_seconds": self.frames[-1].timestamp - self.frames[0].timestamp,
            "total_frames": len(self.frames),
            "apogee_altitude_m": round(float(altitudes[apogee_index]), 2),
            "apogee_time_s": self.frames[apogee_index].timestamp,
            "max_velocity_ms": round(float(np.max(velocities)), 2),
            "max_acceleration_ms2": round(float(np.max(accelerations)), 2),
        }
