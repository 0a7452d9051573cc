"""
Integration tests for the rocket tracker.

These tests verify that configuration, logging, calibration, filtering
and telemetry recording work together on simulated sensors.
"""

import csv
import logging

import numpy as np
import pytest
import structlog
from pydantic import ValidationError

from conftest import FakeBarometer, FakeIMU
from config.settings import get_settings, Settings
from state_estimation.rocket_tracker import RocketTracker, get_default_config
from utils.logger import get_logger, setup_logger
from utils.telemetry_recorder import CSV_HEADER, TelemetryRecorder


class TestConfigurationLoading:
    """Test configuration modules load correctly."""

    def test_settings_loads(self):
        """Test that settings can be loaded."""
        settings = get_settings()
        assert isinstance(settings, Settings)
        assert settings.tracker.dt > 0

    def test_settings_has_all_sections(self):
        """Test that settings has all expected sections."""
        settings = get_settings()

        assert hasattr(settings, "tracker")
        assert hasattr(settings, "logging")

    def test_environment_override(self, monkeypatch):
        """Test nested environment variables override defaults."""
        monkeypatch.setenv("ROCKET_TRACKER__DT", "0.05")
        monkeypatch.setenv("ROCKET_TRACKER__KALMAN_GAIN_ITERATIONS", "10")
        settings = Settings()
        assert settings.tracker.dt == pytest.approx(0.05)
        assert settings.tracker.kalman_gain_iterations == 10

    def test_invalid_environment_rejected(self, monkeypatch):
        """Test that out-of-range tunables fail validation."""
        monkeypatch.setenv("ROCKET_TRACKER__VERTICAL_AXIS_INDEX", "3")
        with pytest.raises(ValidationError):
            Settings()


class TestLogging:
    """Test logger setup."""

    @pytest.fixture
    def restore_logging(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        yield
        root.setLevel(level)
        for handler in root.handlers[:]:
            if handler not in handlers:
                handler.close()
                root.removeHandler(handler)
        structlog.reset_defaults()

    def test_file_logging(self, tmp_path, restore_logging):
        """Test that setup creates a timestamped log file that receives events."""
        log_file = setup_logger(log_level="INFO", log_to_file=True, log_directory=str(tmp_path))

        assert log_file is not None
        assert log_file.parent == tmp_path
        assert log_file.exists()

        get_logger("integration").info("Tracker armed", altitude=100.0)
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Tracker armed" in log_file.read_text()

    def test_console_only(self, tmp_path, restore_logging):
        """Test that file logging can be disabled."""
        assert setup_logger(log_to_file=False, log_directory=str(tmp_path)) is None
        assert list(tmp_path.iterdir()) == []


class TestTelemetryRecorder:
    """Test telemetry recording."""

    def test_inactive_recorder_skips(self):
        recorder = TelemetryRecorder()
        assert not recorder.record(0.0, 100.0, 0.0, (100.0, 0.0, 0.0))
        assert recorder.frames == []

    def test_statistics(self):
        """Test apogee and maxima over a simple arc."""
        recorder = TelemetryRecorder()
        recorder.start()
        recorder.record(0.0, 100.0, 10.0, (100.0, 0.0, 10.0))
        recorder.record(1.0, 150.0, -9.8, (150.0, 20.0, -9.8))
        recorder.record(2.0, 170.0, -9.8, (170.0, 5.0, -9.8))
        recorder.record(3.0, 160.0, -9.8, (160.0, -10.0, -9.8))
        recorder.stop()

        stats = recorder.get_statistics()
        assert stats["total_frames"] == 4
        assert stats["duration_seconds"] == pytest.approx(3.0)
        assert stats["apogee_altitude_m"] == pytest.approx(170.0)
        assert stats["apogee_time_s"] == pytest.approx(2.0)
        assert stats["max_velocity_ms"] == pytest.approx(20.0)
        assert stats["max_acceleration_ms2"] == pytest.approx(10.0)

    def test_empty_statistics(self):
        assert "error" in TelemetryRecorder().get_statistics()

    def test_save_csv(self, tmp_path):
        """Test CSV output."""
        recorder = TelemetryRecorder()
        recorder.start()
        recorder.record(0.0, 100.0, 0.5, (100.0, 0.0, 0.5))
        recorder.record(0.1, 101.0, 0.5, (100.5, 0.1, 0.5))

        path = recorder.save("flight.csv", directory=str(tmp_path))

        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 3
        assert float(rows[2][3]) == pytest.approx(100.5)


class TestSimulatedFlight:
    """Test the full calibrate-and-track loop on noisy simulated sensors."""

    @pytest.fixture
    def rng(self):
        return np.random.default_rng(42)

    def _build_tracker(self, rng, baro_noise, imu_noise, recorder=None):
        pad_altitude = 150.0
        barometer = FakeBarometer(pad_altitude + rng.normal(0.0, baro_noise, 500))
        imu = FakeIMU([(0.0, 0.0, a) for a in rng.normal(0.0, imu_noise, 500)])

        config = get_default_config()
        config.imu = imu
        config.barometer = barometer
        config.profile_sample_count = 500
        config.recorder = recorder
        return RocketTracker(config), barometer, imu

    def test_calibration_matches_noise(self, rng):
        """Test that profiled variances match the simulated noise."""
        tracker, _, _ = self._build_tracker(rng, baro_noise=0.5, imu_noise=0.1)

        assert tracker.launchpad_altitude == pytest.approx(150.0, abs=0.1)
        assert tracker.kalman_filter.R[0, 0] == pytest.approx(0.25, rel=0.2)
        assert tracker.kalman_filter.R[1, 1] == pytest.approx(0.01, rel=0.2)

    def test_powered_ascent(self, rng):
        """Test that a constant-thrust climb is tracked upward."""
        recorder = TelemetryRecorder()
        tracker, barometer, imu = self._build_tracker(
            rng, baro_noise=0.5, imu_noise=0.1, recorder=recorder
        )
        recorder.start()

        # 10 s of 15 m/s^2 climb at 10 Hz
        times = np.arange(1, 101) * 0.1
        truth = tracker.launchpad_altitude + 0.5 * 15.0 * times ** 2
        barometer.set_readings(truth + rng.normal(0.0, 0.5, times.size))
        imu.set_readings([(0.0, 0.0, 15.0 + n) for n in rng.normal(0.0, 0.1, times.size)])

        estimates = [tracker.track() for _ in times]
        recorder.stop()

        altitudes = np.array([e[0] for e in estimates])
        velocities = np.array([e[1] for e in estimates])

        assert altitudes[-1] > tracker.launchpad_altitude + 100.0
        assert velocities[-1] > 0
        assert altitudes[-1] > altitudes[len(altitudes) // 2]
        assert recorder.get_statistics()["total_frames"] == 100
