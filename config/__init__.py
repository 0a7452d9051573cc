"""
Configuration module for the rocket tracker.

This module provides centralized configuration management for the
tracking timestep, calibration and Kalman filter tunables, and logging.
"""

from config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
