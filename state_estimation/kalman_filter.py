"""
Kalman filter for vertical rocket state estimation.

Fuses barometric altitude and vertical acceleration into an estimate of
altitude, vertical velocity and vertical acceleration.

State vector: [altitude, velocity, acceleration]
Observation vector: [altitude, acceleration]

The process model is constant acceleration over one timestep:
    altitude     += velocity * dt + 0.5 * acceleration * dt^2
    velocity     += acceleration * dt
    acceleration  = acceleration

Process noise is not modeled (Q = 0). The innovation covariance is
inverted with ``invert2x2_unchecked``: a singular innovation covariance
(e.g. negative sensor variances cancelling the error covariance)
produces inf/NaN in the gain and the estimate instead of raising.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from utils.logger import get_logger
from utils.matrix import (
    Matrix,
    Vector,
    identity,
    invert2x2_unchecked,
    make_vector2,
    make_vector3,
)

logger = get_logger(__name__)


# State indices
ALTITUDE = 0
VELOCITY = 1
ACCELERATION = 2

N_STATES = 3
N_OBSERVATIONS = 2


def _observation_matrix() -> Matrix:
    # [1 0 0]
    # [0 0 1]
    H = Matrix(N_OBSERVATIONS, N_STATES)
    H[0, ALTITUDE] = 1
    H[1, ACCELERATION] = 1
    return H


@dataclass
class KalmanFilter:
    """
    Discrete linear Kalman filter with three states and two observations.

    Lifecycle: configure with ``set_delta_t``, ``set_sensor_variance`` and
    ``set_initial_state``; warm the gain up with ``compute_kg``; then call
    ``filter`` once per tick. Filtering before configuration is allowed and
    uses the defaults below.

    Attributes:
        A: State transition matrix (identity until set_delta_t)
        Q: Process noise covariance (always zero)
        H: Observation matrix selecting altitude and acceleration
        R: Measurement noise covariance (diagonal, zero until configured)
        P: Error covariance
        K: Kalman gain
        E: Current state estimate
    """

    A: Matrix = field(default_factory=lambda: identity(N_STATES))
    Q: Matrix = field(default_factory=lambda: Matrix(N_STATES, N_STATES))
    H: Matrix = field(default_factory=_observation_matrix)
    R: Matrix = field(default_factory=lambda: Matrix(N_OBSERVATIONS, N_OBSERVATIONS))
    P: Matrix = field(default_factory=lambda: identity(N_STATES))
    K: Matrix = field(default_factory=lambda: Matrix(N_STATES, N_OBSERVATIONS))
    E: Vector = field(default_factory=lambda: Vector(N_STATES))

    # ==========================================================================
    # Configuration
    # ==========================================================================

    def set_delta_t(self, dt: float) -> None:
        """
        Set the timestep of the constant-acceleration transition model.

        Args:
            dt: Seconds between filter steps
        """
        self.A[0, 1] = dt
        self.A[0, 2] = 0.5 * dt * dt
        self.A[1, 2] = dt

    def set_sensor_variance(self, altitude_variance: float, acceleration_variance: float) -> None:
        """
        Set the measurement noise of each sensor.

        Values are not validated; callers derive them from sample statistics.

        Args:
            altitude_variance: Barometer altitude variance (m^2)
            acceleration_variance: IMU vertical acceleration variance (m^2/s^4)
        """
        self.R[0, 0] = altitude_variance
        self.R[1, 1] = acceleration_variance

    def set_initial_state(self, altitude: float, velocity: float, acceleration: float) -> None:
        """Set the state estimate the first filter step predicts from."""
        self.E = make_vector3(altitude, velocity, acceleration)

    def compute_kg(self, iterations: int) -> None:
        """
        Warm up the Kalman gain and error covariance.

        Resets P to identity, then runs the gain/covariance step
        ``iterations`` times without consuming observations or touching
        the state estimate. Zero iterations only resets P.

        Args:
            iterations: Number of warm-up steps
        """
        self.P = identity(N_STATES)
        for _ in range(iterations):
            self._compute_kg()

        logger.debug(
            "Kalman gain warmed up",
            iterations=iterations,
            gain=self.K.to_array().tolist(),
        )

    # ==========================================================================
    # Filtering
    # ==========================================================================

    def filter(self, altitude: float, acceleration: float) -> Vector:
        """
        Fuse one altitude/acceleration observation into the estimate.

        Args:
            altitude: Observed altitude (m)
            acceleration: Observed vertical acceleration (m/s^2)

        Returns:
            Copy of the new state estimate [altitude, velocity, acceleration]
        """
        observation = make_vector2(altitude, acceleration)

        # Predict
        predicted = self.A * self.E

        # Update
        self._compute_kg()
        innovation = observation - self.H * predicted
        self.E = predicted + self.K * innovation

        if not np.all(np.isfinite(self.E.view())):
            logger.warning(
                "Non-finite state estimate",
                state=self.E.to_array().tolist(),
                altitude_obs=altitude,
                acceleration_obs=acceleration,
            )

        return self.E.copy()

    def _compute_kg(self) -> None:
        """One step of the gain and covariance recursion."""
        H_t = self.H.transpose()
        S = self.H * self.P * H_t + self.R
        self.K = self.P * H_t * invert2x2_unchecked(S)
        self.P = (identity(N_STATES) - self.K * self.H) * self.P
        self.P = self.A * self.P * self.A.transpose() + self.Q

    # ==========================================================================
    # Accessors
    # ==========================================================================

    @property
    def state(self) -> Vector:
        """Copy of the current estimate [altitude, velocity, acceleration]."""
        return self.E.copy()

    @property
    def altitude(self) -> float:
        return self.E[ALTITUDE]

    @property
    def velocity(self) -> float:
        return self.E[VELOCITY]

    @property
    def acceleration(self) -> float:
        return self.E[ACCELERATION]

    @property
    def gain(self) -> Matrix:
        return self.K.copy()

    @property
    def error_covariance(self) -> Matrix:
        return self.P.copy()

    def get_uncertainty(self) -> Tuple[float, float, float]:
        """Get 1-sigma uncertainty of (altitude, velocity, acceleration)."""
        return (
            float(np.sqrt(self.P[ALTITUDE, ALTITUDE])),
            float(np.sqrt(self.P[VELOCITY, VELOCITY])),
            float(np.sqrt(self.P[ACCELERATION, ACCELERATION])),
        )
