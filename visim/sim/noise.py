"""
Independent pseudo-random streams for measurement and state noise.

The simulator draws from three generators, each seeded separately:

    imu      white noise on gyroscope and accelerometer readings
    vicon    white noise on pose-tracker orientation and position
    perturb  random-walk increments of the IMU biases

No state is shared between streams, so the draws on one stream depend only
on its seed and its own call sequence. Changing the pose-tracker seed, or
pulling pose-tracker samples more or less often, leaves the IMU sequence
untouched.
"""

from typing import Union

import numpy as np

StdLike = Union[float, np.ndarray]


class GaussianStream:
    """
    One seeded source of zero-mean Gaussian draws.

    Args:
        seed: Seed passed to np.random.default_rng.
        name: Label used in repr.

    Example:
        >>> stream = GaussianStream(42)
        >>> n = stream.gaussian_vec3(0.01)  # shape (3,)
    """

    def __init__(self, seed: int, name: str = "stream"):
        self.name = name
        self.reseed(seed)

    def reseed(self, seed: int) -> None:
        """Restart this stream from seed. Other streams are not affected."""
        self._seed = int(seed)
        self._rng = np.random.default_rng(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def standard_normal(self, n: int) -> np.ndarray:
        """Draw n independent N(0, 1) samples."""
        return self._rng.standard_normal(n)

    def gaussian_vec3(self, std: StdLike) -> np.ndarray:
        """
        Draw a 3-vector with independent N(0, std²) components.

        Args:
            std: Scalar or per-axis standard deviation, shape (3,).

        Returns:
            Array of shape (3,).
        """
        std = np.asarray(std, dtype=np.float64)
        if np.any(std < 0):
            raise ValueError(f"Standard deviation must be non-negative, got {std}")
        return std * self._rng.standard_normal(3)

    def __repr__(self) -> str:
        return f"GaussianStream(name={self.name!r}, seed={self._seed})"


class NoiseSource:
    """
    The three noise streams used by the simulator.

    Args:
        seed_imu: Seed of the IMU measurement-noise stream.
        seed_vicon: Seed of the pose-tracker measurement-noise stream.
        seed_perturb: Seed of the bias random-walk stream.
    """

    def __init__(self, seed_imu: int, seed_vicon: int, seed_perturb: int):
        self.imu = GaussianStream(seed_imu, name="imu")
        self.vicon = GaussianStream(seed_vicon, name="vicon")
        self.perturb = GaussianStream(seed_perturb, name="perturb")

    def __repr__(self) -> str:
        return (
            f"NoiseSource(seed_imu={self.imu.seed}, seed_vicon={self.vicon.seed}, "
            f"seed_perturb={self.perturb.seed})"
        )
