"""
Sensor models and data structures for the simulated streams.

Modules:
    types: Frame convention, measurement packets and ground-truth state
    gravity: Gravity magnitude (constant or WGS-84)
    imu_models: IMU bias/white-noise error model and density conversions

Design principles:
    - Measurement packets are frozen dataclasses
    - Quaternions are body-to-world, scalar first [qw, qx, qy, qz]
    - All algorithms use NumPy
"""

from visim.sensors.gravity import (
    gravity_magnitude,
    gravity_magnitude_wgs84,
)
from visim.sensors.imu_models import (
    corrupt_accel,
    corrupt_gyro,
    random_walk_std,
    white_noise_std,
)
from visim.sensors.types import (
    CameraTrigger,
    FrameConvention,
    ImuMeasurement,
    ImuState,
    ViconMeasurement,
)

__all__ = [
    # Types
    "CameraTrigger",
    "FrameConvention",
    "ImuMeasurement",
    "ImuState",
    "ViconMeasurement",
    # Gravity
    "gravity_magnitude",
    "gravity_magnitude_wgs84",
    # IMU error model
    "corrupt_accel",
    "corrupt_gyro",
    "random_walk_std",
    "white_noise_std",
]
