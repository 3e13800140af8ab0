"""
Data structures for simulated sensor streams.

This module defines the shared data types produced by the simulator:
    - Frame convention definition (world frame axes and gravity direction)
    - Measurement packets (IMU, camera trigger, pose-tracker)
    - Ground-truth IMU state with its 17-element vector layout

All structures use NumPy arrays for numerical fields. Measurement packets
are frozen; each one describes a single sample of one stream.

Timestamps:
    All timestamps are float seconds on the simulation clock.

Frame Conventions:
    - B: Body frame (IMU frame)
    - W: World frame (ENU by default)
    - M: Marker frame tracked by the pose-tracker, rigidly attached to B
"""

from dataclasses import dataclass
from typing import Literal

import numpy as np


# Sign of gravity along world z for each supported world frame
_GRAVITY_SIGN = {'ENU': -1, 'NED': +1}


@dataclass(frozen=True)
class FrameConvention:
    """
    World frame axes, which fix where gravity points.

    ENU (East-North-Up) has gravity along -z, NED (North-East-Down)
    along +z. Any other pairing of map_frame and gravity_direction is
    rejected at construction.

    Example:
        >>> FrameConvention.from_name('ned').gravity_vector(9.8)
        array([0. , 0. , 9.8])
    """

    map_frame: Literal['ENU', 'NED'] = 'ENU'
    gravity_direction: Literal[-1, +1] = -1

    def __post_init__(self) -> None:
        sign = _GRAVITY_SIGN.get(self.map_frame)
        if sign is None:
            raise ValueError(
                f"unsupported map_frame {self.map_frame!r}, "
                f"choose one of {sorted(_GRAVITY_SIGN)}"
            )
        if self.gravity_direction != sign:
            raise ValueError(
                f"{self.map_frame} has gravity along {sign:+d} z, "
                f"gravity_direction={self.gravity_direction} is inconsistent"
            )

    @classmethod
    def create_enu(cls) -> "FrameConvention":
        return cls.from_name('ENU')

    @classmethod
    def create_ned(cls) -> "FrameConvention":
        return cls.from_name('NED')

    @classmethod
    def from_name(cls, name: str) -> "FrameConvention":
        """Build the convention for a frame name, case-insensitive."""
        key = name.upper()
        if key not in _GRAVITY_SIGN:
            raise ValueError(f"Unknown map frame '{name}', expected 'ENU' or 'NED'")
        return cls(map_frame=key, gravity_direction=_GRAVITY_SIGN[key])

    def gravity_vector(self, g_mag: float = 9.81) -> np.ndarray:
        """World-frame gravity [m/s²] for magnitude g_mag."""
        return np.array([0.0, 0.0, self.gravity_direction * g_mag])


@dataclass(frozen=True)
class ImuMeasurement:
    """
    One simulated IMU sample.

    Attributes:
        t: Timestamp [s].
        gyro: Measured angular velocity in body frame, shape (3,) [rad/s].
        accel: Measured specific force in body frame, shape (3,) [m/s²].
    """

    t: float
    gyro: np.ndarray
    accel: np.ndarray


@dataclass(frozen=True)
class CameraTrigger:
    """Camera shutter event. Carries timing only."""

    t: float


@dataclass(frozen=True)
class ViconMeasurement:
    """
    One simulated pose-tracker sample of the marker frame.

    Attributes:
        t: Timestamp [s].
        orientation: Marker-to-world quaternion [qw, qx, qy, qz].
        position: Marker origin in world frame, shape (3,) [m].
    """

    t: float
    orientation: np.ndarray
    position: np.ndarray


@dataclass(frozen=True)
class ImuState:
    """
    Ground-truth IMU state at one instant.

    The vector layout returned by to_vector() is

        [t, qw, qx, qy, qz, px, py, pz, vx, vy, vz, bgx, bgy, bgz, bax, bay, baz]

    Attributes:
        t: Timestamp [s].
        orientation: Body-to-world quaternion [qw, qx, qy, qz].
        position: Body origin in world frame [m].
        velocity: Body velocity in world frame [m/s].
        gyro_bias: Gyroscope bias [rad/s].
        accel_bias: Accelerometer bias [m/s²].
    """

    t: float
    orientation: np.ndarray
    position: np.ndarray
    velocity: np.ndarray
    gyro_bias: np.ndarray
    accel_bias: np.ndarray

    STATE_DIM = 17

    def to_vector(self) -> np.ndarray:
        """Pack into the 17-element state vector."""
        return np.concatenate(
            [
                [self.t],
                self.orientation,
                self.position,
                self.velocity,
                self.gyro_bias,
                self.accel_bias,
            ]
        ).astype(np.float64)

    @classmethod
    def from_vector(cls, x: np.ndarray) -> "ImuState":
        """Unpack a 17-element state vector."""
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (cls.STATE_DIM,):
            raise ValueError(
                f"State vector must have shape ({cls.STATE_DIM},), got {x.shape}"
            )
        return cls(
            t=float(x[0]),
            orientation=x[1:5].copy(),
            position=x[5:8].copy(),
            velocity=x[8:11].copy(),
            gyro_bias=x[11:14].copy(),
            accel_bias=x[14:17].copy(),
        )
