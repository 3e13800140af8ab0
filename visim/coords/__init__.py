"""Rotation and rigid-body transform utilities.

This module provides the attitude and pose math shared by the simulator:
- Rotation representations (quaternions, matrices, Euler angles)
- SO(3) / SE(3) exponential and logarithm maps used by the B-spline trajectory
"""

from visim.coords.rotations import (
    euler_to_quat,
    quat_conjugate,
    quat_from_xyzw,
    quat_multiply,
    quat_normalize,
    quat_to_rotation_matrix,
    quat_to_xyzw,
    rotation_matrix_to_quat,
)
from visim.coords.se3 import (
    se3_exp,
    se3_from_quat_pos,
    se3_hat,
    se3_inverse,
    se3_log,
    se3_to_quat_pos,
    se3_vee,
    skew,
    so3_exp,
    so3_log,
    vee,
)

__all__ = [
    # Rotations
    "euler_to_quat",
    "quat_conjugate",
    "quat_from_xyzw",
    "quat_multiply",
    "quat_normalize",
    "quat_to_rotation_matrix",
    "quat_to_xyzw",
    "rotation_matrix_to_quat",
    # Lie groups
    "se3_exp",
    "se3_from_quat_pos",
    "se3_hat",
    "se3_inverse",
    "se3_log",
    "se3_to_quat_pos",
    "se3_vee",
    "skew",
    "so3_exp",
    "so3_log",
    "vee",
]
