"""Quaternion utilities for body attitude.

All quaternions in the simulator are scalar-first Hamilton quaternions
q = [qw, qx, qy, qz] describing the body-to-world rotation, so that
v_world = R(q) @ v_body. Trajectory files carry them scalar-last
([qx, qy, qz, qw]); quat_from_xyzw / quat_to_xyzw are used at the file
boundary and nowhere else.
"""

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation


def _check_quat(q: NDArray[np.float64]) -> NDArray[np.float64]:
    q = np.asarray(q, dtype=np.float64)
    if q.shape != (4,):
        raise ValueError(f"quaternion must have shape (4,), got {q.shape}")
    return q


def _axis_quat(axis: int, angle: float) -> NDArray[np.float64]:
    q = np.zeros(4)
    q[0] = np.cos(0.5 * angle)
    q[1 + axis] = np.sin(0.5 * angle)
    return q


def euler_to_quat(
    roll: float,
    pitch: float,
    yaw: float,
) -> NDArray[np.float64]:
    """Quaternion for the yaw-pitch-roll sequence R = Rz(yaw) Ry(pitch) Rx(roll).

    Args:
        roll: Rotation about body x [rad].
        pitch: Rotation about body y [rad].
        yaw: Rotation about body z [rad].

    Returns:
        Unit quaternion [qw, qx, qy, qz].

    Example:
        >>> euler_to_quat(0.0, 0.0, np.pi / 2)  # heading 90 deg left
        array([0.70710678, 0.        , 0.        , 0.70710678])
    """
    q_yaw = _axis_quat(2, yaw)
    q_pitch = _axis_quat(1, pitch)
    q_roll = _axis_quat(0, roll)
    return quat_multiply(quat_multiply(q_yaw, q_pitch), q_roll)


def quat_to_rotation_matrix(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotation matrix of a unit quaternion.

    Uses R = (w² - |v|²) I + 2 v vᵀ + 2 w [v]x with v the vector part.

    Raises:
        ValueError: If q does not have shape (4,).
    """
    q = _check_quat(q)
    w = q[0]
    v = q[1:]
    v_cross = np.array(
        [
            [0.0, -v[2], v[1]],
            [v[2], 0.0, -v[0]],
            [-v[1], v[0], 0.0],
        ]
    )
    return (w * w - v @ v) * np.eye(3) + 2.0 * np.outer(v, v) + 2.0 * w * v_cross


def rotation_matrix_to_quat(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Unit quaternion of a rotation matrix, with qw >= 0.

    Args:
        R: Rotation matrix, shape (3, 3).

    Returns:
        Quaternion [qw, qx, qy, qz].

    Raises:
        ValueError: If R does not have shape (3, 3).
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"rotation matrix must have shape (3, 3), got {R.shape}")

    x, y, z, w = Rotation.from_matrix(R).as_quat()
    q = np.array([w, x, y, z])
    if q[0] < 0.0:
        q = -q
    return quat_normalize(q)


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Scale a quaternion to unit norm.

    Raises:
        ValueError: If q has (near) zero norm.
    """
    norm = np.linalg.norm(q)
    if norm < 1e-12:
        raise ValueError("Cannot normalize a zero-norm quaternion")
    return np.asarray(q, dtype=np.float64) / norm


def quat_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quaternion conjugate (inverse rotation for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def quat_multiply(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Hamilton product q1 ⊗ q2, so that R(q1 ⊗ q2) = R(q1) @ R(q2).

    Args:
        q1: Left quaternion, shape (4,).
        q2: Right quaternion, shape (4,).

    Returns:
        Product quaternion, shape (4,).
    """
    w1, v1 = q1[0], np.asarray(q1[1:], dtype=np.float64)
    w2, v2 = q2[0], np.asarray(q2[1:], dtype=np.float64)

    out = np.empty(4)
    out[0] = w1 * w2 - v1 @ v2
    out[1:] = w1 * v2 + w2 * v1 + np.cross(v1, v2)
    return out


def quat_from_xyzw(q_xyzw: NDArray[np.float64]) -> NDArray[np.float64]:
    """Reorder a scalar-last quaternion [qx, qy, qz, qw] to [qw, qx, qy, qz]."""
    q_xyzw = np.asarray(q_xyzw, dtype=np.float64)
    return np.array([q_xyzw[3], q_xyzw[0], q_xyzw[1], q_xyzw[2]], dtype=np.float64)


def quat_to_xyzw(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Reorder a scalar-first quaternion [qw, qx, qy, qz] to [qx, qy, qz, qw]."""
    q = np.asarray(q, dtype=np.float64)
    return np.array([q[1], q[2], q[3], q[0]], dtype=np.float64)
