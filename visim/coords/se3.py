"""SO(3) and SE(3) operations for continuous-time trajectories.

This module implements the Lie group operations needed to fit and
differentiate rigid-body trajectories in 3D. Poses are 4x4 homogeneous
matrices T = [[R, p], [0, 1]] that map body-frame points into the world
frame (p_world = R @ p_body + p).

Key functions:
    - skew / vee: 3-vector <-> 3x3 skew-symmetric matrix
    - so3_exp / so3_log: exponential and logarithm maps of SO(3)
    - se3_hat / se3_vee: 6-vector <-> 4x4 twist matrix
    - se3_exp / se3_log: exponential and logarithm maps of SE(3)
    - se3_inverse / se3_from_quat_pos: pose helpers

Twist ordering: xi = [omega (3), v (3)], rotation first.
"""

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from visim.coords.rotations import quat_to_rotation_matrix, rotation_matrix_to_quat

_SMALL_ANGLE = 1e-8


def skew(w: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Skew-symmetric (hat) matrix of a 3-vector, so that skew(a) @ b = a × b.

    Args:
        w: Vector of shape (3,).

    Returns:
        3x3 skew-symmetric matrix.

    Examples:
        >>> a = np.array([1.0, 0.0, 0.0])
        >>> b = np.array([0.0, 1.0, 0.0])
        >>> np.allclose(skew(a) @ b, np.cross(a, b))
        True
    """
    return np.array(
        [
            [0.0, -w[2], w[1]],
            [w[2], 0.0, -w[0]],
            [-w[1], w[0], 0.0],
        ],
        dtype=np.float64,
    )


def vee(W: NDArray[np.float64]) -> NDArray[np.float64]:
    """Inverse of skew: extract the 3-vector from a skew-symmetric matrix."""
    return np.array([W[2, 1], W[0, 2], W[1, 0]], dtype=np.float64)


def so3_exp(w: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Exponential map from so(3) to SO(3) (Rodrigues' formula).

        R = I + (sin θ / θ) W + ((1 - cos θ) / θ²) W²,   θ = |w|

    Args:
        w: Rotation vector (axis * angle), shape (3,). Units: rad.

    Returns:
        3x3 rotation matrix.

    Notes:
        Taylor expansions are used below a small-angle threshold.
    """
    theta = np.linalg.norm(w)
    W = skew(w)
    if theta < _SMALL_ANGLE:
        return np.eye(3) + W + 0.5 * (W @ W)
    A = np.sin(theta) / theta
    B = (1.0 - np.cos(theta)) / (theta * theta)
    return np.eye(3) + A * W + B * (W @ W)


def so3_log(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Logarithm map from SO(3) to so(3).

    Args:
        R: 3x3 rotation matrix.

    Returns:
        Rotation vector w of shape (3,) with |w| in [0, π].
    """
    cos_theta = np.clip(0.5 * (np.trace(R) - 1.0), -1.0, 1.0)
    theta = np.arccos(cos_theta)

    if theta < _SMALL_ANGLE:
        return 0.5 * vee(R - R.T)

    if np.pi - theta < 1e-6:
        # Near π the antisymmetric part vanishes; recover the axis from R + I
        B = 0.5 * (R + np.eye(3))
        k = int(np.argmax(np.diag(B)))
        axis = B[:, k] / np.sqrt(max(B[k, k], _SMALL_ANGLE))
        axis = axis / np.linalg.norm(axis)
        return theta * axis

    return theta / (2.0 * np.sin(theta)) * vee(R - R.T)


def se3_hat(xi: NDArray[np.float64]) -> NDArray[np.float64]:
    """Map a twist [omega, v] to its 4x4 matrix form."""
    Xi = np.zeros((4, 4), dtype=np.float64)
    Xi[0:3, 0:3] = skew(xi[0:3])
    Xi[0:3, 3] = xi[3:6]
    return Xi


def se3_vee(Xi: NDArray[np.float64]) -> NDArray[np.float64]:
    """Inverse of se3_hat."""
    return np.concatenate([vee(Xi[0:3, 0:3]), Xi[0:3, 3]])


def _left_jacobian_coeffs(theta: float) -> Tuple[float, float]:
    """Coefficients (B, C) of V = I + B W + C W² for the SE(3) exponential."""
    if theta < 1e-4:
        t2 = theta * theta
        return 0.5 - t2 / 24.0, 1.0 / 6.0 - t2 / 120.0
    t2 = theta * theta
    return (1.0 - np.cos(theta)) / t2, (theta - np.sin(theta)) / (t2 * theta)


def se3_exp(xi: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Exponential map from se(3) to SE(3).

    Args:
        xi: Twist [omega (3), v (3)].

    Returns:
        4x4 homogeneous transform.
    """
    w = xi[0:3]
    v = xi[3:6]
    theta = np.linalg.norm(w)
    W = skew(w)
    B, C = _left_jacobian_coeffs(theta)
    V = np.eye(3) + B * W + C * (W @ W)

    T = np.eye(4, dtype=np.float64)
    T[0:3, 0:3] = so3_exp(w)
    T[0:3, 3] = V @ v
    return T


def se3_log(T: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Logarithm map from SE(3) to se(3).

    Args:
        T: 4x4 homogeneous transform.

    Returns:
        Twist [omega (3), v (3)] such that se3_exp(xi) == T.
    """
    w = so3_log(T[0:3, 0:3])
    theta = np.linalg.norm(w)
    W = skew(w)

    if theta < 1e-4:
        coeff = 1.0 / 12.0 + theta * theta / 720.0
    else:
        half = 0.5 * theta
        coeff = (1.0 - half * np.cos(half) / np.sin(half)) / (theta * theta)
    V_inv = np.eye(3) - 0.5 * W + coeff * (W @ W)

    return np.concatenate([w, V_inv @ T[0:3, 3]])


def se3_inverse(T: NDArray[np.float64]) -> NDArray[np.float64]:
    """Invert a homogeneous transform using R^T instead of a general inverse."""
    R = T[0:3, 0:3]
    T_inv = np.eye(4, dtype=np.float64)
    T_inv[0:3, 0:3] = R.T
    T_inv[0:3, 3] = -R.T @ T[0:3, 3]
    return T_inv


def se3_from_quat_pos(
    q: NDArray[np.float64], p: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Build a 4x4 pose from a body-to-world quaternion [qw, qx, qy, qz] and position."""
    T = np.eye(4, dtype=np.float64)
    T[0:3, 0:3] = quat_to_rotation_matrix(np.asarray(q, dtype=np.float64))
    T[0:3, 3] = p
    return T


def se3_to_quat_pos(
    T: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split a 4x4 pose into (quaternion [qw, qx, qy, qz], position)."""
    return rotation_matrix_to_quat(T[0:3, 0:3]), T[0:3, 3].copy()
