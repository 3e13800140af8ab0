"""
Gravity magnitude for IMU synthesis.

The simulator subtracts world-frame gravity from the trajectory
acceleration to form the specific force an accelerometer reports. The
magnitude is either a configured constant or the WGS-84 latitude model:

    g(φ) = 9.7803 * (1 + 0.0053024·sin²(φ) - 0.000005·sin²(2φ))

which accounts for Earth's oblateness and rotation (about 9.780 m/s² at
the equator, 9.832 m/s² at the poles).
"""

from typing import Optional

import numpy as np


def gravity_magnitude_wgs84(lat_rad: float) -> float:
    """
    Compute gravity magnitude using the WGS-84 latitude model.

    Args:
        lat_rad: Geodetic latitude in radians, in [-π/2, +π/2].

    Returns:
        Gravity magnitude g in m/s², approximately within [9.78, 9.84].

    Notes:
        - Sea level only; no altitude correction.

    Example:
        >>> g_equator = gravity_magnitude_wgs84(0.0)
        >>> print(f"Equator: {g_equator:.4f} m/s²")  # 9.7803
    """
    sin_lat = np.sin(lat_rad)
    sin_2lat = np.sin(2.0 * lat_rad)

    g = 9.7803 * (1.0 + 0.0053024 * sin_lat**2 - 0.000005 * sin_2lat**2)
    return float(g)


def gravity_magnitude(
    lat_deg: Optional[float] = None,
    default_g: float = 9.81,
) -> float:
    """
    Gravity magnitude with latitude-model fallback.

    Args:
        lat_deg: Geodetic latitude in degrees (optional).
                 If None, returns default_g.
        default_g: Gravity magnitude used when no latitude is given.

    Returns:
        Gravity magnitude in m/s².
    """
    if lat_deg is None:
        return float(default_g)
    if not -90.0 <= lat_deg <= 90.0:
        raise ValueError(f"Latitude must be within [-90, 90] deg, got {lat_deg}")
    return gravity_magnitude_wgs84(np.deg2rad(lat_deg))
