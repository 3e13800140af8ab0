"""Shared trajectories for the simulator tests."""

import numpy as np
import pytest

from visim.coords.rotations import euler_to_quat
from visim.sim.waypoints import Waypoint, WaypointStore


def _store(times, quats, positions):
    return WaypointStore(
        [
            Waypoint(time=float(t), orientation=np.asarray(q), position=np.asarray(p))
            for t, q, p in zip(times, quats, positions)
        ]
    )


@pytest.fixture
def stationary_store():
    """Two identical poses at t = 0 and t = 10 s."""
    q = np.array([1.0, 0.0, 0.0, 0.0])
    p = np.array([1.0, 2.0, 3.0])
    return _store([0.0, 10.0], [q, q], [p, p])


@pytest.fixture
def circle_store():
    """Planar circle of radius 2 m with heading along the tangent, 0.1 s spacing."""
    times = np.arange(0.0, 4.0 + 1e-9, 0.1)
    w = 0.8
    quats = [euler_to_quat(0.05 * np.sin(t), 0.0, w * t + np.pi / 2) for t in times]
    positions = [
        np.array([2.0 * np.cos(w * t), 2.0 * np.sin(w * t), 0.5 * np.sin(t)])
        for t in times
    ]
    return _store(times, quats, positions)


@pytest.fixture
def line_store():
    """Constant velocity [1, -0.5, 0.2] m/s with fixed attitude, 1 s spacing."""
    times = np.arange(0.0, 10.0 + 1e-9, 1.0)
    v = np.array([1.0, -0.5, 0.2])
    q = np.array([1.0, 0.0, 0.0, 0.0])
    return _store(times, [q] * len(times), [v * t for t in times])
