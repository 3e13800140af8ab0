"""
Ground-truth waypoint loading.

A trajectory file holds one pose per line:

    time qx qy qz qw px py pz

Fields may be separated by whitespace and/or commas. Blank lines and lines
starting with '#' are ignored. The quaternion is stored scalar-last and
describes the body-to-world rotation; it is converted to the scalar-first
convention used everywhere else in visim.

Ordering policy:
    - Times must be strictly increasing.
    - A repeated time, or a step backwards no larger than time_tolerance,
      is dropped (the first sample wins) and reported with a warning.
    - A step backwards larger than time_tolerance is an UnsortedInputError.
"""

import re
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

import numpy as np

from visim.coords.rotations import quat_from_xyzw, quat_normalize
from visim.coords.se3 import se3_from_quat_pos
from visim.sim.errors import (
    InsufficientDataError,
    MalformedInputError,
    UnsortedInputError,
)

WAYPOINT_FIELDS = 8

_SEPARATOR = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class Waypoint:
    """
    One timestamped ground-truth pose.

    Attributes:
        time: Timestamp [s].
        orientation: Body-to-world unit quaternion [qw, qx, qy, qz].
        position: Body origin in world frame [m], shape (3,).
    """

    time: float
    orientation: np.ndarray
    position: np.ndarray

    def to_matrix(self) -> np.ndarray:
        """Pose as a 4x4 homogeneous body-to-world transform."""
        return se3_from_quat_pos(self.orientation, self.position)


class WaypointStore:
    """
    Immutable, time-ordered sequence of at least two waypoints.

    Example:
        >>> store = load_data("trajectory.txt")
        >>> print(len(store), store.start_time, store.end_time)
    """

    def __init__(self, waypoints: Sequence[Waypoint]):
        waypoints = tuple(waypoints)
        if len(waypoints) < 2:
            raise InsufficientDataError(
                f"Need at least 2 waypoints, got {len(waypoints)}"
            )
        for prev, curr in zip(waypoints[:-1], waypoints[1:]):
            if curr.time <= prev.time:
                raise UnsortedInputError(
                    f"Waypoint times must be strictly increasing "
                    f"({prev.time} followed by {curr.time})"
                )
        self._waypoints: Tuple[Waypoint, ...] = waypoints
        self._times = np.array([wp.time for wp in waypoints], dtype=np.float64)
        self._times.flags.writeable = False

    def __len__(self) -> int:
        return len(self._waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self._waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self._waypoints[index]

    @property
    def times(self) -> np.ndarray:
        """Read-only array of waypoint times."""
        return self._times

    @property
    def start_time(self) -> float:
        return float(self._times[0])

    @property
    def end_time(self) -> float:
        return float(self._times[-1])

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Stack the waypoints into arrays.

        Returns:
            Tuple (t, quat, pos) with shapes (N,), (N, 4), (N, 3).
        """
        quat = np.array([wp.orientation for wp in self._waypoints])
        pos = np.array([wp.position for wp in self._waypoints])
        return self._times.copy(), quat, pos


def _parse_record(line: str, line_number: int) -> Waypoint:
    fields = [f for f in _SEPARATOR.split(line) if f]
    if len(fields) != WAYPOINT_FIELDS:
        raise MalformedInputError(
            f"expected {WAYPOINT_FIELDS} fields (time qx qy qz qw px py pz), "
            f"got {len(fields)}",
            line_number,
        )

    try:
        values = np.array([float(f) for f in fields], dtype=np.float64)
    except ValueError as exc:
        raise MalformedInputError(f"non-numeric field ({exc})", line_number) from exc

    if not np.all(np.isfinite(values)):
        raise MalformedInputError("non-finite value", line_number)

    try:
        q = quat_normalize(quat_from_xyzw(values[1:5]))
    except ValueError as exc:
        raise MalformedInputError(str(exc), line_number) from exc

    return Waypoint(time=float(values[0]), orientation=q, position=values[5:8].copy())


def parse_waypoints(
    lines: Iterable[str],
    time_tolerance: float = 0.0,
) -> WaypointStore:
    """
    Parse waypoint records into a WaypointStore.

    Args:
        lines: Text lines, one record per line.
        time_tolerance: Largest backwards time step [s] that is silently
                        dropped instead of rejected. Default 0.0.

    Returns:
        WaypointStore with strictly increasing times.

    Raises:
        MalformedInputError: Wrong field count, non-numeric or non-finite
            value, or zero-norm quaternion.
        UnsortedInputError: Time goes backwards by more than time_tolerance.
        InsufficientDataError: Fewer than 2 waypoints remain.
    """
    if time_tolerance < 0:
        raise ValueError(f"time_tolerance must be non-negative, got {time_tolerance}")

    waypoints: List[Waypoint] = []
    dropped = 0

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        wp = _parse_record(line, line_number)

        if waypoints and wp.time <= waypoints[-1].time:
            if waypoints[-1].time - wp.time > time_tolerance:
                raise UnsortedInputError(
                    f"line {line_number}: time {wp.time} precedes previous "
                    f"time {waypoints[-1].time} by more than {time_tolerance} s"
                )
            dropped += 1
            continue

        waypoints.append(wp)

    if dropped:
        warnings.warn(
            f"Dropped {dropped} waypoint(s) with repeated or out-of-order "
            f"timestamps (kept first occurrence)",
            UserWarning,
        )

    return WaypointStore(waypoints)


def load_data(
    path: Union[str, Path],
    time_tolerance: float = 0.0,
) -> WaypointStore:
    """
    Load a trajectory file into memory.

    Args:
        path: Path to the trajectory file (time qx qy qz qw px py pz per line).
        time_tolerance: See parse_waypoints.

    Returns:
        WaypointStore.
    """
    path = Path(path)
    with open(path, "r") as f:
        return parse_waypoints(f, time_tolerance=time_tolerance)
