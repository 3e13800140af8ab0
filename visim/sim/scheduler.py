"""
Simulation clock and the three periodic sensor streams.

Each stream (IMU, camera, pose-tracker) has its own rate and tick counter.
Its k-th sample is due at

    t_k = start_time + k / rate,   k = 1, 2, ...

computed from the counter rather than by repeated addition, so a 100 Hz
stream over [0, 10] s lands exactly on 10.0 at k = 1000. A grid time
within a few ulp of the trajectory end is snapped onto the end, so the
sample count does not depend on where the span sits on the time axis.

advance(stream) hands out the next due time of that stream and moves the
shared clock to max(now, due). A due time outside the trajectory span
exhausts the stream for good. The scheduler is RUNNING while at least one
stream still has a feasible pending sample and EXHAUSTED afterwards.

By default the streams are independent: pulling one never blocks on the
others. With enforce_ordering=True a stream is refused (without being
exhausted) while another live stream has a strictly earlier pending sample,
so callers see the samples in global time order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np

from visim.sim.bspline_se3 import ContinuousTrajectory


class StreamKind(Enum):
    """Sensor streams, in tie-breaking order."""

    IMU = "imu"
    CAMERA = "camera"
    VICON = "vicon"


class SchedulerState(Enum):
    RUNNING = "running"
    EXHAUSTED = "exhausted"


# Ties at equal due times go to the earlier entry
STREAM_PRIORITY = (StreamKind.IMU, StreamKind.CAMERA, StreamKind.VICON)


# Grid times within this many ulp of the span end are taken to be the end
END_SNAP_ULPS = 4


@dataclass
class _StreamCursor:
    kind: StreamKind
    rate: float
    start_time: float
    end_time: float
    ticks: int = 0
    exhausted: bool = False

    @property
    def period(self) -> float:
        return 1.0 / self.rate

    @property
    def last_time(self) -> float:
        return self._grid_time(self.ticks)

    @property
    def due_time(self) -> float:
        return self._grid_time(self.ticks + 1)

    def _grid_time(self, k: int) -> float:
        t = self.start_time + k / self.rate
        # start + k / rate can round to either side of an end time read from file
        tol = END_SNAP_ULPS * np.spacing(max(abs(self.start_time), abs(self.end_time)))
        if abs(t - self.end_time) <= tol:
            return self.end_time
        return t


class EventScheduler:
    """
    Owner of the simulation clock and the per-stream cursors.

    Args:
        trajectory: Continuous trajectory whose span bounds the simulation.
        imu_rate: IMU rate [Hz].
        cam_rate: Camera rate [Hz].
        vicon_rate: Pose-tracker rate [Hz].
        start_time: Initial clock and last-sample time of every stream.
                    Defaults to trajectory.start_time.
        enforce_ordering: Serve streams in global time order only.

    Example:
        >>> sched = EventScheduler(spline, imu_rate=400, cam_rate=10, vicon_rate=100)
        >>> t = sched.advance(StreamKind.IMU)  # None once exhausted
    """

    def __init__(
        self,
        trajectory: ContinuousTrajectory,
        imu_rate: float,
        cam_rate: float,
        vicon_rate: float,
        start_time: Optional[float] = None,
        enforce_ordering: bool = False,
    ):
        rates = {
            StreamKind.IMU: imu_rate,
            StreamKind.CAMERA: cam_rate,
            StreamKind.VICON: vicon_rate,
        }
        for kind, rate in rates.items():
            if rate <= 0:
                raise ValueError(f"{kind.value} rate must be positive, got {rate}")

        if start_time is None:
            start_time = trajectory.start_time

        self._trajectory = trajectory
        self._start_time = float(start_time)
        self._now = self._start_time
        self._enforce_ordering = enforce_ordering
        self._cursors: Dict[StreamKind, _StreamCursor] = {
            kind: _StreamCursor(
                kind=kind,
                rate=float(rate),
                start_time=self._start_time,
                end_time=float(trajectory.end_time),
            )
            for kind, rate in rates.items()
        }

    @property
    def now(self) -> float:
        """Current simulation time (latest sample handed out)."""
        return self._now

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.RUNNING if self.ok() else SchedulerState.EXHAUSTED

    def ok(self) -> bool:
        """True while some stream still has a feasible pending sample."""
        return any(self._is_live(c) for c in self._cursors.values())

    def period(self, kind: StreamKind) -> float:
        return self._cursors[kind].period

    def last_time(self, kind: StreamKind) -> float:
        """Time of the last sample handed out on the stream (start_time if none)."""
        return self._cursors[kind].last_time

    def peek(self, kind: StreamKind) -> float:
        """Pending due time of the stream, without advancing it."""
        return self._cursors[kind].due_time

    def is_exhausted(self, kind: StreamKind) -> bool:
        return not self._is_live(self._cursors[kind])

    def next_stream(self) -> Optional[StreamKind]:
        """
        Stream with the earliest feasible pending sample.

        Ties are broken IMU, then camera, then pose-tracker. Returns None
        when every stream is exhausted.
        """
        best = None
        for kind in STREAM_PRIORITY:
            cursor = self._cursors[kind]
            if not self._is_live(cursor):
                continue
            if best is None or cursor.due_time < self._cursors[best].due_time:
                best = kind
        return best

    def advance(self, kind: StreamKind) -> Optional[float]:
        """
        Hand out the next sample time of a stream.

        Returns:
            The due time, or None if the stream is exhausted (sticky) or,
            in ordered mode, another stream is due first.
        """
        cursor = self._cursors[kind]
        if cursor.exhausted:
            return None

        candidate = cursor.due_time
        if not self._trajectory.feasible(candidate):
            cursor.exhausted = True
            return None

        if self._enforce_ordering and self._blocked(kind, candidate):
            return None

        cursor.ticks += 1
        self._now = max(self._now, candidate)
        return candidate

    def _is_live(self, cursor: _StreamCursor) -> bool:
        return not cursor.exhausted and self._trajectory.feasible(cursor.due_time)

    def _blocked(self, kind: StreamKind, candidate: float) -> bool:
        for other in STREAM_PRIORITY:
            if other is kind:
                continue
            cursor = self._cursors[other]
            if self._is_live(cursor) and cursor.due_time < candidate:
                return True
        return False
