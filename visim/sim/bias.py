"""
Random-walk IMU bias process with replayable history.

Each advance over dt adds an independent Gaussian increment to every bias
component:

    b_g(t + dt) = b_g(t) + σ_wb · sqrt(dt) · n,   n ~ N(0, I3)
    b_a(t + dt) = b_a(t) + σ_ab · sqrt(dt) · n

The increments come from the dedicated perturbation stream. Every new
value is appended to a time-ordered history so the ground-truth bias at
any past time can be looked up without re-simulating. The lookup is a
right-continuous step function: bias_at(t) is the latest entry with
time <= t.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from visim.sensors.imu_models import random_walk_std
from visim.sim.noise import GaussianStream


@dataclass(frozen=True)
class BiasState:
    """
    IMU biases at one time.

    Attributes:
        time: Timestamp [s].
        accel_bias: Accelerometer bias [m/s²], shape (3,).
        gyro_bias: Gyroscope bias [rad/s], shape (3,).
    """

    time: float
    accel_bias: np.ndarray
    gyro_bias: np.ndarray


def _frozen_vec3(v: Optional[np.ndarray]) -> np.ndarray:
    out = np.zeros(3) if v is None else np.array(v, dtype=np.float64).reshape(3)
    out.flags.writeable = False
    return out


class BiasProcess:
    """
    Current IMU bias plus its append-only history.

    Invariants:
        - History times are strictly increasing.
        - current is always the last history entry.

    Args:
        rng: Perturbation stream used for the random-walk increments.
        start_time: Time of the initial bias [s].
        initial_accel_bias: Starting accelerometer bias. Default zeros.
        initial_gyro_bias: Starting gyroscope bias. Default zeros.

    Example:
        >>> process = BiasProcess(GaussianStream(3), start_time=0.0)
        >>> process.advance(0.01, walk_std_accel=3e-3, walk_std_gyro=2e-5)
        >>> process.bias_at(0.005).time  # 0.0, initial value still applies
    """

    def __init__(
        self,
        rng: GaussianStream,
        start_time: float = 0.0,
        initial_accel_bias: Optional[np.ndarray] = None,
        initial_gyro_bias: Optional[np.ndarray] = None,
    ):
        self._rng = rng
        self._initial = BiasState(
            time=float(start_time),
            accel_bias=_frozen_vec3(initial_accel_bias),
            gyro_bias=_frozen_vec3(initial_gyro_bias),
        )
        self._history: List[BiasState] = [self._initial]
        self._times: List[float] = [self._initial.time]

    @property
    def initial(self) -> BiasState:
        return self._initial

    @property
    def current(self) -> BiasState:
        return self._history[-1]

    @property
    def last_time(self) -> float:
        return self._times[-1]

    @property
    def history(self) -> Tuple[BiasState, ...]:
        return tuple(self._history)

    def advance(
        self,
        dt: float,
        walk_std_accel: float,
        walk_std_gyro: float,
    ) -> BiasState:
        """
        Step the biases forward by dt.

        Args:
            dt: Elapsed time [s], must be >= 0. dt == 0 returns the current
                value and leaves history and the RNG untouched.
            walk_std_accel: Accelerometer random-walk density σ_ab.
            walk_std_gyro: Gyroscope random-walk density σ_wb.

        Returns:
            The new current BiasState.

        Raises:
            ValueError: If dt is negative.
        """
        if dt < 0:
            raise ValueError(f"Bias process cannot move backwards in time (dt={dt})")
        if dt == 0:
            return self.current
        return self._step(self.last_time + dt, dt, walk_std_accel, walk_std_gyro)

    def advance_to(
        self,
        t: float,
        walk_std_accel: float,
        walk_std_gyro: float,
    ) -> BiasState:
        """Advance so the newest history entry is stamped exactly t."""
        dt = t - self.last_time
        if dt < 0:
            raise ValueError(
                f"Bias process cannot move backwards in time "
                f"(t={t}, last={self.last_time})"
            )
        if dt == 0:
            return self.current
        return self._step(float(t), dt, walk_std_accel, walk_std_gyro)

    def _step(
        self,
        new_time: float,
        dt: float,
        walk_std_accel: float,
        walk_std_gyro: float,
    ) -> BiasState:
        # Gyro increment first, then accel
        dbg = self._rng.gaussian_vec3(random_walk_std(walk_std_gyro, dt))
        dba = self._rng.gaussian_vec3(random_walk_std(walk_std_accel, dt))

        prev = self.current
        state = BiasState(
            time=new_time,
            accel_bias=_frozen_vec3(prev.accel_bias + dba),
            gyro_bias=_frozen_vec3(prev.gyro_bias + dbg),
        )
        self._history.append(state)
        self._times.append(new_time)
        return state

    def bias_at(self, t: float) -> BiasState:
        """
        Bias in effect at time t.

        Returns the latest history entry with time <= t, or the initial
        bias if t precedes the whole history. Does not mutate anything.
        """
        idx = bisect_right(self._times, t) - 1
        if idx < 0:
            return self._initial
        return self._history[idx]
