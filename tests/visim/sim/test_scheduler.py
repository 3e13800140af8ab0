"""
Unit tests for visim/sim/scheduler.py (three-stream event scheduler).
"""

import pytest

from visim.sim.scheduler import EventScheduler, SchedulerState, StreamKind


class _Span:
    """Minimal trajectory: only the time span matters to the scheduler."""

    def __init__(self, start_time, end_time):
        self.start_time = start_time
        self.end_time = end_time

    def feasible(self, t):
        return self.start_time <= t <= self.end_time

    def evaluate(self, t):
        raise NotImplementedError


def _drain(sched, kind):
    times = []
    while True:
        t = sched.advance(kind)
        if t is None:
            return times
        times.append(t)


class TestStreamTiming:
    def test_imu_100hz_over_10s(self):
        sched = EventScheduler(_Span(0.0, 10.0), imu_rate=100, cam_rate=10, vicon_rate=50)
        times = _drain(sched, StreamKind.IMU)
        assert len(times) == 1000
        assert times[0] == pytest.approx(0.01)
        assert times[-1] == 10.0

    def test_arithmetic_sequence(self):
        sched = EventScheduler(_Span(2.0, 3.0), imu_rate=400, cam_rate=10, vicon_rate=100)
        times = _drain(sched, StreamKind.VICON)
        assert len(times) == 100
        for k, t in enumerate(times, start=1):
            assert t == pytest.approx(2.0 + k / 100.0, abs=1e-12)

    def test_stream_counts(self):
        sched = EventScheduler(_Span(0.0, 10.0), imu_rate=100, cam_rate=10, vicon_rate=50)
        assert len(_drain(sched, StreamKind.CAMERA)) == 100
        assert len(_drain(sched, StreamKind.VICON)) == 500

    def test_period_and_peek(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=200, cam_rate=10, vicon_rate=100)
        assert sched.period(StreamKind.IMU) == pytest.approx(0.005)
        assert sched.peek(StreamKind.CAMERA) == pytest.approx(0.1)
        assert sched.last_time(StreamKind.CAMERA) == 0.0
        # peek does not advance
        assert sched.peek(StreamKind.CAMERA) == pytest.approx(0.1)

    @pytest.mark.parametrize("start", [0.3, 1.7, 123.456, 19.999, 1403636579.758])
    def test_last_sample_lands_on_shifted_end(self, start):
        end = float(f"{start + 10.0:.3f}")
        sched = EventScheduler(_Span(start, end), imu_rate=100, cam_rate=10, vicon_rate=50)
        times = _drain(sched, StreamKind.IMU)
        assert len(times) == 1000
        assert times[-1] == end
        assert len(_drain(sched, StreamKind.CAMERA)) == 100
        assert len(_drain(sched, StreamKind.VICON)) == 500

    def test_millisecond_start_times_keep_final_sample(self):
        for ms in range(0, 20000, 37):
            start = ms / 1000.0
            end = float(f"{start + 10.0:.3f}")
            sched = EventScheduler(_Span(start, end), imu_rate=100, cam_rate=10, vicon_rate=50)
            assert len(_drain(sched, StreamKind.IMU)) == 1000, start

    def test_grid_time_past_end_is_not_snapped(self):
        sched = EventScheduler(_Span(0.0, 10.004), imu_rate=100, cam_rate=10, vicon_rate=50)
        times = _drain(sched, StreamKind.IMU)
        assert len(times) == 1000
        assert times[-1] == 10.0

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            EventScheduler(_Span(0.0, 1.0), imu_rate=0, cam_rate=10, vicon_rate=100)


class TestExhaustion:
    def test_exhaustion_is_sticky(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=10, cam_rate=10, vicon_rate=10)
        _drain(sched, StreamKind.IMU)
        assert sched.is_exhausted(StreamKind.IMU)
        for _ in range(3):
            assert sched.advance(StreamKind.IMU) is None
        assert not sched.is_exhausted(StreamKind.CAMERA)

    def test_ok_until_every_stream_exhausted(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=100, cam_rate=10, vicon_rate=20)
        assert sched.ok()
        assert sched.state is SchedulerState.RUNNING

        _drain(sched, StreamKind.IMU)
        _drain(sched, StreamKind.VICON)
        assert sched.ok()

        _drain(sched, StreamKind.CAMERA)
        assert not sched.ok()
        assert sched.state is SchedulerState.EXHAUSTED
        assert sched.next_stream() is None

    def test_span_shorter_than_every_period(self):
        sched = EventScheduler(_Span(0.0, 0.05), imu_rate=10, cam_rate=10, vicon_rate=10)
        assert not sched.ok()
        assert sched.advance(StreamKind.IMU) is None

    def test_clock_is_max_of_handed_out_times(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=100, cam_rate=10, vicon_rate=20)
        assert sched.now == 0.0
        sched.advance(StreamKind.CAMERA)
        assert sched.now == pytest.approx(0.1)
        sched.advance(StreamKind.IMU)
        assert sched.now == pytest.approx(0.1)
        assert sched.last_time(StreamKind.IMU) == pytest.approx(0.01)


class TestOrdering:
    def test_next_stream_tie_break(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=10, cam_rate=10, vicon_rate=10)
        order = []
        for _ in range(3):
            kind = sched.next_stream()
            order.append(kind)
            sched.advance(kind)
        assert order == [StreamKind.IMU, StreamKind.CAMERA, StreamKind.VICON]

    def test_next_stream_earliest_first(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=100, cam_rate=10, vicon_rate=20)
        assert sched.next_stream() is StreamKind.IMU
        for _ in range(10):
            sched.advance(StreamKind.IMU)
        # IMU now due at 0.11, camera at 0.1, vicon at 0.05
        assert sched.next_stream() is StreamKind.VICON

    def test_enforce_ordering_refuses_later_stream(self):
        sched = EventScheduler(
            _Span(0.0, 1.0), imu_rate=100, cam_rate=10, vicon_rate=10, enforce_ordering=True
        )
        assert sched.advance(StreamKind.CAMERA) is None
        assert not sched.is_exhausted(StreamKind.CAMERA)

        for _ in range(9):
            assert sched.advance(StreamKind.IMU) is not None
        # Equal due times are not blocked
        assert sched.advance(StreamKind.CAMERA) == pytest.approx(0.1)

    def test_independent_streams_by_default(self):
        sched = EventScheduler(_Span(0.0, 1.0), imu_rate=100, cam_rate=10, vicon_rate=10)
        assert sched.advance(StreamKind.CAMERA) == pytest.approx(0.1)
        assert sched.advance(StreamKind.IMU) == pytest.approx(0.01)
