"""
Unit tests for visim/sim/noise.py and visim/sim/bias.py.

Tests the seeded Gaussian streams and the random-walk bias history.
"""

import unittest

import numpy as np

from visim.sim.bias import BiasProcess
from visim.sim.noise import GaussianStream, NoiseSource


class TestGaussianStream(unittest.TestCase):
    """Test GaussianStream seeding and draws."""

    def test_same_seed_same_draws(self):
        a = GaussianStream(7)
        b = GaussianStream(7)
        np.testing.assert_array_equal(a.gaussian_vec3(0.1), b.gaussian_vec3(0.1))

    def test_reseed_restarts(self):
        stream = GaussianStream(7)
        first = stream.standard_normal(5)
        stream.reseed(7)
        np.testing.assert_array_equal(stream.standard_normal(5), first)

    def test_zero_std_is_zero(self):
        np.testing.assert_array_equal(GaussianStream(0).gaussian_vec3(0.0), np.zeros(3))

    def test_per_axis_std(self):
        stream = GaussianStream(3)
        ref = GaussianStream(3).standard_normal(3)
        std = np.array([1.0, 2.0, 0.0])
        np.testing.assert_allclose(stream.gaussian_vec3(std), std * ref)

    def test_negative_std_raises(self):
        with self.assertRaises(ValueError):
            GaussianStream(0).gaussian_vec3(-1.0)

    def test_sample_statistics(self):
        draws = GaussianStream(11).standard_normal(20000)
        self.assertAlmostEqual(np.mean(draws), 0.0, places=1)
        self.assertAlmostEqual(np.std(draws), 1.0, places=1)


class TestNoiseSource(unittest.TestCase):
    """Streams must not share state."""

    def test_streams_are_independent(self):
        quiet = NoiseSource(0, 1, 2)
        busy = NoiseSource(0, 1, 2)
        for _ in range(10):
            busy.vicon.gaussian_vec3(1.0)
            busy.perturb.gaussian_vec3(1.0)
        np.testing.assert_array_equal(quiet.imu.gaussian_vec3(1.0), busy.imu.gaussian_vec3(1.0))

    def test_seeds(self):
        noise = NoiseSource(10, 20, 30)
        self.assertEqual((noise.imu.seed, noise.vicon.seed, noise.perturb.seed), (10, 20, 30))


class TestBiasProcess(unittest.TestCase):
    """Test the random-walk bias process and its history."""

    def setUp(self):
        self.process = BiasProcess(
            GaussianStream(3),
            start_time=1.0,
            initial_accel_bias=np.array([0.1, 0.2, 0.3]),
            initial_gyro_bias=np.array([0.01, 0.02, 0.03]),
        )

    def test_initial_state(self):
        self.assertEqual(self.process.current.time, 1.0)
        np.testing.assert_array_equal(self.process.current.accel_bias, [0.1, 0.2, 0.3])
        self.assertEqual(len(self.process.history), 1)

    def test_zero_dt_is_noop(self):
        before = self.process.current
        after = self.process.advance(0.0, walk_std_accel=1.0, walk_std_gyro=1.0)
        self.assertIs(after, before)
        self.assertEqual(len(self.process.history), 1)

        # RNG untouched: the next increment equals the first draw of a fresh stream
        state = self.process.advance(0.25, walk_std_accel=1.0, walk_std_gyro=1.0)
        ref = GaussianStream(3)
        expected_dbg = ref.gaussian_vec3(0.5)
        expected_dba = ref.gaussian_vec3(0.5)
        np.testing.assert_allclose(state.gyro_bias, np.array([0.01, 0.02, 0.03]) + expected_dbg)
        np.testing.assert_allclose(state.accel_bias, np.array([0.1, 0.2, 0.3]) + expected_dba)

    def test_negative_dt_raises(self):
        with self.assertRaises(ValueError):
            self.process.advance(-0.1, walk_std_accel=1.0, walk_std_gyro=1.0)
        self.assertEqual(len(self.process.history), 1)

    def test_zero_walk_keeps_bias(self):
        state = self.process.advance(5.0, walk_std_accel=0.0, walk_std_gyro=0.0)
        self.assertEqual(state.time, 6.0)
        np.testing.assert_array_equal(state.gyro_bias, [0.01, 0.02, 0.03])

    def test_history_is_time_ordered_and_ends_at_current(self):
        for _ in range(5):
            self.process.advance(0.1, walk_std_accel=0.1, walk_std_gyro=0.1)
        times = [b.time for b in self.process.history]
        self.assertTrue(all(t1 > t0 for t0, t1 in zip(times[:-1], times[1:])))
        self.assertIs(self.process.history[-1], self.process.current)

    def test_advance_to_stamps_exact_time(self):
        state = self.process.advance_to(1.3, walk_std_accel=0.1, walk_std_gyro=0.1)
        self.assertEqual(state.time, 1.3)
        self.assertEqual(self.process.last_time, 1.3)
        with self.assertRaises(ValueError):
            self.process.advance_to(1.2, walk_std_accel=0.1, walk_std_gyro=0.1)

    def test_bias_at_is_step_lookup(self):
        b1 = self.process.advance_to(2.0, walk_std_accel=0.1, walk_std_gyro=0.1)
        b2 = self.process.advance_to(3.0, walk_std_accel=0.1, walk_std_gyro=0.1)

        self.assertIs(self.process.bias_at(0.5), self.process.initial)
        self.assertIs(self.process.bias_at(1.5), self.process.initial)
        self.assertIs(self.process.bias_at(2.0), b1)
        self.assertIs(self.process.bias_at(2.999), b1)
        self.assertIs(self.process.bias_at(3.0), b2)
        self.assertIs(self.process.bias_at(100.0), b2)

    def test_bias_at_does_not_mutate(self):
        self.process.advance_to(2.0, walk_std_accel=0.1, walk_std_gyro=0.1)
        self.process.bias_at(10.0)
        self.assertEqual(len(self.process.history), 2)

    def test_bias_arrays_are_read_only(self):
        with self.assertRaises(ValueError):
            self.process.current.gyro_bias[0] = 1.0


if __name__ == "__main__":
    unittest.main()
