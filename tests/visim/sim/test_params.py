"""
Unit tests for visim/sim/params.py (SimulatorParams validation and JSON I/O).
"""

import json

import numpy as np
import pytest

from visim.sim.params import SimulatorParams


class TestDefaults:
    def test_default_values(self):
        params = SimulatorParams()
        assert params.sim_freq_imu == 400.0
        assert params.sim_freq_cam == 10.0
        assert params.sim_freq_vicon == 100.0
        assert (params.seed_imu, params.seed_vicon, params.seed_perturb) == (0, 1, 2)
        np.testing.assert_array_equal(params.q_marker_to_body, [1.0, 0.0, 0.0, 0.0])

    def test_gravity_vector(self):
        np.testing.assert_allclose(SimulatorParams().gravity_vector(), [0.0, 0.0, -9.81])
        np.testing.assert_allclose(
            SimulatorParams(map_frame='ned', gravity_mag=9.8).gravity_vector(), [0.0, 0.0, 9.8]
        )

    def test_frame_name_normalized(self):
        assert SimulatorParams(map_frame='ned').map_frame == 'NED'

    def test_marker_quaternion_normalized(self):
        params = SimulatorParams(q_marker_to_body=[2.0, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(params.q_marker_to_body, [1.0, 0.0, 0.0, 0.0])


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sim_freq_imu": 0.0},
            {"sim_freq_cam": -10.0},
            {"sim_freq_vicon": float("nan")},
            {"sigma_w": -1e-3},
            {"sigma_vicon_pos": float("inf")},
            {"gravity_mag": 0.0},
            {"knot_spacing": 0.0},
            {"time_tolerance": -0.1},
            {"map_frame": "ECEF"},
            {"p_marker_in_body": [0.0, 0.0]},
            {"initial_gyro_bias": [0.0, float("nan"), 0.0]},
            {"q_marker_to_body": [0.0, 0.0, 0.0, 0.0]},
            {"gravity_latitude_deg": 120.0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SimulatorParams(**kwargs).gravity_vector()

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="sim_freq_lidar"):
            SimulatorParams.from_dict({"sim_freq_lidar": 10.0})


class TestSerialization:
    def test_to_dict_is_json_serializable(self):
        params = SimulatorParams(p_marker_in_body=[0.1, 0.2, 0.3])
        config = params.to_dict()
        assert config["p_marker_in_body"] == [0.1, 0.2, 0.3]
        restored = SimulatorParams.from_dict(json.loads(json.dumps(config)))
        np.testing.assert_array_equal(restored.p_marker_in_body, params.p_marker_in_body)
        assert restored.sigma_a == params.sigma_a

    def test_from_json_resolves_relative_traj_path(self, tmp_path):
        config_path = tmp_path / "sim.json"
        config_path.write_text(
            json.dumps({"traj_path": "traj.txt", "sim_freq_imu": 200, "seed_imu": 5})
        )
        params = SimulatorParams.from_json(config_path)
        assert params.traj_path == str(tmp_path / "traj.txt")
        assert params.sim_freq_imu == 200.0
        assert params.seed_imu == 5

    def test_from_json_keeps_absolute_traj_path(self, tmp_path):
        traj = str(tmp_path / "data" / "traj.txt")
        config_path = tmp_path / "sim.json"
        config_path.write_text(json.dumps({"traj_path": traj}))
        assert SimulatorParams.from_json(config_path).traj_path == traj
