"""Frame conversions on the vehicle state."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from multicopter import VehicleState


def test_attitude_returns_roll_pitch_yaw():
    state = VehicleState.from_euler(0.1, -0.2, 0.3)
    np.testing.assert_allclose(state.attitude, [0.1, -0.2, 0.3])


def test_body_angular_velocity_uses_inverse_orientation():
    yawed = VehicleState(orientation=Rotation.from_euler("z", 90, degrees=True),
                         angular_velocity=[1.0, 0.0, 0.0])
    # world x is body -y after a 90° yaw
    np.testing.assert_allclose(yawed.body_angular_velocity, [0.0, -1.0, 0.0], atol=1e-12)


def test_body_up_in_world_frame():
    pitched = VehicleState.from_euler(0.0, np.pi / 2, 0.0)
    np.testing.assert_allclose(pitched.body_up, [1.0, 0.0, 0.0], atol=1e-12)


def test_mujoco_angular_velocity_is_body_frame():
    qpos = np.array([0.0, 0.0, 1.0, np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])  # yaw 90°
    qvel = np.array([0.0, 0.0, 0.0, 0.0, 1.0, 0.0])
    state = VehicleState.from_mujoco(qpos, qvel)
    assert state.altitude == pytest.approx(1.0)
    np.testing.assert_allclose(state.angular_velocity, [-1.0, 0.0, 0.0], atol=1e-12)

    qpos_out, qvel_out = state.get_mujoco_state()
    np.testing.assert_allclose(qpos_out, qpos, atol=1e-12)
    np.testing.assert_allclose(qvel_out, qvel, atol=1e-12)


def test_vec_layout():
    state = VehicleState(position=[1.0, 2.0, 3.0], velocity=[4.0, 5.0, 6.0])
    vec = state.vec()
    assert vec.shape == (12,)
    np.testing.assert_allclose(vec[0:3], [1.0, 2.0, 3.0])
    np.testing.assert_allclose(vec[6:9], [4.0, 5.0, 6.0])


def test_copy_is_independent():
    state = VehicleState.at_rest(2.0)
    clone = state.copy()
    clone.position[2] = 5.0
    assert state.altitude == pytest.approx(2.0)
