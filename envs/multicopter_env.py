import logging

import gymnasium as gym
from gymnasium.spaces import Box
import numpy as np
import mujoco
import mujoco.viewer

from multicopter import InvalidInputLength, VehicleState, default_quadcopter
from multicopter.drone_config import DT, GRAVITY, MAX_SPIN_RATE, SPAWN_ALTITUDE

logger = logging.getLogger(__name__)


def _to_unit(x, bounds: Box) -> np.ndarray:
    """Physical values in [bounds.low, bounds.high] -> [-1, 1]."""
    return 2.0 * (np.asarray(x) - bounds.low) / (bounds.high - bounds.low) - 1.0


def _from_unit(u, bounds: Box) -> np.ndarray:
    """[-1, 1] -> physical values in [bounds.low, bounds.high]."""
    return bounds.low + (np.asarray(u) + 1.0) * 0.5 * (bounds.high - bounds.low)


def build_mjcf(vehicle, dt: float = DT, gravity=GRAVITY) -> str:
    """MJCF model with the vehicle as a single free rigid body.

    MuJoCo is only the external integrator here: rotor forces are applied
    as a world-frame wrench through ``xfrc_applied`` each step.
    """
    I = vehicle.inertia
    fullinertia = f"{I[0, 0]} {I[1, 1]} {I[2, 2]} {I[0, 1]} {I[0, 2]} {I[1, 2]}"
    arm = max(float(np.linalg.norm(p.position[:2])) for p in vehicle.multicopter.propellers) or 0.05
    rotors = "\n".join(
        f'      <geom name="rotor{i}" type="cylinder" size="{0.4 * arm:.4f} 0.002" '
        f'pos="{p.position[0]} {p.position[1]} {p.position[2] + 0.01}" '
        f'rgba="{"0.2 0.6 1 0.6" if p.rotation_direction.sign > 0 else "1 0.4 0.2 0.6"}" '
        f'contype="0" conaffinity="0"/>'
        for i, p in enumerate(vehicle.multicopter.propellers)
    )
    return f"""
<mujoco model="{vehicle.name}">
  <option timestep="{dt}" gravity="{gravity[0]} {gravity[1]} {gravity[2]}"/>
  <worldbody>
    <light pos="0 0 5" dir="0 0 -1"/>
    <geom name="floor" type="plane" size="20 20 0.1" rgba="0.8 0.8 0.8 1"/>
    <body name="vehicle" pos="0 0 0">
      <freejoint name="root"/>
      <inertial pos="0 0 0" mass="{vehicle.mass}" fullinertia="{fullinertia}"/>
      <geom name="frame" type="box" size="{arm:.4f} {0.2 * arm:.4f} 0.005" rgba="0.3 0.3 0.3 1"/>
{rotors}
    </body>
  </worldbody>
</mujoco>
"""


class MulticopterEnv(gym.Env):
    """Multicopter stepped by MuJoCo with the rotor wrench from ``multicopter``.

    Actions are per-rotor spin rates normalized to [-1, 1] (-1 = stopped,
    +1 = ``max_spin_rate``). Observations are the normalized 12D state.
    """

    metadata = {"render_modes": ["human", "rgb_array"]}

    def __init__(self, vehicle=None, render_mode: str | None = None,
                 spawn_altitude: float = SPAWN_ALTITUDE, max_spin_rate: float = MAX_SPIN_RATE,
                 max_episode_steps: int = 1000, dt: float = DT, gravity=GRAVITY):
        super().__init__()
        self.vehicle = vehicle or default_quadcopter()
        self.spawn_altitude = spawn_altitude
        self.max_episode_steps = max_episode_steps
        self.gravity = np.array(gravity, dtype=np.float64)
        self.render_mode = render_mode
        self._viewer = None

        n = self.vehicle.rotor_count
        self.action_space = Box(low=-1.0, high=1.0, shape=(n,), dtype=np.float32)
        self.observation_space = Box(low=-1.0, high=1.0, shape=(12,), dtype=np.float32)

        # Physical observation bounds (before normalization)
        self._obs_bounds = Box(
            low=np.array([-20, -20, 0.0, -np.pi, -np.pi, -np.pi, -10, -10, -10, -6*np.pi, -6*np.pi, -6*np.pi], dtype=np.float32),
            high=np.array([20, 20, 20, np.pi, np.pi, np.pi, 10, 10, 10, 6*np.pi, 6*np.pi, 6*np.pi], dtype=np.float32),
        )
        # Physical action bounds (before normalization) - spin rates in rad/s
        self._action_bounds = Box(
            low=np.zeros(n, dtype=np.float32),
            high=np.full(n, max_spin_rate, dtype=np.float32),
        )

        self.model = mujoco.MjModel.from_xml_string(build_mjcf(self.vehicle, dt, self.gravity))
        self.data = mujoco.MjData(self.model)
        self._body_id = self.model.body("vehicle").id
        self.dt = self.model.opt.timestep

        self._step_count = 0
        self._load_state(VehicleState.at_rest(spawn_altitude))

    @property
    def state(self) -> VehicleState:
        """Settled state after the last step (a copy)."""
        return self._state.copy()

    def spin_rates_to_action(self, omegas) -> np.ndarray:
        omegas = np.clip(np.abs(omegas), self._action_bounds.low, self._action_bounds.high)
        return _to_unit(omegas, self._action_bounds).astype(np.float32)

    def _load_state(self, state: VehicleState):
        mujoco.mj_resetData(self.model, self.data)
        qpos, qvel = state.get_mujoco_state()
        self.data.qpos[:7] = qpos
        self.data.qvel[:6] = qvel
        mujoco.mj_forward(self.model, self.data)
        self._read_state()

    def _read_state(self):
        self._state = VehicleState.from_mujoco(self.data.qpos[:7], self.data.qvel[:6])

    def _get_obs(self) -> np.ndarray:
        return _to_unit(self._state.vec(), self._obs_bounds).astype(np.float32)

    def _get_reward(self, terminated: bool) -> float:
        """Placeholder: the harness has no task, so every in-bounds step scores 1."""
        return 0.0 if terminated else 1.0

    def _is_terminated(self) -> bool:
        """Check if episode should terminate (state out of bounds or NaN)."""
        state_vec = self._state.vec()
        if not np.isfinite(state_vec).all():
            return True
        if not self._obs_bounds.contains(state_vec):
            return True
        return False

    def apply_force_torque(self, force, torque, control_inputs=None):
        """Advance one step with an externally computed world-frame wrench."""
        self.data.xfrc_applied[self._body_id, 0:3] = force
        self.data.xfrc_applied[self._body_id, 3:6] = torque
        mujoco.mj_step(self.model, self.data)

        self._step_count += 1
        self._read_state()

        obs = self._get_obs()
        terminated = self._is_terminated()
        reward = self._get_reward(terminated)
        truncated = self._step_count >= self.max_episode_steps

        info = {
            "state": self._state.vec().copy(),
            "force": np.array(force, dtype=np.float64),
            "torque": np.array(torque, dtype=np.float64),
        }
        if control_inputs is not None:
            info["motor_commands"] = np.array(control_inputs, dtype=np.float64)

        return obs, reward, terminated, truncated, info

    def step(self, action):
        """Apply normalized per-rotor spin rates for one step.

        A wrong-length action skips the rotor wrench for this step (the
        vehicle coasts under gravity) instead of raising.
        """
        action = np.asarray(action, dtype=np.float64).reshape(-1)
        omegas = action
        if action.shape == self._action_bounds.shape:
            omegas = _from_unit(np.clip(action, -1.0, 1.0), self._action_bounds)

        try:
            force, torque = self.vehicle.force_torque(self._state, omegas)
        except InvalidInputLength as err:
            logger.error("%s: %s", self.vehicle.name, err)
            force, torque = np.zeros(3), np.zeros(3)

        return self.apply_force_torque(force, torque, omegas)

    def reset(self, seed: int | None = None, options: dict | None = None):
        """Reset to a level hover at the spawn altitude.

        Args:
            seed: Random seed
            options: Optional {"state": VehicleState} initial state

        Returns:
            Tuple of (observation, info)
        """
        super().reset(seed=seed)
        self._step_count = 0

        self._load_state((options or {}).get("state") or VehicleState.at_rest(self.spawn_altitude))
        self.vehicle.controller.reset()
        obs = self._get_obs()
        info = {"state": self._state.vec().copy()}

        return obs, info

    def render(self):
        """Render the environment."""
        if self.render_mode == "human":
            if self._viewer is None:
                self._viewer = mujoco.viewer.launch_passive(self.model, self.data)
            self._viewer.sync()
        elif self.render_mode == "rgb_array":
            renderer = mujoco.Renderer(self.model, height=480, width=640)
            renderer.update_scene(self.data)
            return renderer.render()
        return None

    def close(self):
        """Close viewer if open."""
        if self._viewer is not None:
            self._viewer.close()
            self._viewer = None
