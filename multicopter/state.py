"""Vehicle kinematic state with quaternion/Euler conversion."""

import numpy as np
from scipy.spatial.transform import Rotation

from .drone_config import BODY_UP


class VehicleState:
    """Externally-owned kinematic state read by the controller and dynamics.

    Attributes:
        position: World-frame position (x, y, z) [m]
        orientation: Body -> world rotation (scipy ``Rotation``)
        velocity: World-frame linear velocity [m/s]
        angular_velocity: World-frame angular velocity [rad/s]

    ``vec()`` flattens to the 12D layout
    [x, y, z, roll, pitch, yaw, vx, vy, vz, wx, wy, wz] with the angular
    velocity expressed in the body frame.
    """

    ROT_SEQ = "XYZ"  # Euler angle rotation sequence (extrinsic) - returns [roll, pitch, yaw]

    def __init__(self, position=None, orientation: Rotation | None = None,
                 velocity=None, angular_velocity=None):
        self.position = np.zeros(3) if position is None else np.array(position, dtype=np.float64)
        self.orientation = Rotation.identity() if orientation is None else orientation
        self.velocity = np.zeros(3) if velocity is None else np.array(velocity, dtype=np.float64)
        self.angular_velocity = (
            np.zeros(3) if angular_velocity is None else np.array(angular_velocity, dtype=np.float64)
        )

    @classmethod
    def at_rest(cls, altitude: float = 0.0) -> "VehicleState":
        """Level, motionless state at the given altitude above the origin."""
        return cls(position=[0.0, 0.0, altitude])

    @classmethod
    def from_euler(cls, roll: float, pitch: float, yaw: float, **kwargs) -> "VehicleState":
        orientation = Rotation.from_euler(cls.ROT_SEQ.lower(), [roll, pitch, yaw])
        return cls(orientation=orientation, **kwargs)

    @classmethod
    def from_mujoco(cls, qpos: np.ndarray, qvel: np.ndarray) -> "VehicleState":
        """Build from MuJoCo free-joint qpos/qvel arrays.

        Args:
            qpos: MuJoCo position array [x, y, z, qw, qx, qy, qz]
            qvel: MuJoCo velocity array [vx, vy, vz, wx, wy, wz], angular part in body frame
        """
        # MuJoCo uses wxyz, scipy uses xyzw
        quat_wxyz = qpos[3:7]
        quat_xyzw = np.array([quat_wxyz[1], quat_wxyz[2], quat_wxyz[3], quat_wxyz[0]])
        orientation = Rotation.from_quat(quat_xyzw)
        return cls(
            position=qpos[0:3],
            orientation=orientation,
            velocity=qvel[0:3],
            angular_velocity=orientation.apply(qvel[3:6]),
        )

    def get_mujoco_state(self) -> tuple[np.ndarray, np.ndarray]:
        """Get MuJoCo qpos/qvel arrays from current state.

        Returns:
            Tuple of (qpos, qvel) arrays for MuJoCo
        """
        quat_xyzw = self.orientation.as_quat()
        quat_wxyz = np.array([quat_xyzw[3], quat_xyzw[0], quat_xyzw[1], quat_xyzw[2]])

        qpos = np.concatenate([self.position, quat_wxyz])
        qvel = np.concatenate([self.velocity, self.body_angular_velocity])

        return qpos, qvel

    @property
    def attitude(self) -> np.ndarray:
        """Euler angles [roll, pitch, yaw] in radians."""
        return self.orientation.as_euler(self.ROT_SEQ.lower())

    @property
    def altitude(self) -> float:
        return float(self.position[2])

    @property
    def body_angular_velocity(self) -> np.ndarray:
        """Angular velocity rotated from the world frame into the body frame."""
        return self.orientation.inv().apply(self.angular_velocity)

    @property
    def body_up(self) -> np.ndarray:
        """Body "up" axis expressed in the world frame."""
        return self.orientation.apply(BODY_UP)

    def copy(self) -> "VehicleState":
        return VehicleState(
            position=self.position.copy(),
            orientation=Rotation.from_quat(self.orientation.as_quat()),
            velocity=self.velocity.copy(),
            angular_velocity=self.angular_velocity.copy(),
        )

    def vec(self) -> np.ndarray:
        """Return state as a 12D vector."""
        return np.concatenate([
            self.position, self.attitude, self.velocity, self.body_angular_velocity,
        ]).astype(np.float32)

    def __repr__(self) -> str:
        return (
            f"VehicleState(pos={self.position}, att={np.rad2deg(self.attitude)}, "
            f"vel={self.velocity}, ang_vel={self.angular_velocity})"
        )
