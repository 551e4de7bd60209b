"""MuJoCo harness environments for the multicopter core."""

from .multicopter_env import MulticopterEnv, build_mjcf

__all__ = ["MulticopterEnv", "build_mjcf"]
