"""Central multicopter physical parameters: single source of truth.

All Python modules should import from here instead of hardcoding values.
The default airframe is a small X-configuration quadcopter: four rotors on
the body diagonals, thrust along body +z, diagonal pairs spinning the same
way. World frame is Z-up.
"""

import numpy as np

# ── Base parameters (change these to update everywhere) ──
MASS = 0.1                      # kg
ARM_OFFSET = 0.05               # m (rotor offset along body x and y)
THRUST_CONSTANT = 2.0e-6        # N / (rad/s)²
DRAG_CONSTANT = 5.0e-8          # N·m / (rad/s)²
G = 9.81                        # m/s²
DT = 0.01                       # s (fixed simulation tick)
IXX = 0.01                      # kg·m²
IYY = 0.01                      # kg·m²
IZZ = 0.01                      # kg·m²
SPAWN_ALTITUDE = 2.0            # m
MAX_SPIN_RATE = 1000.0          # rad/s (action normalization only)

# ── Derived parameters ──
GRAVITY = np.array([0.0, 0.0, -G])                          # world frame
WORLD_UP = np.array([0.0, 0.0, 1.0])
BODY_UP = np.array([0.0, 0.0, 1.0])
INERTIA = np.diag([IXX, IYY, IZZ])                          # body frame
HOVER_THRUST_PER_MOTOR = MASS * G / 4                       # N  (~0.245)
HOVER_SPIN_RATE = float(np.sqrt(HOVER_THRUST_PER_MOTOR / THRUST_CONSTANT))  # rad/s (~350)
