"""Vicon-inertial measurement simulator.

This package synthesizes reproducible sensor streams for testing state
estimators:
- coords: Rotations and SO(3)/SE(3) Lie group operations
- sensors: Measurement types, gravity and IMU error models
- sim: Continuous trajectory, bias/noise processes, scheduler and facade
"""

__version__ = "0.1.0"
