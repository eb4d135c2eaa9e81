"""
Trajectories in Sampler Layout
------------------------------

Non-Cartesian sampling reads spatial-frequency coordinates from an array of
shape ``(3, n_read, n_phase)``: one (kx, ky, kz) triple per sample, in units
of 1/FOV (the Cartesian grid sits on integers from ``-n/2`` to ``n/2 - 1``).

This module builds such arrays and validates user supplied ones:
- `cartesian_trajectory`: the coordinates of the Cartesian k-space grid.
- `radial_trajectory`: full-diameter radial spokes.
- `check_trajectory`: shape checks against a dimension vector.
"""
from typing import Sequence, Tuple, Union

import numpy as np

from .dims import COIL_DIM, PHS1_DIM, READ_DIM, TRAJ_DIM, check_dims

__all__ = [
    'TRAJ_COMPONENTS',
    'check_trajectory',
    'trajectory_dims',
    'cartesian_trajectory',
    'radial_trajectory',
]

TRAJ_COMPONENTS = 3


def check_trajectory(traj: np.ndarray, dims: Sequence[int]) -> np.ndarray:
    """
    Validates a trajectory against ``dims`` and returns it as a real
    ``(3, dims[READ_DIM], dims[PHS1_DIM])`` array.

    Complex trajectories are accepted and their real part is used. Trailing
    singleton axes may be left out (e.g. ``(3, n)`` when ``dims[PHS1_DIM] == 1``).

    Raises:
        TypeError: If ``traj`` is not a NumPy array.
        ValueError: If the leading extent is not 3 or the sample axes do not
                    match ``dims``.
    """
    if not isinstance(traj, np.ndarray):
        raise TypeError("Trajectory must be a NumPy array.")
    if traj.ndim < 1 or traj.shape[0] != TRAJ_COMPONENTS:
        raise ValueError(f"Trajectory leading axis must have extent {TRAJ_COMPONENTS}, got shape {traj.shape}.")

    sample_shape = (dims[READ_DIM], dims[PHS1_DIM])
    given = tuple(traj.shape[1:])
    while len(given) > 2 and given[-1] == 1:
        given = given[:-1]
    if given + (1,) * (2 - len(given)) != sample_shape:
        raise ValueError(f"Trajectory sample axes {traj.shape[1:]} do not match dims {sample_shape}.")

    if np.iscomplexobj(traj):
        traj = traj.real
    return np.reshape(np.asarray(traj, dtype=float), (TRAJ_COMPONENTS,) + sample_shape)


def trajectory_dims(traj: np.ndarray, coils: int = 1) -> Tuple[int, ...]:
    """
    Dimension vector ``(3, n_read, n_phase, coils)`` matching ``traj``.

    Raises:
        TypeError, ValueError: As `check_trajectory`.
    """
    shape = tuple(np.shape(traj)[1:]) + (1, 1)
    dims = [1] * (COIL_DIM + 1)
    dims[TRAJ_DIM] = TRAJ_COMPONENTS
    dims[READ_DIM], dims[PHS1_DIM] = shape[0], shape[1]
    dims[COIL_DIM] = coils
    dims = check_dims(dims)
    check_trajectory(traj, dims)
    return dims


def cartesian_trajectory(nx: int, ny: int = 1) -> np.ndarray:
    """
    Trajectory visiting the Cartesian grid ``kx = x - nx/2``, ``ky = y - ny/2``.

    Sampling it non-Cartesian reproduces the grid k-space sampler exactly.
    """
    if nx <= 0 or ny <= 0:
        raise ValueError("nx and ny must be positive.")
    traj = np.zeros((TRAJ_COMPONENTS, nx, ny))
    traj[0] = (np.arange(nx) - nx / 2.0)[:, np.newaxis]
    traj[1] = (np.arange(ny) - ny / 2.0)[np.newaxis, :]
    return traj


def radial_trajectory(points_per_spoke: int,
                      num_spokes: int,
                      projection_angle_increment: Union[str, float] = 'golden_angle',
                      kz: float = 0.0) -> np.ndarray:
    """
    Generates full-diameter radial spokes through the k-space center.

    Parameters:
    - points_per_spoke (int): Samples per spoke, placed at ``i - points_per_spoke/2``.
    - num_spokes (int): Number of spokes.
    - projection_angle_increment (str or float): 'golden_angle' (111.25 deg),
      'linear' (pi / num_spokes) or a fixed increment in degrees.
    - kz (float): Value stored in the third (slice) component.

    Returns:
    - np.ndarray: Trajectory of shape (3, points_per_spoke, num_spokes).
    """
    if points_per_spoke <= 0 or num_spokes <= 0:
        raise ValueError("num_spokes and points_per_spoke must be positive.")

    if projection_angle_increment == 'golden_angle':
        increment_rad = np.pi * (np.sqrt(5.0) - 1.0) / 2.0
    elif projection_angle_increment == 'linear':
        increment_rad = np.pi / num_spokes
    elif isinstance(projection_angle_increment, (int, float)):
        increment_rad = np.deg2rad(projection_angle_increment)
    else:
        raise ValueError("projection_angle_increment must be 'golden_angle', 'linear' or a number (degrees).")

    radius = np.arange(points_per_spoke) - points_per_spoke / 2.0
    angles = increment_rad * np.arange(num_spokes)

    traj = np.empty((TRAJ_COMPONENTS, points_per_spoke, num_spokes))
    traj[0] = radius[:, np.newaxis] * np.cos(angles)[np.newaxis, :]
    traj[1] = radius[:, np.newaxis] * np.sin(angles)[np.newaxis, :]
    traj[2] = kz
    return traj
