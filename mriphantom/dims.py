"""
Dimension Vector Conventions
----------------------------

Output arrays produced by the samplers follow a fixed axis convention:

- axis 0 (``TRAJ_DIM``): reserved. It is 1 for grid sampling and holds the
  number of trajectory components (3) for non-Cartesian sampling.
- axis 1 (``READ_DIM``) and axis 2 (``PHS1_DIM``): spatial axes.
- axis 3 (``COIL_DIM``): simulated receive channels.

Any further axes are allowed; the samplers replicate values along them.
"""
from typing import Sequence, Tuple

__all__ = [
    'TRAJ_DIM',
    'READ_DIM',
    'PHS1_DIM',
    'COIL_DIM',
    'MIN_DIMS',
    'make_dims',
    'check_dims',
    'num_coils',
]

TRAJ_DIM = 0
READ_DIM = 1
PHS1_DIM = 2
COIL_DIM = 3

MIN_DIMS = COIL_DIM + 1


def make_dims(nx: int, ny: int = 1, coils: int = 1, traj_components: int = 1) -> Tuple[int, ...]:
    """Builds a dimension vector ``(traj_components, nx, ny, coils)``."""
    return check_dims((traj_components, nx, ny, coils))


def check_dims(dims: Sequence[int]) -> Tuple[int, ...]:
    """
    Validates a dimension vector and returns it as a tuple of ints.

    Raises:
        ValueError: If fewer than ``MIN_DIMS`` axes are given or an extent
                    is not a positive integer.
    """
    dims = tuple(int(d) for d in dims)
    if len(dims) < MIN_DIMS:
        raise ValueError(f"Dimension vector needs at least {MIN_DIMS} axes, got {len(dims)}.")
    if any(d < 1 for d in dims):
        raise ValueError(f"All extents must be positive, got {dims}.")
    return dims


def num_coils(dims: Sequence[int]) -> int:
    return int(dims[COIL_DIM])
