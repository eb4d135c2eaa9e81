"""
Phantom Presets
---------------

Named phantoms sampled on a Cartesian grid (image domain or k-space) or
along a non-Cartesian trajectory. Multi-coil weighting is applied whenever
the coil axis of ``dims`` has more than one entry.
"""
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .geometry import PHANTOM_DISC, PHANTOM_RING, SHEPP_LOGAN_MOD, Ellipse
from .sampling import sample, sample_grid, sample_noncart

__all__ = [
    'PRESETS',
    'constant_one',
    'calc_phantom',
    'calc_phantom_noncart',
    'calc_sens',
    'calc_circ',
    'calc_circ_noncart',
    'calc_ring',
    'calc_ring_noncart',
    'calc_preset',
]

PRESETS: Dict[str, Tuple[Ellipse, ...]] = {
    'shepp_logan': SHEPP_LOGAN_MOD,
    'disc': PHANTOM_DISC,
    'ring': PHANTOM_RING,
}


def constant_one(mpos) -> np.ndarray:
    """Pseudo-geometry equal to one everywhere; isolates the coil sensitivities."""
    return np.ones(np.broadcast(*mpos).shape, dtype=complex)


def calc_phantom(dims: Sequence[int], kspace: bool = False, **kwargs) -> np.ndarray:
    """Modified Shepp-Logan head phantom (10 ellipses) on the grid."""
    return sample(dims, SHEPP_LOGAN_MOD, kspace, **kwargs)


def calc_phantom_noncart(dims: Sequence[int], traj: np.ndarray, **kwargs) -> np.ndarray:
    """K-space of the modified Shepp-Logan phantom along ``traj``."""
    return sample_noncart(dims, traj, SHEPP_LOGAN_MOD, **kwargs)


def calc_sens(dims: Sequence[int], **kwargs) -> np.ndarray:
    """Image-domain coil sensitivity maps, one per entry of the coil axis."""
    return sample_grid(dims, constant_one, kspace=False, sens=True, **kwargs)


def calc_circ(dims: Sequence[int], kspace: bool = False, **kwargs) -> np.ndarray:
    return sample(dims, PHANTOM_DISC, kspace, **kwargs)


def calc_circ_noncart(dims: Sequence[int], traj: np.ndarray, **kwargs) -> np.ndarray:
    return sample_noncart(dims, traj, PHANTOM_DISC, **kwargs)


def calc_ring(dims: Sequence[int], kspace: bool = False, **kwargs) -> np.ndarray:
    return sample(dims, PHANTOM_RING, kspace, **kwargs)


def calc_ring_noncart(dims: Sequence[int], traj: np.ndarray, **kwargs) -> np.ndarray:
    return sample_noncart(dims, traj, PHANTOM_RING, **kwargs)


def calc_preset(name: str,
                dims: Sequence[int],
                kspace: bool = False,
                traj: Optional[np.ndarray] = None,
                **kwargs) -> np.ndarray:
    """
    Samples a preset by name.

    Args:
        name (str): One of `PRESETS` or 'sensitivity'.
        dims (Sequence[int]): Dimension vector.
        kspace (bool): Grid sampling in k-space instead of the image domain.
        traj (Optional[np.ndarray]): If given, sample along this trajectory
            (always k-space).
        **kwargs: ``out`` and ``num_workers``, forwarded to the sampler.

    Raises:
        ValueError: For unknown names, or a trajectory with the 'sensitivity' preset.
    """
    key = name.lower()
    if key == 'sensitivity':
        if traj is not None or kspace:
            raise ValueError("The 'sensitivity' preset is only available in the image domain.")
        return calc_sens(dims, **kwargs)
    if key not in PRESETS:
        raise ValueError(f"Unknown phantom preset: {name}. Available: {sorted(PRESETS) + ['sensitivity']}")
    if traj is not None:
        return sample_noncart(dims, traj, PRESETS[key], **kwargs)
    return sample(dims, PRESETS[key], kspace, **kwargs)
