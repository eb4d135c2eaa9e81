"""
mriphantom: Analytic Multi-Coil MRI Phantoms
============================================

`mriphantom` generates synthetic test data for MRI algorithms from analytic
ellipse models.

It provides tools to:
- Sample phantoms (modified Shepp-Logan, disc, ring) in the image domain or in k-space.
- Simulate up to 8 receive coils with analytic sensitivities, applied by
  multiplication in the image domain and by convolution in k-space.
- Sample k-space along arbitrary (non-Cartesian) trajectories.
- Inspect, save and display the simulated data.

The package is structured into modules for the dimension conventions, the
ellipse geometry, the sensitivity model, the samplers, the presets, and a
high-level generator class.
"""

__version__ = "0.1.0"

from .dims import COIL_DIM, make_dims
from .geometry import Ellipse, SHEPP_LOGAN_MOD, PHANTOM_DISC, PHANTOM_RING
from .sensitivity import MAX_COILS, SensitivityMode, sensitivity_field
from .sampling import SampleContext, zsample, sample, sample_noncart
from .phantoms import (
    calc_phantom, calc_phantom_noncart, calc_sens, calc_circ, calc_circ_noncart,
    calc_ring, calc_ring_noncart, calc_preset,
)
from .trajectories import cartesian_trajectory, radial_trajectory
from .generator import PhantomGenerator, SimulatedData
from . import utils


__all__ = [
    'COIL_DIM',
    'make_dims',
    'Ellipse',
    'SHEPP_LOGAN_MOD',
    'PHANTOM_DISC',
    'PHANTOM_RING',
    'MAX_COILS',
    'SensitivityMode',
    'sensitivity_field',
    'SampleContext',
    'zsample',
    'sample',
    'sample_noncart',
    'calc_phantom',
    'calc_phantom_noncart',
    'calc_sens',
    'calc_circ',
    'calc_circ_noncart',
    'calc_ring',
    'calc_ring_noncart',
    'calc_preset',
    'cartesian_trajectory',
    'radial_trajectory',
    'PhantomGenerator',
    'SimulatedData',
    'utils',
]
