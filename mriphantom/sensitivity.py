"""
Coil Sensitivity Model and Combination Strategies
-------------------------------------------------

Each simulated receive coil has a sensitivity given by a truncated 2-D
Fourier series with 5x5 coefficients:

    S_c(p) = sum_ij coeff[c, i, j] * exp(2j*pi*((i - 2)*p.x + (j - 2)*p.y) / 4)

Weighting an object with `S_c` is a multiplication in the image domain and
therefore a convolution with the same 25 coefficients in k-space, see

    M Guerquin-Kern, L Lejeune, KP Pruessmann, and M Unser,
    Realistic Analytical Phantoms for Parallel Magnetic Resonance Imaging,
    IEEE TMI 31:626-636 (2012)

Three strategies combine a coil index, a position and a geometry evaluator
``fun(mpos)`` into a sample; `SensitivityMode` selects between them.
"""
from enum import Enum
from typing import Callable, Sequence, Union

import numpy as np
from scipy.special import comb

__all__ = [
    'MAX_COILS',
    'COIL_COEFF',
    'SENS_COEFF',
    'SensitivityMode',
    'check_coil_index',
    'sensitivity_field',
    'nosens',
    'xsens',
    'ksens',
    'select_mode',
    'combine',
]

MAX_COILS = 8
COIL_COEFF = 5

# Frequency spacing of the sensitivity series, in cycles per image unit.
_SENS_PERIOD = 4.0
_SHIFT = (COIL_COEFF - 1) // 2

CoilIndex = Union[int, np.ndarray]
Evaluator = Callable[[Sequence[np.ndarray]], np.ndarray]


def _coil_coefficients() -> np.ndarray:
    """
    Builds the (MAX_COILS, COIL_COEFF, COIL_COEFF) coefficient table.

    Coil elements sit on the unit circle at angles 2*pi*c/MAX_COILS, as in a
    birdcage array. Each coil's series is a separable binomial window shifted
    to its element, times a per-coil phase ``exp(-1j*theta_c)``. In closed form

        S_c(p) = exp(-1j*theta_c) * cos(pi*(p.x - cos theta_c)/4)**4
                                  * cos(pi*(p.y - sin theta_c)/4)**4

    so the magnitude is 1 at the element and falls off smoothly across the
    field of view.
    """
    m = np.arange(COIL_COEFF) - _SHIFT
    window = comb(COIL_COEFF - 1, np.arange(COIL_COEFF)) / 2.0 ** (COIL_COEFF - 1)

    coeff = np.empty((MAX_COILS, COIL_COEFF, COIL_COEFF), dtype=complex)
    for c in range(MAX_COILS):
        theta = 2.0 * np.pi * c / MAX_COILS
        shift_x = np.exp(-2.0j * np.pi * m * np.cos(theta) / _SENS_PERIOD)
        shift_y = np.exp(-2.0j * np.pi * m * np.sin(theta) / _SENS_PERIOD)
        coeff[c] = np.outer(window * shift_x, window * shift_y) * np.exp(-1.0j * theta)

    coeff.setflags(write=False)
    return coeff


SENS_COEFF = _coil_coefficients()


class SensitivityMode(Enum):
    """Closed set of combination strategies."""
    DIRECT = 'direct'
    IMAGE = 'image'
    KSPACE = 'kspace'


def check_coil_index(coil: CoilIndex) -> np.ndarray:
    """
    Raises:
        ValueError: If any coil index lies outside ``[0, MAX_COILS)``.
    """
    coil = np.asarray(coil)
    if not np.issubdtype(coil.dtype, np.integer):
        raise ValueError(f"Coil index must be an integer, got dtype {coil.dtype}.")
    if np.any(coil < 0) or np.any(coil >= MAX_COILS):
        raise ValueError(f"Coil index out of range [0, {MAX_COILS}): "
                         f"min {coil.min()}, max {coil.max()}.")
    return coil


def sensitivity_field(coil: CoilIndex, mpos: Sequence[np.ndarray]) -> np.ndarray:
    """Evaluates the analytic sensitivity ``S_coil`` at image positions ``mpos``."""
    coil = check_coil_index(coil)
    x, y = (np.asarray(p, dtype=float) for p in mpos)

    val = np.zeros(np.broadcast(coil, x, y).shape, dtype=complex)
    for i in range(COIL_COEFF):
        for j in range(COIL_COEFF):
            val = val + SENS_COEFF[coil, i, j] * np.exp(
                2.0j * np.pi * ((i - _SHIFT) * x + (j - _SHIFT) * y) / _SENS_PERIOD)
    return val


def nosens(coil: CoilIndex, mpos: Sequence[np.ndarray], fun: Evaluator) -> np.ndarray:
    return fun(mpos)


def xsens(coil: CoilIndex, mpos: Sequence[np.ndarray], fun: Evaluator) -> np.ndarray:
    """Image-domain weighting: ``fun(p) * S_c(p)``."""
    return sensitivity_field(coil, mpos) * fun(mpos)


def ksens(coil: CoilIndex, mpos: Sequence[np.ndarray], fun: Evaluator) -> np.ndarray:
    """
    K-space weighting: ``sum_ij coeff[c, i, j] * fun(k + ((i - 2)/4, (j - 2)/4))``.

    The geometry is evaluated at 25 frequency-shifted positions, which is the
    k-space counterpart of `xsens`.
    """
    coil = check_coil_index(coil)
    x, y = (np.asarray(p, dtype=float) for p in mpos)

    val = np.zeros(np.broadcast(coil, x, y).shape, dtype=complex)
    for i in range(COIL_COEFF):
        for j in range(COIL_COEFF):
            shifted = (x + (i - _SHIFT) / _SENS_PERIOD, y + (j - _SHIFT) / _SENS_PERIOD)
            val = val + SENS_COEFF[coil, i, j] * fun(shifted)
    return val


_STRATEGIES = {
    SensitivityMode.DIRECT: nosens,
    SensitivityMode.IMAGE: xsens,
    SensitivityMode.KSPACE: ksens,
}


def select_mode(sens: bool, kspace: bool) -> SensitivityMode:
    if not sens:
        return SensitivityMode.DIRECT
    return SensitivityMode.KSPACE if kspace else SensitivityMode.IMAGE


def combine(mode: SensitivityMode, coil: CoilIndex, mpos: Sequence[np.ndarray], fun: Evaluator) -> np.ndarray:
    """Applies the strategy named by ``mode``."""
    return _STRATEGIES[SensitivityMode(mode)](coil, mpos, fun)
