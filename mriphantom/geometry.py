"""
Analytic Ellipse Geometry
-------------------------

This module defines the `Ellipse` descriptor and evaluates sums of ellipses
either in the image domain (indicator functions weighted by intensity) or in
k-space (their continuous Fourier transform).

Image coordinates live in ``[-1, 1)`` along each spatial axis. K-space
coordinates are spatial frequencies in cycles per image unit, and the
transform uses the kernel ``exp(+2j*pi*k.p)`` so that multiplication by
``exp(+2j*pi*m.p)`` in the image domain is a shift ``k -> k + m`` in k-space.

Preset descriptor tables:
- `SHEPP_LOGAN_MOD`: modified Shepp-Logan head (10 ellipses, Toft contrast).
- `PHANTOM_DISC`: single centered disc.
- `PHANTOM_RING`: two concentric rings built from 4 ellipses.
"""
from typing import Callable, NamedTuple, Sequence, Tuple

import numpy as np
from scipy.special import j1

__all__ = [
    'Ellipse',
    'SHEPP_LOGAN_MOD',
    'PHANTOM_DISC',
    'PHANTOM_RING',
    'xellipse',
    'kellipse',
    'evaluate_ellipses',
    'ellipse_evaluator',
]


class Ellipse(NamedTuple):
    """
    Immutable ellipse descriptor.

    Attributes:
        intensity (float): Value inside the ellipse (added to overlapping ellipses).
        axes (Tuple[float, float]): Semi-axes along x and y before rotation.
        center (Tuple[float, float]): Center offset (x, y).
        angle (float): Counter-clockwise rotation in radians.
    """
    intensity: float
    axes: Tuple[float, float]
    center: Tuple[float, float]
    angle: float = 0.0


def _deg(angle_deg: float) -> float:
    return float(np.deg2rad(angle_deg))


SHEPP_LOGAN_MOD: Tuple[Ellipse, ...] = (
    Ellipse(1.0, (0.69, 0.92), (0.0, 0.0)),
    Ellipse(-0.8, (0.6624, 0.8740), (0.0, -0.0184)),
    Ellipse(-0.2, (0.1100, 0.3100), (0.22, 0.0), _deg(-18.0)),
    Ellipse(-0.2, (0.1600, 0.4100), (-0.22, 0.0), _deg(18.0)),
    Ellipse(0.1, (0.2100, 0.2500), (0.0, 0.35)),
    Ellipse(0.1, (0.0460, 0.0460), (0.0, 0.1)),
    Ellipse(0.1, (0.0460, 0.0460), (0.0, -0.1)),
    Ellipse(0.1, (0.0460, 0.0230), (-0.08, -0.605)),
    Ellipse(0.1, (0.0230, 0.0230), (0.0, -0.606)),
    Ellipse(0.1, (0.0230, 0.0460), (0.06, -0.605)),
)

PHANTOM_DISC: Tuple[Ellipse, ...] = (
    Ellipse(1.0, (0.4, 0.4), (0.0, 0.0)),
)

PHANTOM_RING: Tuple[Ellipse, ...] = (
    Ellipse(1.0, (0.75, 0.75), (0.0, 0.0)),
    Ellipse(-1.0, (0.65, 0.65), (0.0, 0.0)),
    Ellipse(1.0, (0.45, 0.45), (0.0, 0.0)),
    Ellipse(-1.0, (0.35, 0.35), (0.0, 0.0)),
)


def _rotate_back(ellipse: Ellipse, vx: np.ndarray, vy: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    # Express (vx, vy) in the ellipse's own (unrotated) frame.
    c, s = np.cos(ellipse.angle), np.sin(ellipse.angle)
    return c * vx + s * vy, -s * vx + c * vy


def xellipse(ellipse: Ellipse, mpos: Sequence[np.ndarray]) -> np.ndarray:
    """Image-domain value of a single ellipse at positions ``mpos = (x, y)``."""
    x, y = (np.asarray(m, dtype=float) for m in mpos)
    ux, uy = _rotate_back(ellipse, x - ellipse.center[0], y - ellipse.center[1])
    rr = (ux / ellipse.axes[0]) ** 2 + (uy / ellipse.axes[1]) ** 2
    return np.where(rr <= 1.0, ellipse.intensity, 0.0).astype(complex)


def kellipse(ellipse: Ellipse, mpos: Sequence[np.ndarray]) -> np.ndarray:
    """
    K-space value of a single ellipse at spatial frequencies ``mpos = (kx, ky)``.

    The Fourier transform of the unit disc is ``J1(2*pi*rho) / rho`` (which tends
    to ``pi`` at the origin); stretching by the semi-axes, rotating and
    shifting to the center gives the general ellipse.
    """
    kx, ky = (np.asarray(m, dtype=float) for m in mpos)
    ux, uy = _rotate_back(ellipse, kx, ky)
    rho = np.hypot(ellipse.axes[0] * ux, ellipse.axes[1] * uy)

    safe_rho = np.where(rho > 0.0, rho, 1.0)
    disc = np.where(rho > 0.0, j1(2.0 * np.pi * safe_rho) / safe_rho, np.pi)

    phase = np.exp(2.0j * np.pi * (kx * ellipse.center[0] + ky * ellipse.center[1]))
    return ellipse.intensity * ellipse.axes[0] * ellipse.axes[1] * disc * phase


def evaluate_ellipses(ellipses: Sequence[Ellipse], mpos: Sequence[np.ndarray], kspace: bool) -> np.ndarray:
    """
    Sums the analytic values of all ellipses at ``mpos``.

    Args:
        ellipses (Sequence[Ellipse]): Descriptors to sum.
        mpos (Sequence[np.ndarray]): Broadcastable (x, y) coordinate arrays.
        kspace (bool): Evaluate the Fourier transform instead of the image.

    Returns:
        np.ndarray: Complex values with the broadcast shape of ``mpos``.
    """
    evaluate = kellipse if kspace else xellipse
    shape = np.broadcast(*mpos).shape
    val = np.zeros(shape, dtype=complex)
    for ellipse in ellipses:
        val = val + evaluate(ellipse, mpos)
    return val


def ellipse_evaluator(ellipses: Sequence[Ellipse], kspace: bool) -> Callable[[Sequence[np.ndarray]], np.ndarray]:
    """Binds a descriptor list and domain flag into a ``fun(mpos)`` evaluator."""
    ellipses = tuple(ellipses)

    def fun(mpos):
        return evaluate_ellipses(ellipses, mpos, kspace)

    return fun
