"""
Utilities for Inspecting Simulated Data
---------------------------------------

This module provides helpers for working with sampler output:
- Centered transforms between the k-space grid and the image grid, using the
  samplers' coordinate conventions (k-space spacing 1/2, image spacing 2/D).
- Root-sum-of-squares coil combination.
- Display of magnitude images per coil.
"""
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
from scipy.fft import fftn, fftshift, ifftn, ifftshift

from .dims import COIL_DIM, PHS1_DIM, READ_DIM

__all__ = [
    'KSPACE_SPACING',
    'kspace_to_image',
    'image_to_kspace',
    'rss',
    'display_phantom',
]

# Distance between neighbouring k-space grid samples in cycles per image unit.
KSPACE_SPACING = 0.5

_SPATIAL_AXES = (READ_DIM, PHS1_DIM)


def kspace_to_image(kspace: np.ndarray, axes: Sequence[int] = _SPATIAL_AXES) -> np.ndarray:
    """
    Approximates image samples from grid k-space samples.

    Discretizes ``f(p) = integral F(k) exp(-2j*pi*k.p) dk`` on the sampled grid.
    Exact up to truncation of k-space; axes should have even length so that
    the grid center maps to the origin.
    """
    axes = tuple(axes)
    scale = KSPACE_SPACING ** len(axes)
    return scale * fftshift(fftn(ifftshift(kspace, axes=axes), axes=axes), axes=axes)


def image_to_kspace(image: np.ndarray, axes: Sequence[int] = _SPATIAL_AXES) -> np.ndarray:
    """
    Approximates grid k-space samples from image samples.

    Riemann sum of ``F(k) = integral f(p) exp(+2j*pi*k.p) dp`` with pixel area
    ``prod(2 / D)``; accurate for frequencies well below the grid's Nyquist limit.
    """
    axes = tuple(axes)
    pixel_area = np.prod([2.0 / image.shape[a] for a in axes])
    return pixel_area * fftshift(ifftn(ifftshift(image, axes=axes), axes=axes, norm='forward'), axes=axes)


def rss(data: np.ndarray, coil_axis: int = COIL_DIM, keepdims: bool = False) -> np.ndarray:
    """Root-sum-of-squares combination along ``coil_axis``."""
    return np.sqrt(np.sum(np.abs(data) ** 2, axis=coil_axis, keepdims=keepdims))


def display_phantom(
    data: np.ndarray,
    coils: Optional[Sequence[int]] = None,
    kspace: bool = False,
    title: Optional[str] = None,
    fig_size: Optional[Tuple[float, float]] = None,
    ) -> plt.Figure:
    """
    Displays the magnitude of each coil of a sampled phantom.

    Parameters:
    - data (np.ndarray): Sampler output with axes following `mriphantom.dims`.
    - coils (Optional[Sequence[int]]): Coils to show. Defaults to all.
    - kspace (bool): Show log-magnitude, suited to k-space data.
    - title (Optional[str]): Figure title.
    - fig_size (Optional[Tuple[float,float]]): Figure size for matplotlib.

    Returns:
    - matplotlib.figure.Figure: The figure object containing one panel per coil.
    """
    if data.ndim <= COIL_DIM:
        raise ValueError(f"data must have at least {COIL_DIM + 1} axes, got {data.ndim}.")

    # Keep the first entry of every axis other than read, phase and coil.
    index = tuple(slice(None) if a in (READ_DIM, PHS1_DIM, COIL_DIM) else 0 for a in range(data.ndim))
    planes = np.asarray(data[index])  # (read, phase, coil)

    if coils is None:
        coils = range(planes.shape[-1])
    coils = list(coils)
    if not coils:
        raise ValueError("At least one coil must be selected.")

    if fig_size is None:
        fig_size = (4 * len(coils), 4)

    fig, axes = plt.subplots(1, len(coils), figsize=fig_size, squeeze=False)
    for ax, c in zip(axes[0], coils):
        mag = np.abs(planes[:, :, c])
        if kspace:
            mag = np.log1p(mag)
        ax.imshow(mag.T, cmap='gray', origin='lower')
        ax.set_title(f"Coil {c}")
        ax.set_axis_off()

    if title is not None:
        fig.suptitle(title)
    fig.tight_layout()
    return fig
