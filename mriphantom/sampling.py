"""
Grid and Trajectory Samplers
----------------------------

The samplers fill a complex output array by evaluating a kernel at every
index. Each index is computed independently from immutable shared data, so
the work can be split into disjoint slabs and evaluated concurrently.

- `zsample`: generic array sampler, drives a vectorised kernel over all indices.
- `image_position` / `kspace_position` / `trajectory_position`: coordinate
  normalization for the image domain, the k-space grid and trajectories.
- `SampleContext`: per-call bundle of geometry evaluator, domain and
  sensitivity flags.
- `sample_grid` / `sample`: Cartesian sampling in either domain.
- `sample_noncart_fun` / `sample_noncart`: k-space sampling along a trajectory.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .dims import COIL_DIM, PHS1_DIM, READ_DIM, TRAJ_DIM, check_dims
from .geometry import Ellipse, ellipse_evaluator
from .sensitivity import Evaluator, SensitivityMode, check_coil_index, combine, select_mode
from .trajectories import TRAJ_COMPONENTS, check_trajectory

__all__ = [
    'SampleContext',
    'zsample',
    'image_position',
    'kspace_position',
    'trajectory_position',
    'sample_grid',
    'sample',
    'noncart_output_dims',
    'sample_noncart_fun',
    'sample_noncart',
]

log = logging.getLogger(__name__)

Position = Tuple[np.ndarray, ...]
Kernel = Callable[[Position], np.ndarray]


@dataclass(frozen=True)
class SampleContext:
    """What to evaluate for one sampling call."""
    fun: Evaluator
    kspace: bool
    sens: bool

    @property
    def mode(self) -> SensitivityMode:
        return select_mode(self.sens, self.kspace)

    def evaluate(self, coil, mpos) -> np.ndarray:
        return combine(self.mode, coil, mpos, self.fun)


def _slab(axis: int, start: int, stop: int) -> Tuple[slice, ...]:
    return (slice(None),) * axis + (slice(start, stop),)


def zsample(dims: Sequence[int],
            kernel: Kernel,
            out: Optional[np.ndarray] = None,
            num_workers: Optional[int] = None) -> np.ndarray:
    """
    Evaluates ``kernel`` for every index of an array of shape ``dims``.

    The kernel receives one broadcastable integer index array per axis (as
    from ``np.indices(dims, sparse=True)``) and returns values broadcastable
    to the shape spanned by those indices.

    Args:
        dims (Sequence[int]): Output shape.
        kernel (Callable): Vectorised per-index kernel.
        out (Optional[np.ndarray]): Complex buffer to fill; allocated as complex64 if None.
        num_workers (Optional[int]): If > 1, split the longest axis into
            disjoint slabs and evaluate them on a thread pool.

    Returns:
        np.ndarray: The filled output buffer.
    """
    dims = tuple(int(d) for d in dims)
    if out is None:
        out = np.empty(dims, dtype=np.complex64)
    elif out.shape != dims:
        raise ValueError(f"Output buffer shape {out.shape} does not match dims {dims}.")
    elif not np.iscomplexobj(out):
        raise ValueError(f"Output buffer must be complex, got dtype {out.dtype}.")

    pos = np.indices(dims, sparse=True)

    if num_workers is None or num_workers <= 1 or out.size == 0:
        out[...] = kernel(tuple(pos))
        return out

    axis = int(np.argmax(dims))
    bounds = np.linspace(0, dims[axis], min(num_workers, dims[axis]) + 1).astype(int)

    def run(start, stop):
        sub_pos = list(pos)
        sub_pos[axis] = pos[axis][_slab(axis, start, stop)]
        out[_slab(axis, start, stop)] = kernel(tuple(sub_pos))

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        futures = [executor.submit(run, start, stop) for start, stop in zip(bounds[:-1], bounds[1:]) if stop > start]
        for future in futures:
            future.result()
    return out


def image_position(pos: Position, dims: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """Image coordinates ``(2x - Dx) / Dx`` in ``[-1, 1)``."""
    return tuple((2.0 * pos[d] - dims[d]) / float(dims[d]) for d in (READ_DIM, PHS1_DIM))


def kspace_position(pos: Position, dims: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """K-space coordinates ``(2x - Dx) / 4``, independent of the grid size."""
    return tuple((2.0 * pos[d] - dims[d]) / 4.0 for d in (READ_DIM, PHS1_DIM))


def trajectory_position(traj: np.ndarray, pos: Position) -> Tuple[np.ndarray, np.ndarray]:
    """K-space coordinates read from ``traj`` (halved); the kz component is not used."""
    return (traj[0][pos[READ_DIM], pos[PHS1_DIM]] / 2.0,
            traj[1][pos[READ_DIM], pos[PHS1_DIM]] / 2.0)


def _check_coils(dims: Sequence[int], sens: bool) -> None:
    if sens:
        check_coil_index(np.arange(dims[COIL_DIM]))


def sample_grid(dims: Sequence[int],
                fun: Evaluator,
                kspace: bool,
                sens: bool,
                out: Optional[np.ndarray] = None,
                num_workers: Optional[int] = None) -> np.ndarray:
    """
    Samples ``fun`` on the Cartesian grid described by ``dims``.

    ``sens`` selects whether the coil index along ``COIL_DIM`` weights the
    samples with its sensitivity (multiplication in the image domain,
    convolution in k-space).
    """
    dims = check_dims(dims)
    _check_coils(dims, sens)

    ctx = SampleContext(fun=fun, kspace=kspace, sens=sens)
    normalize = kspace_position if kspace else image_position
    log.debug("Grid sampling dims=%s mode=%s workers=%s", dims, ctx.mode.value, num_workers)

    def kernel(pos):
        return ctx.evaluate(pos[COIL_DIM], normalize(pos, dims))

    return zsample(dims, kernel, out=out, num_workers=num_workers)


def sample(dims: Sequence[int],
           ellipses: Sequence[Ellipse],
           kspace: bool = False,
           out: Optional[np.ndarray] = None,
           num_workers: Optional[int] = None) -> np.ndarray:
    """Samples an ellipse phantom on the grid; coil weighting when more than one coil."""
    dims = check_dims(dims)
    return sample_grid(dims, ellipse_evaluator(ellipses, kspace), kspace,
                       sens=dims[COIL_DIM] > 1, out=out, num_workers=num_workers)


def noncart_output_dims(dims: Sequence[int]) -> Tuple[int, ...]:
    """Output shape for trajectory sampling: ``dims`` restricted to the read, phase and coil axes."""
    return tuple(d if i in (READ_DIM, PHS1_DIM, COIL_DIM) else 1 for i, d in enumerate(dims))


def sample_noncart_fun(dims: Sequence[int],
                       traj: np.ndarray,
                       fun: Evaluator,
                       sens: bool,
                       out: Optional[np.ndarray] = None,
                       num_workers: Optional[int] = None) -> np.ndarray:
    """
    Samples the k-space evaluator ``fun`` at the trajectory coordinates.

    Args:
        dims (Sequence[int]): Dimension vector; ``dims[0]`` must be 3.
        traj (np.ndarray): Trajectory of shape ``(3, dims[1], dims[2])``.
        fun (Callable): K-space geometry evaluator.
        sens (bool): Convolve with the coil sensitivities.
        out (Optional[np.ndarray]): Buffer of shape `noncart_output_dims(dims)`.
        num_workers (Optional[int]): Thread count passed to `zsample`.

    Raises:
        ValueError: If ``dims[0] != 3``, the trajectory is malformed or the
                    coil count exceeds the sensitivity model.
    """
    dims = check_dims(dims)
    if dims[TRAJ_DIM] != TRAJ_COMPONENTS:
        raise ValueError(f"dims[{TRAJ_DIM}] must be {TRAJ_COMPONENTS} for trajectory sampling, got {dims[TRAJ_DIM]}.")
    traj = check_trajectory(traj, dims)
    _check_coils(dims, sens)

    ctx = SampleContext(fun=fun, kspace=True, sens=sens)
    odims = noncart_output_dims(dims)
    log.debug("Trajectory sampling dims=%s mode=%s workers=%s", odims, ctx.mode.value, num_workers)

    def kernel(pos):
        return ctx.evaluate(pos[COIL_DIM], trajectory_position(traj, pos))

    return zsample(odims, kernel, out=out, num_workers=num_workers)


def sample_noncart(dims: Sequence[int],
                   traj: np.ndarray,
                   ellipses: Sequence[Ellipse],
                   out: Optional[np.ndarray] = None,
                   num_workers: Optional[int] = None) -> np.ndarray:
    """K-space samples of an ellipse phantom along ``traj``."""
    dims = check_dims(dims)
    return sample_noncart_fun(dims, traj, ellipse_evaluator(ellipses, True),
                              sens=dims[COIL_DIM] > 1, out=out, num_workers=num_workers)
