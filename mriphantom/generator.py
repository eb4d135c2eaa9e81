"""
High-Level Phantom Generator Class
----------------------------------

This module defines `PhantomGenerator`, a configurable front end to the
preset samplers, and `SimulatedData`, the container it returns. The
generator stores the matrix size, coil count and worker count once and
produces image-domain, k-space, sensitivity and non-Cartesian data from them.
"""
import json
import numbers
import logging
from typing import Any, Dict, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from .dims import COIL_DIM, make_dims
from .phantoms import PRESETS, calc_preset
from .sensitivity import MAX_COILS
from .trajectories import trajectory_dims
from .utils import display_phantom, rss

__all__ = ['SimulatedData', 'PhantomGenerator']

log = logging.getLogger(__name__)


class SimulatedData:
    """
    Sampled phantom data together with the parameters that produced it.

    Attributes:
        name (str): Identifier, e.g. ``'shepp_logan_kspace_64x64_8c'``.
        data (np.ndarray): Complex sampler output.
        metadata (Dict[str, Any]): JSON-serialisable description of the call.
    """

    def __init__(self, name: str, data: np.ndarray, metadata: Optional[Dict[str, Any]] = None):
        self.name = name
        self.data = data
        self.metadata = dict(metadata or {})

    @property
    def kspace(self) -> bool:
        return bool(self.metadata.get('kspace', False))

    def get_num_coils(self) -> int:
        return int(self.data.shape[COIL_DIM])

    def rss(self) -> np.ndarray:
        """Root-sum-of-squares over coils."""
        return rss(self.data)

    def plot(self, **kwargs) -> plt.Figure:
        kwargs.setdefault('title', self.name)
        return display_phantom(self.data, kspace=self.kspace, **kwargs)

    def export(self, filename: str, filetype: Optional[str] = None) -> None:
        """
        Saves the data to a file.

        Args:
            filename (str): The name of the file to save.
            filetype (Optional[str]): 'npz' (data and metadata) or 'npy' (data only).
                Inferred from the extension if not given.

        Raises:
            ValueError: If the filetype is unsupported.
        """
        if filetype is None:
            filetype = filename.split('.')[-1].lower() if '.' in filename else 'npz'

        if filetype == 'npz':
            np.savez(filename, data=self.data, name=self.name, metadata=json.dumps(self.metadata))
        elif filetype == 'npy':
            np.save(filename, self.data)
        else:
            raise ValueError(f"Unsupported filetype: {filetype}")

    @classmethod
    def import_from(cls, filename: str) -> 'SimulatedData':
        """
        Loads data written by `export`. For '.npy' files the metadata is empty
        and the name is the filename.

        Raises:
            ValueError: If the filetype is unsupported.
        """
        filetype = filename.split('.')[-1].lower() if '.' in filename else ''
        if filetype == 'npy':
            return cls(name=filename, data=np.load(filename))
        if filetype == 'npz':
            with np.load(filename) as archive:
                return cls(name=str(archive['name']),
                           data=archive['data'],
                           metadata=json.loads(str(archive['metadata'])))
        raise ValueError(f"Unsupported filetype: {filetype}")

    def summary(self) -> None:
        print(f"Simulated Data Summary: {self.name}")
        print(f"  Shape: {self.data.shape}")
        print(f"  Coils: {self.get_num_coils()}")
        for k, v in self.metadata.items():
            print(f"  Metadata '{k}': {v}")


class PhantomGenerator:
    """
    A high-level generator for analytic multi-coil phantoms.
    """
    def __init__(self,
                 matrix_size: Union[int, Tuple[int, int]],
                 num_coils: int = 1,
                 num_workers: Optional[int] = None):
        """
        Initializes the PhantomGenerator.

        Parameters:
        - matrix_size: Grid size (e.g., (128, 128) or 128 for square).
        - num_coils: Number of simulated receive coils (1 to 8). One coil disables sensitivity weighting.
        - num_workers (Optional): Threads used by the samplers.
        """
        if isinstance(matrix_size, numbers.Integral):
            matrix_size = int(matrix_size)
            self.matrix_size: Tuple[int, int] = (matrix_size, matrix_size)
        elif isinstance(matrix_size, (tuple, list)) and len(matrix_size) == 2:
            self.matrix_size = tuple(int(m) for m in matrix_size)
        else:
            raise ValueError("matrix_size must be an int or a tuple/list of length 2.")
        if min(self.matrix_size) < 1:
            raise ValueError("matrix_size entries must be positive.")

        if not (1 <= num_coils <= MAX_COILS):
            raise ValueError(f"num_coils must be between 1 and {MAX_COILS}.")
        self.num_coils = int(num_coils)

        if num_workers is not None and num_workers < 1:
            raise ValueError("num_workers must be positive.")
        self.num_workers = num_workers

    def get_params(self) -> Dict[str, Any]:
        """Returns a dictionary of the generator's current settings."""
        return {
            "matrix_size": list(self.matrix_size),
            "num_coils": self.num_coils,
            "num_workers": self.num_workers,
        }

    def set_params(self, **kwargs: Any) -> None:
        """
        Updates settings, re-running the constructor's validation.

        The generator is left unchanged if any value is rejected.
        """
        params = self.get_params()
        for key in kwargs:
            if key not in params:
                raise AttributeError(f"'{type(self).__name__}' object has no attribute '{key}'")
        params.update(kwargs)
        updated = type(self)(**params)
        self.__dict__.update(updated.__dict__)

    def get_dims(self) -> Tuple[int, ...]:
        return make_dims(self.matrix_size[0], self.matrix_size[1], coils=self.num_coils)

    def _name(self, prefix: str, domain: str) -> str:
        return f"{prefix}_{domain}_{self.matrix_size[0]}x{self.matrix_size[1]}_{self.num_coils}c"

    @staticmethod
    def _preset_key(preset: str) -> str:
        key = preset.lower()
        if key not in PRESETS:
            raise ValueError(f"Unknown phantom preset: {preset}. Available: {sorted(PRESETS)}")
        return key

    def create_phantom(self, preset: str = 'shepp_logan', kspace: bool = False) -> SimulatedData:
        """
        Samples a preset on the Cartesian grid.

        Parameters:
        - preset (str): 'shepp_logan', 'disc' or 'ring'.
        - kspace (bool): Return k-space samples instead of the image.

        Returns:
        - SimulatedData: Array of shape (1, nx, ny, num_coils) with metadata.
        """
        preset = self._preset_key(preset)
        dims = self.get_dims()
        log.info("Simulating %s phantom (%s) with dims %s", preset, 'kspace' if kspace else 'image', dims)
        data = calc_preset(preset, dims, kspace=kspace, num_workers=self.num_workers)

        metadata = self.get_params()
        metadata.update({"preset": preset, "kspace": kspace, "trajectory": "cartesian", "dims": list(dims)})
        return SimulatedData(self._name(preset, 'kspace' if kspace else 'image'), data, metadata)

    def create_sensitivities(self) -> SimulatedData:
        """Image-domain sensitivity maps of the configured coils."""
        dims = self.get_dims()
        data = calc_preset('sensitivity', dims, num_workers=self.num_workers)

        metadata = self.get_params()
        metadata.update({"preset": "sensitivity", "kspace": False, "trajectory": "cartesian", "dims": list(dims)})
        return SimulatedData(self._name('sensitivity', 'image'), data, metadata)

    def create_noncartesian(self, traj: np.ndarray, preset: str = 'shepp_logan') -> SimulatedData:
        """
        Samples a preset in k-space along ``traj``.

        The trajectory's sample axes set the output size; ``matrix_size`` is
        not used here.

        Parameters:
        - traj (np.ndarray): Trajectory of shape (3, n_read[, n_phase]).
        - preset (str): 'shepp_logan', 'disc' or 'ring'.

        Returns:
        - SimulatedData: Array of shape (1, n_read, n_phase, num_coils).
        """
        preset = self._preset_key(preset)
        dims = trajectory_dims(traj, coils=self.num_coils)
        log.info("Simulating %s phantom along trajectory with dims %s", preset, dims)
        data = calc_preset(preset, dims, traj=traj, num_workers=self.num_workers)

        metadata = self.get_params()
        metadata.update({"preset": preset, "kspace": True, "trajectory": "noncartesian", "dims": list(dims)})
        return SimulatedData(f"{preset}_noncart_{dims[1]}x{dims[2]}_{self.num_coils}c", data, metadata)
