import unittest
import numpy as np
import os
import sys

# Add the parent directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mriphantom.dims import make_dims
from mriphantom.geometry import PHANTOM_DISC, SHEPP_LOGAN_MOD, evaluate_ellipses
from mriphantom.sampling import (
    SampleContext, zsample, image_position, kspace_position, trajectory_position,
    sample_grid, sample, noncart_output_dims, sample_noncart_fun, sample_noncart
)
from mriphantom.sensitivity import MAX_COILS, SensitivityMode, ksens, sensitivity_field
from mriphantom.trajectories import cartesian_trajectory, radial_trajectory


def grid_mpos(dims, kspace):
    x = np.arange(dims[1])[:, np.newaxis]
    y = np.arange(dims[2])[np.newaxis, :]
    scale = (4.0, 4.0) if kspace else (float(dims[1]), float(dims[2]))
    return (2.0 * x - dims[1]) / scale[0], (2.0 * y - dims[2]) / scale[1]


class TestZSample(unittest.TestCase):
    def test_visits_every_index(self):
        dims = (2, 3, 4, 5)
        out = zsample(dims, lambda pos: pos[0] + 10 * pos[1] + 100 * pos[2] + 1000 * pos[3])
        self.assertEqual(out.shape, dims)
        self.assertEqual(out.dtype, np.complex64)
        for idx in np.ndindex(*dims):
            self.assertEqual(out[idx], idx[0] + 10 * idx[1] + 100 * idx[2] + 1000 * idx[3])

    def test_writes_into_given_buffer(self):
        out = np.zeros((1, 4, 4, 1), dtype=np.complex128)
        result = zsample(out.shape, lambda pos: 1j * pos[1], out=out)
        self.assertIs(result, out)
        np.testing.assert_array_equal(out[0, :, 0, 0], 1j * np.arange(4))

    def test_buffer_shape_mismatch(self):
        with self.assertRaisesRegex(ValueError, "does not match"):
            zsample((1, 4, 4, 1), lambda pos: pos[1], out=np.zeros((1, 4, 5, 1), dtype=np.complex64))

    def test_real_buffer_rejected_before_writing(self):
        out = np.full((1, 4, 4, 1), 3.0)
        with self.assertRaisesRegex(ValueError, "must be complex"):
            zsample(out.shape, lambda pos: 1j * pos[1], out=out)
        np.testing.assert_array_equal(out, 3.0)

    def test_workers_match_serial(self):
        dims = (1, 13, 6, 2)
        kernel = lambda pos: np.exp(1j * pos[1]) * (pos[2] + 1) - pos[3]
        serial = zsample(dims, kernel)
        for workers in (2, 4, 32):
            np.testing.assert_allclose(zsample(dims, kernel, num_workers=workers), serial, rtol=1e-6)


class TestNormalizer(unittest.TestCase):
    def test_image_position(self):
        dims = (1, 8, 4, 1)
        pos = np.indices(dims, sparse=True)
        x, y = image_position(pos, dims)
        np.testing.assert_array_equal(x.ravel(), (2 * np.arange(8) - 8) / 8.0)
        np.testing.assert_array_equal(y.ravel(), (2 * np.arange(4) - 4) / 4.0)
        self.assertEqual(x.ravel()[4], 0.0)
        self.assertEqual(x.ravel()[0], -1.0)

    def test_kspace_position_ignores_extent(self):
        for n in (8, 32):
            dims = (1, n, n, 1)
            x, _ = kspace_position(np.indices(dims, sparse=True), dims)
            np.testing.assert_array_equal(x.ravel(), (2 * np.arange(n) - n) / 4.0)

    def test_trajectory_position_halves_components(self):
        traj = radial_trajectory(6, 3, kz=7.0)
        pos = np.indices((1, 6, 3, 1), sparse=True)
        kx, ky = trajectory_position(traj, pos)
        np.testing.assert_array_equal(kx[0, :, :, 0], traj[0] / 2.0)
        np.testing.assert_array_equal(ky[0, :, :, 0], traj[1] / 2.0)


class TestSampleContext(unittest.TestCase):
    def test_mode_selection(self):
        fun = lambda mpos: 1.0
        self.assertEqual(SampleContext(fun, kspace=True, sens=False).mode, SensitivityMode.DIRECT)
        self.assertEqual(SampleContext(fun, kspace=False, sens=True).mode, SensitivityMode.IMAGE)
        self.assertEqual(SampleContext(fun, kspace=True, sens=True).mode, SensitivityMode.KSPACE)

    def test_frozen(self):
        ctx = SampleContext(lambda mpos: 1.0, kspace=False, sens=False)
        with self.assertRaises(AttributeError):
            ctx.kspace = True


class TestCartesianSampler(unittest.TestCase):
    def test_single_coil_bypass(self):
        dims = make_dims(16, 12)
        for kspace in (False, True):
            out = sample(dims, SHEPP_LOGAN_MOD, kspace=kspace)
            expected = evaluate_ellipses(SHEPP_LOGAN_MOD, grid_mpos(dims, kspace), kspace)
            self.assertEqual(out.shape, dims)
            np.testing.assert_allclose(out[0, :, :, 0], expected.astype(np.complex64), rtol=1e-6, atol=1e-7)

    def test_image_multicoil_is_weighted_single_coil(self):
        dims = make_dims(16, 16, coils=MAX_COILS)
        single = sample(make_dims(16, 16), SHEPP_LOGAN_MOD)[0, :, :, 0]
        multi = sample(dims, SHEPP_LOGAN_MOD)
        x, y = grid_mpos(dims, kspace=False)
        for c in range(MAX_COILS):
            np.testing.assert_allclose(multi[0, :, :, c], single * sensitivity_field(c, (x, y)), atol=1e-6)

    def test_kspace_multicoil_is_convolved(self):
        dims = make_dims(8, 8, coils=4)
        multi = sample(dims, PHANTOM_DISC, kspace=True)
        mpos = grid_mpos(dims, kspace=True)
        fun = lambda m: evaluate_ellipses(PHANTOM_DISC, m, True)
        for c in range(4):
            np.testing.assert_allclose(multi[0, :, :, c], ksens(c, mpos, fun), rtol=1e-5, atol=1e-6)

    def test_extra_axes_replicate(self):
        dims = (1, 6, 6, 2, 3)
        out = sample(dims, PHANTOM_DISC)
        self.assertEqual(out.shape, dims)
        for i in range(1, 3):
            np.testing.assert_array_equal(out[..., i], out[..., 0])

    def test_determinism(self):
        dims = make_dims(10, 10, coils=3)
        first = sample(dims, SHEPP_LOGAN_MOD, kspace=True)
        second = sample(dims, SHEPP_LOGAN_MOD, kspace=True)
        np.testing.assert_array_equal(first, second)

    def test_workers_match_serial(self):
        dims = make_dims(12, 10, coils=2)
        np.testing.assert_allclose(sample(dims, SHEPP_LOGAN_MOD, kspace=True, num_workers=3),
                                   sample(dims, SHEPP_LOGAN_MOD, kspace=True), rtol=1e-6, atol=1e-7)

    def test_too_many_coils_fails_before_writing(self):
        dims = make_dims(4, 4, coils=MAX_COILS + 1)
        out = np.full(dims, 42.0, dtype=np.complex64)
        with self.assertRaisesRegex(ValueError, "Coil index out of range"):
            sample(dims, PHANTOM_DISC, out=out)
        np.testing.assert_array_equal(out, 42.0)

    def test_sens_flag_applies_to_single_coil(self):
        dims = make_dims(6, 6)
        fun = lambda m: np.ones(np.broadcast(*m).shape, dtype=complex)
        out = sample_grid(dims, fun, kspace=False, sens=True)
        np.testing.assert_allclose(out[0, :, :, 0], sensitivity_field(0, grid_mpos(dims, False)), atol=1e-6)

    def test_invalid_dims(self):
        with self.assertRaises(ValueError):
            sample((8, 8), PHANTOM_DISC)
        with self.assertRaises(ValueError):
            sample((1, 0, 8, 1), PHANTOM_DISC)


class TestNonCartesianSampler(unittest.TestCase):
    def test_output_dims(self):
        self.assertEqual(noncart_output_dims((3, 5, 6, 2)), (1, 5, 6, 2))
        self.assertEqual(noncart_output_dims((3, 5, 6, 2, 4)), (1, 5, 6, 2, 1))

    def test_matches_grid_sampler_coil_by_coil(self):
        nx, ny = 12, 10
        traj = cartesian_trajectory(nx, ny)
        for coils in (1, 3, MAX_COILS):
            grid = sample((1, nx, ny, coils), SHEPP_LOGAN_MOD, kspace=True)
            noncart = sample_noncart((3, nx, ny, coils), traj, SHEPP_LOGAN_MOD)
            self.assertEqual(noncart.shape, grid.shape)
            for c in range(coils):
                np.testing.assert_allclose(noncart[..., c], grid[..., c], rtol=1e-6, atol=1e-7)

    def test_third_component_is_ignored(self):
        traj = radial_trajectory(16, 5)
        traj_kz = radial_trajectory(16, 5, kz=3.5)
        dims = (3, 16, 5, 2)
        np.testing.assert_array_equal(sample_noncart(dims, traj_kz, SHEPP_LOGAN_MOD),
                                      sample_noncart(dims, traj, SHEPP_LOGAN_MOD))

    def test_spoke_centers_are_dc(self):
        traj = radial_trajectory(8, 6)
        out = sample_noncart((3, 8, 6, 1), traj, PHANTOM_DISC)
        np.testing.assert_allclose(out[0, 4, :, 0], np.pi * 0.4 ** 2, rtol=1e-6)

    def test_leading_dim_must_be_three(self):
        traj = cartesian_trajectory(4, 4)
        with self.assertRaisesRegex(ValueError, "must be 3"):
            sample_noncart((1, 4, 4, 1), traj, PHANTOM_DISC)

    def test_trajectory_leading_axis_must_be_three(self):
        with self.assertRaisesRegex(ValueError, "leading axis"):
            sample_noncart((3, 4, 4, 1), np.zeros((2, 4, 4)), PHANTOM_DISC)

    def test_too_many_coils_fails_before_writing(self):
        dims = (3, 4, 4, MAX_COILS + 1)
        out = np.full(noncart_output_dims(dims), 7.0, dtype=np.complex64)
        with self.assertRaises(ValueError):
            sample_noncart(dims, cartesian_trajectory(4, 4), PHANTOM_DISC, out=out)
        np.testing.assert_array_equal(out, 7.0)

    def test_custom_evaluator(self):
        p0 = (0.25, -0.5)
        fun = lambda m: np.exp(2j * np.pi * (m[0] * p0[0] + m[1] * p0[1]))
        traj = radial_trajectory(10, 4)
        out = sample_noncart_fun((3, 10, 4, 2), traj, fun, sens=True)
        kx, ky = traj[0] / 2.0, traj[1] / 2.0
        for c in range(2):
            np.testing.assert_allclose(out[0, :, :, c], sensitivity_field(c, p0) * fun((kx, ky)), atol=1e-6)


if __name__ == '__main__':
    unittest.main()
