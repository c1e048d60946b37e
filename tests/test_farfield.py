# encoding=utf-8
# %%
import unittest
from unittest import mock
import warnings

import numpy as np
import torch

import pymiesphere as pms


class TestEfficiencies(unittest.TestCase):
    def setUp(self):
        self.wl = torch.linspace(400.0, 800.0, 41, dtype=torch.float64)
        self.radius = 80.0
        self.medium = 1.33
        # Drude-like permittivity, one value per wavelength
        self.eps = pms.materials.MatDrude.gold().get_epsilon(self.wl)

    def test_record_layout(self):
        res = pms.cross_sections(self.wl, self.eps, self.radius, medium=self.medium)
        self.assertEqual(
            set(res.keys()), {"wavelength", "extinction", "scattering", "absorption"}
        )
        for k in res:
            self.assertEqual(res[k].shape, self.wl.shape)
        torch.testing.assert_close(res["wavelength"], self.wl)

    def test_order_preserved(self):
        perm = torch.randperm(len(self.wl))
        res = pms.cross_sections(self.wl, self.eps, self.radius, medium=self.medium, n_max=12)
        res_p = pms.cross_sections(
            self.wl[perm], self.eps[perm], self.radius, medium=self.medium, n_max=12
        )
        torch.testing.assert_close(res_p["wavelength"], self.wl[perm])
        torch.testing.assert_close(res_p["extinction"], res["extinction"][perm])

    def test_absorption_by_subtraction(self):
        res = pms.cross_sections(self.wl, self.eps, self.radius, medium=self.medium)
        torch.testing.assert_close(
            res["absorption"], res["extinction"] - res["scattering"], rtol=0, atol=0
        )

    def test_no_contrast(self):
        eps = torch.full_like(self.wl, self.medium**2)
        res = pms.cross_sections(self.wl, eps, self.radius, medium=self.medium)
        for k in ("extinction", "scattering", "absorption"):
            torch.testing.assert_close(
                res[k], torch.zeros_like(res[k]), atol=1e-10, rtol=0
            )

    def test_lossless_dielectric(self):
        res = pms.cross_sections(self.wl, 2.25, self.radius, medium=1.0)
        self.assertTrue(torch.all(res["scattering"] > 0))
        torch.testing.assert_close(
            res["absorption"], torch.zeros_like(res["absorption"]), atol=1e-8, rtol=0
        )

    def test_convergence(self):
        res = pms.cross_sections(self.wl, self.eps, self.radius, medium=self.medium)
        wl_min = float(self.wl.min())
        x_max = 2 * np.pi / wl_min * self.medium * self.radius
        n_max = pms.helper.get_truncation_order(x_max)
        res_more = pms.cross_sections(
            self.wl, self.eps, self.radius, medium=self.medium, n_max=n_max + 10
        )
        for k in ("extinction", "scattering", "absorption"):
            torch.testing.assert_close(res[k], res_more[k], rtol=1e-6, atol=1e-9)

    def test_cross_section_scaling(self):
        q = pms.cross_sections(self.wl, self.eps, self.radius, medium=self.medium)
        cs = pms.cross_sections(
            self.wl, self.eps, self.radius, medium=self.medium, efficiency=False
        )
        geo = np.pi * self.radius**2
        for k in ("extinction", "scattering", "absorption"):
            torch.testing.assert_close(cs[k], q[k] * geo)

    def test_toy_metal(self):
        res = pms.cross_sections(
            torch.tensor([500.0]),
            torch.tensor([-9.0 + 1.0j]),
            radius=0.05,
            medium=1.33,
            n_max=10,
        )
        self.assertEqual(len(res["wavelength"]), 1)
        ext = float(res["extinction"][0])
        sca = float(res["scattering"][0])
        self.assertTrue(np.isfinite(ext) and np.isfinite(sca))
        self.assertGreater(sca, 0)
        self.assertGreater(ext, 0)
        self.assertGreaterEqual(ext, sca)

    def test_bhmie_benchmark(self):
        # Bohren & Huffman, appendix A: m = 1.55, x = 5.213
        res = pms.cross_sections(
            torch.tensor([0.6328], dtype=torch.float64), 1.55**2, radius=0.525, medium=1.0
        )
        self.assertAlmostEqual(float(res["scattering"][0]), 3.10543, places=4)
        self.assertAlmostEqual(float(res["extinction"][0]), 3.10543, places=4)

    def test_efficiency_matrix(self):
        x = torch.tensor([0.5, 1.0, 2.0], dtype=torch.float64)
        s = torch.tensor([1.5 + 0.1j, 2.0 + 0.5j, 1.2 + 0j], dtype=torch.complex128)
        coeffs = pms.coefficients.susceptibility(8, s, x)
        Q = pms.farfield.efficiencies(x, coeffs)
        self.assertEqual(tuple(Q.shape), (3, 3))
        torch.testing.assert_close(Q[:, 2], Q[:, 0] - Q[:, 1])

        # small particle limit: Qsca ~ 8/3 x^4 |(m^2-1)/(m^2+2)|^2
        x = torch.tensor([0.01], dtype=torch.float64)
        s = torch.tensor([1.5 + 0j], dtype=torch.complex128)
        Q = pms.farfield.efficiencies(x, pms.coefficients.susceptibility(3, s, x))
        m2 = 1.5**2
        q_rayleigh = 8 / 3 * 0.01**4 * ((m2 - 1) / (m2 + 2)) ** 2
        self.assertAlmostEqual(float(Q[0, 1]) / q_rayleigh, 1.0, places=3)

    def test_multipoles(self):
        res = pms.cross_sections(
            self.wl, self.eps, self.radius, medium=self.medium, multipoles=True
        )
        for k in ("extinction", "scattering", "absorption"):
            mp = res[k + "_multipoles"]
            self.assertEqual(mp.shape[:2], (2, len(self.wl)))
            torch.testing.assert_close(torch.sum(mp, dim=(0, -1)), res[k])

    def test_multipoles_electric_magnetic(self):
        x = torch.tensor([0.5, 1.5, 3.0], dtype=torch.float64)
        s = torch.tensor([1.5 + 0.1j, 2.0 + 0.5j, 3.5 + 0j], dtype=torch.complex128)
        coeffs = pms.coefficients.susceptibility(6, s, x)
        Q_mp = pms.farfield.efficiencies_multipoles(x, coeffs)

        w_n = 2 * torch.arange(1, 7, dtype=torch.float64) + 1
        prefactor = 2 / x.unsqueeze(1) ** 2 * w_n
        # index 0: electric (Delta), index 1: magnetic (Gamma)
        torch.testing.assert_close(Q_mp["q_sca"][0], prefactor * coeffs["D"].abs() ** 2)
        torch.testing.assert_close(Q_mp["q_sca"][1], prefactor * coeffs["G"].abs() ** 2)
        torch.testing.assert_close(Q_mp["q_ext"][0], -prefactor * coeffs["D"].real)
        torch.testing.assert_close(Q_mp["q_ext"][1], -prefactor * coeffs["G"].real)

    def test_small_sphere_electric_dipole(self):
        wl = torch.linspace(500.0, 800.0, 7, dtype=torch.float64)
        res = pms.cross_sections(wl, 2.25, radius=5.0, multipoles=True)
        mp = res["scattering_multipoles"]
        # electric dipole carries the scattering of a small dielectric sphere
        self.assertTrue(torch.all(mp[0, :, 0] > 100 * mp[1, :, 0]))
        self.assertTrue(torch.all(mp[0, :, 0] > 0.99 * res["scattering"]))

    def test_autodiff_radius(self):
        r = torch.tensor(60.0, dtype=torch.float64, requires_grad=True)
        res = pms.cross_sections(self.wl, self.eps, r, medium=self.medium, efficiency=False)
        res["scattering"].sum().backward()
        self.assertIsNotNone(r.grad)
        self.assertTrue(torch.isfinite(r.grad))

        # compare with finite difference
        dr = 1e-4
        cs_p = pms.cross_sections(self.wl, self.eps, 60.0 + dr, medium=self.medium, efficiency=False)
        cs_m = pms.cross_sections(self.wl, self.eps, 60.0 - dr, medium=self.medium, efficiency=False)
        num_grad = (cs_p["scattering"].sum() - cs_m["scattering"].sum()) / (2 * dr)
        self.assertAlmostEqual(float(r.grad) / float(num_grad), 1.0, places=4)


class TestStrict(unittest.TestCase):
    def setUp(self):
        self.wl = torch.linspace(400.0, 800.0, 5, dtype=torch.float64)
        self.eps = torch.full((5,), -9.0 + 1.0j, dtype=torch.complex128)

    def test_valid_input_passes(self):
        res = pms.cross_sections(self.wl, self.eps, 30.0, strict=True)
        self.assertEqual(len(res["extinction"]), 5)

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            pms.cross_sections(self.wl, self.eps[:3], 30.0, strict=True)

    def test_bad_radius(self):
        with self.assertRaises(ValueError):
            pms.cross_sections(self.wl, self.eps, 0.0, strict=True)
        with self.assertRaises(ValueError):
            pms.cross_sections(self.wl, self.eps, -5.0, strict=True)

    def test_bad_wavelength(self):
        wl = self.wl.clone()
        wl[2] = 0.0
        with self.assertRaises(ValueError):
            pms.cross_sections(wl, self.eps, 30.0, strict=True)

    def test_bad_medium_and_order(self):
        with self.assertRaises(ValueError):
            pms.cross_sections(self.wl, self.eps, 30.0, medium=0.0, strict=True)
        with self.assertRaises(ValueError):
            pms.cross_sections(self.wl, self.eps, 30.0, n_max=0, strict=True)

    def test_permissive_default(self):
        # zero radius: no exception, non-finite values propagate
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            res = pms.cross_sections(self.wl, self.eps, 0.0, n_max=3)
        self.assertFalse(torch.all(torch.isfinite(res["extinction"])))

    def test_strict_resonance_warning(self):
        # every denominator lies below an absurdly large tolerance
        with mock.patch.object(pms.coefficients, "RESONANCE_TOL", 1e300):
            with self.assertWarns(pms.coefficients.ResonanceWarning):
                res = pms.cross_sections(self.wl, self.eps, 30.0, strict=True)

            # permissive mode does not look for resonances
            with warnings.catch_warnings():
                warnings.simplefilter("error")
                res_permissive = pms.cross_sections(self.wl, self.eps, 30.0)

        torch.testing.assert_close(res["extinction"], res_permissive["extinction"])


class TestAngular(unittest.TestCase):
    def setUp(self):
        self.wl = torch.tensor([500.0, 650.0], dtype=torch.float64)
        self.eps = torch.tensor([2.25 + 0.01j, 6.0 + 0.2j], dtype=torch.complex128)
        self.radius = 120.0

    def test_forward_scattering_theorem(self):
        theta = torch.tensor([0.0, np.pi / 2, np.pi], dtype=torch.float64)
        ang = pms.farfield.angular_scattering(self.wl, self.eps, self.radius, theta)
        res = pms.cross_sections(self.wl, self.eps, self.radius)

        self.assertEqual(tuple(ang["S1"].shape), (2, 3))
        # S1 = S2 in forward and backward direction
        torch.testing.assert_close(ang["S1"][:, 0], ang["S2"][:, 0])
        torch.testing.assert_close(ang["S1"][:, 2], -ang["S2"][:, 2])

        x = 2 * np.pi / self.wl * self.radius
        q_ext = 4 / x**2 * ang["S1"][:, 0].real
        torch.testing.assert_close(q_ext, res["extinction"])

    def test_backscattering(self):
        theta = torch.tensor([np.pi], dtype=torch.float64)
        ang = pms.farfield.angular_scattering(self.wl, self.eps, self.radius, theta, n_max=15)

        _, s, x = pms.farfield.size_parameters(self.wl, self.eps, self.radius, 1.0)
        coeffs = pms.coefficients.susceptibility(15, s, x)
        q_back = pms.farfield.backscattering_efficiency(x, coeffs)

        torch.testing.assert_close(q_back, 4 * ang["i_per"][:, 0] / x**2)

    def test_intensities(self):
        theta = torch.linspace(0.1, 3.0, 20, dtype=torch.float64)
        ang = pms.farfield.angular_scattering(self.wl, self.eps, self.radius, theta)
        torch.testing.assert_close(ang["i_unpol"], (ang["i_per"] + ang["i_par"]) / 2)
        self.assertTrue(torch.all(ang["pol_degree"].abs() <= 1 + 1e-12))

    @unittest.skipUnless(torch.cuda.is_available(), "requires a CUDA device")
    def test_device_follows_sphere(self):
        p = pms.Sphere(radius=self.radius, material=1.5, device="cuda")
        theta = torch.linspace(0.0, np.pi, 5, dtype=torch.float64)
        ang = p.get_angular_scattering(self.wl, theta)
        self.assertEqual(ang["S1"].device.type, "cuda")
        self.assertEqual(ang["i_unpol"].device.type, "cuda")


if __name__ == "__main__":
    unittest.main(argv=["first-arg-is-ignored"], exit=False)
