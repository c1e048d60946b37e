# -*- coding: utf-8 -*-
"""
pymiesphere.main
================

High-level interface for a single homogeneous sphere.

The module defines the :class:`Sphere` class, which bundles radius, particle
material, embedding medium and the device on which calculations are
performed. It provides convenient methods to obtain Mie coefficients,
far-field cross-sections and angular scattering patterns, evaluating the
material permittivity at the requested wavelengths.

Typical usage
-------------

>>> import torch, pymiesphere as pms
>>> wl = torch.linspace(400, 800, 100)
>>> p = pms.Sphere(radius=50.0, material=pms.materials.MatDrude.gold(), medium=1.33)
>>> cs = p.get_cross_sections(wl, efficiency=False)  # dict with spectra

"""
import torch

from pymiesphere import coefficients
from pymiesphere import farfield
from pymiesphere import helper
from pymiesphere.materials import MatConstant
from pymiesphere.special import DTYPE_FLOAT


class Sphere:
    def __init__(self, radius, material, medium=1.0, device=None):
        """
        Initialise a homogeneous sphere.

        Parameters
        ----------
        radius : float or torch.Tensor
            Sphere radius, same length unit as the wavelengths (usually nm).

        material : pymiesphere.materials.MaterialBase or float/int/complex/torch.Tensor
            Particle material. A scalar is interpreted as the refractive
            index and wrapped into :class:`pymiesphere.materials.MatConstant`
            with permittivity ``n**2``.

        medium : float, optional
            Real refractive index of the embedding medium. Defaults to ``1.0``.

        device : str or torch.device, optional
            Torch device on which all tensors will be allocated. Defaults to
            ``'cpu'``.
        """
        self.device = "cpu" if device is None else device

        self.radius = torch.as_tensor(radius, dtype=DTYPE_FLOAT, device=self.device)
        self.medium = float(medium)

        if type(material) in (float, int, complex, torch.Tensor):
            self.material = MatConstant(material**2, device=self.device)
        else:
            self.material = material
            self.material.set_device(self.device)

    def set_device(self, device):
        self.device = device
        self.radius = self.radius.to(device=self.device)
        self.material.set_device(self.device)

    def __repr__(self):
        out_str = "homogeneous sphere (on device: {})\n".format(self.device)
        out_str += " - radius      = {}\n".format(self.radius.data)
        out_str += " - material    : {}\n".format(self.material.__name__)
        out_str += " - environment : n={}\n".format(self.medium)
        return out_str

    def get_permittivity(self, wavelength):
        """permittivity of the sphere material at `wavelength`"""
        wavelength = torch.as_tensor(wavelength, device=self.device)
        return self.material.get_epsilon(wavelength)

    def get_mie_coefficients(self, wavelength, n_max=None) -> dict:
        """
        Compute the Mie susceptibilities of the sphere.

        Parameters
        ----------
        wavelength : torch.Tensor
            Vacuum wavelengths.
        n_max : int, optional
            Truncation order, automatic if omitted.

        Returns
        -------
        dict
            ``G``, ``D``, ``A``, ``B`` (Gamma, Delta, A, B), ``a_n``, ``b_n``
            (Bohren & Huffman convention), ``x`` (size parameters), ``s``
            (relative refractive indices) and ``n_max``.
        """
        eps = self.get_permittivity(wavelength)
        wavelength, s, x = farfield.size_parameters(
            wavelength, eps, self.radius, self.medium
        )
        if n_max is None:
            n_max = helper.get_truncation_order(x)

        res = coefficients.susceptibility(n_max, s, x)
        res["a_n"], res["b_n"] = coefficients.mie_ab(res)
        res.update(x=x, s=s, n_max=n_max)
        return res

    def get_cross_sections(self, wavelength, **kwargs) -> dict:
        """
        Compute far-field efficiency or cross-section spectra.

        Parameters
        ----------
        wavelength : torch.Tensor
            Vacuum wavelengths.
        **kwargs :
            Passed to :func:`pymiesphere.farfield.cross_sections`
            (``n_max``, ``efficiency``, ``multipoles``, ``strict``).

        Returns
        -------
        dict
            ``wavelength``, ``extinction``, ``scattering``, ``absorption``
            and optional multipole spectra.
        """
        eps = self.get_permittivity(wavelength)
        return farfield.cross_sections(
            wavelength, eps, self.radius, medium=self.medium, **kwargs
        )

    def get_angular_scattering(self, wavelength, theta, n_max=None) -> dict:
        """angular scattering, see :func:`pymiesphere.farfield.angular_scattering`"""
        eps = self.get_permittivity(wavelength)
        return farfield.angular_scattering(
            wavelength, eps, self.radius, theta, medium=self.medium, n_max=n_max
        )
