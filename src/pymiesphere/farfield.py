# -*- coding: utf-8 -*-
"""
farfield observables

Efficiencies and cross-sections of a homogeneous sphere under plane wave
illumination, following

Bohren, Craig F., and Donald R. Huffman.
Absorption and scattering of light by small particles. John Wiley & Sons, 2008.
Chap. 4.

vectorization conventions:
 - dimension 0: spectral dimension (wavelength)
 - dimension 1: Mie order
"""
import torch

from pymiesphere import coefficients
from pymiesphere import helper
from pymiesphere import special


def _order_weights(coeffs):
    n_max = coeffs["G"].shape[1]
    n = torch.arange(1, n_max + 1, dtype=special.DTYPE_FLOAT, device=coeffs["G"].device)
    return n, 2 * n + 1


def efficiencies(x, coeffs: dict) -> torch.Tensor:
    """far-field efficiencies for plane-wave illumination

    Args:
        x (torch.Tensor): real size parameters, one per sample
        coeffs (dict): Mie coefficients, see :func:`pymiesphere.coefficients.susceptibility`

    Returns:
        torch.Tensor: shape (len(x), 3), columns Qext, Qsca, Qabs
    """
    x = torch.atleast_1d(torch.as_tensor(x).squeeze()).to(special.DTYPE_FLOAT)
    G, D = coeffs["G"], coeffs["D"]
    _, w_n = _order_weights(coeffs)

    scatmat = G.abs() ** 2 + D.abs() ** 2

    prefactor = 2 / x**2
    q_sca = prefactor * (scatmat @ w_n)
    q_ext = -prefactor * ((G.real + D.real) @ w_n)
    q_abs = q_ext - q_sca

    return torch.stack((q_ext, q_sca, q_abs), dim=1)


def efficiencies_multipoles(x, coeffs: dict) -> dict:
    """order resolved efficiencies

    index 0 of the first dimension is the electric (Delta), index 1 the
    magnetic (Gamma) contribution. Summing over dimensions 0 and -1 gives
    the totals of :func:`efficiencies`.

    Args:
        x (torch.Tensor): real size parameters
        coeffs (dict): Mie coefficients

    Returns:
        dict: "q_ext", "q_sca", "q_abs", each of shape (2, len(x), n_max)
    """
    x = torch.atleast_1d(torch.as_tensor(x).squeeze()).to(special.DTYPE_FLOAT)
    _, w_n = _order_weights(coeffs)

    prefactor = (2 / x**2).unsqueeze(1) * w_n.unsqueeze(0)
    elec_mag = torch.stack((coeffs["D"], coeffs["G"]))

    q_ext_mp = -prefactor * elec_mag.real
    q_sca_mp = prefactor * elec_mag.abs() ** 2

    return dict(q_ext=q_ext_mp, q_sca=q_sca_mp, q_abs=q_ext_mp - q_sca_mp)


def backscattering_efficiency(x, coeffs: dict) -> torch.Tensor:
    """radar backscattering efficiency

    Q_back = |sum_n (2n+1) (-1)^n (a_n - b_n)|^2 / x^2

    Args:
        x (torch.Tensor): real size parameters
        coeffs (dict): Mie coefficients

    Returns:
        torch.Tensor: Q_back, one per sample
    """
    x = torch.atleast_1d(torch.as_tensor(x).squeeze()).to(special.DTYPE_FLOAT)
    n, w_n = _order_weights(coeffs)
    a_n, b_n = coefficients.mie_ab(coeffs)

    sign = (-1.0) ** n
    amp = torch.sum((w_n * sign).unsqueeze(0) * (a_n - b_n), dim=1)

    return amp.abs() ** 2 / x**2


def _validate(wavelength, epsilon, radius, medium, n_max):
    if epsilon.shape != wavelength.shape:
        raise ValueError(
            "wavelength and epsilon differ in length ({} vs {}).".format(
                len(wavelength), len(epsilon)
            )
        )
    if not torch.all(torch.isfinite(wavelength)) or torch.any(wavelength <= 0):
        raise ValueError("wavelengths must be finite and strictly positive.")
    if not torch.all(torch.isfinite(epsilon)):
        raise ValueError("epsilon contains non-finite values.")
    if not float(radius) > 0:
        raise ValueError("radius must be strictly positive, got {}.".format(float(radius)))
    if not float(medium) > 0:
        raise ValueError("medium index must be strictly positive, got {}.".format(float(medium)))
    if n_max is not None and int(n_max) < 1:
        raise ValueError("n_max must be at least 1, got {}.".format(n_max))


def size_parameters(wavelength, epsilon, radius, medium, strict=False, n_max=None):
    """canonicalize inputs, return wavelength, relative index s and size parameter x

    `x` is needed before a default truncation order can be chosen.
    """
    wavelength = torch.as_tensor(wavelength, dtype=special.DTYPE_FLOAT)
    wavelength = torch.atleast_1d(wavelength.squeeze())
    epsilon = torch.as_tensor(epsilon, dtype=special.DTYPE_COMPLEX)
    epsilon = torch.atleast_1d(epsilon.squeeze())
    radius = torch.as_tensor(radius, dtype=special.DTYPE_FLOAT)
    medium = torch.as_tensor(medium, dtype=special.DTYPE_FLOAT)

    # a single permittivity for the whole spectrum
    if len(epsilon) == 1 and len(wavelength) > 1:
        epsilon = torch.broadcast_to(epsilon, wavelength.shape)

    if strict:
        _validate(wavelength, epsilon, radius, medium, n_max)

    s = torch.sqrt(epsilon) / medium
    x = 2 * torch.pi / wavelength * medium * radius
    return wavelength, s, x


def cross_sections(
    wavelength,
    epsilon,
    radius,
    medium=1.0,
    n_max=None,
    efficiency=True,
    multipoles=False,
    strict=False,
) -> dict:
    """far-field cross-sections of a homogeneous sphere

    plane wave illumination. Wavelength and radius must be given in the same
    length unit, cross-sections are returned in that unit squared.

    Results are returned as a dictionary with keys:
    'wavelength' : evaluation wavelengths
    'extinction' : extinction efficiency (or cross-section)
    'scattering' : scattering efficiency (or cross-section)
    'absorption' : absorption efficiency (or cross-section)

    with `multipoles=True` additionally:
    'extinction_multipoles', 'scattering_multipoles', 'absorption_multipoles'
    (shape (2, N_wavelengths, n_max), electric first, magnetic second)

    Args:
        wavelength (torch.Tensor): vacuum wavelengths
        epsilon (torch.Tensor): complex permittivity of the sphere, one per
            wavelength (or a single value for all)
        radius (float): sphere radius
        medium (float, optional): refractive index of the surrounding medium. Defaults to 1.0.
        n_max (int, optional): truncation order. Defaults to None (automatic,
            from the largest size parameter).
        efficiency (bool, optional): return efficiencies, otherwise scale by
            the geometric cross-section. Defaults to True.
        multipoles (bool, optional): add order resolved spectra. Defaults to False.
        strict (bool, optional): validate inputs (raise ValueError) and warn
            at numerical resonances. Defaults to False.

    Returns:
        dict: spectra, one entry per wavelength in input order
    """
    wavelength, s, x = size_parameters(
        wavelength, epsilon, radius, medium, strict=strict, n_max=n_max
    )

    # truncation depends on x, therefore only known now
    if n_max is None:
        n_max = helper.get_truncation_order(x)

    resonance_tol = coefficients.RESONANCE_TOL if strict else None
    coeffs = coefficients.susceptibility(n_max, s, x, resonance_tol=resonance_tol)
    Q = efficiencies(x, coeffs)

    scale = 1.0
    if not efficiency:
        scale = torch.pi * torch.as_tensor(radius, dtype=special.DTYPE_FLOAT) ** 2

    results = dict(
        wavelength=wavelength,
        extinction=Q[:, 0] * scale,
        scattering=Q[:, 1] * scale,
        absorption=Q[:, 2] * scale,
    )

    if multipoles:
        Q_mp = efficiencies_multipoles(x, coeffs)
        results["extinction_multipoles"] = Q_mp["q_ext"] * scale
        results["scattering_multipoles"] = Q_mp["q_sca"] * scale
        results["absorption_multipoles"] = Q_mp["q_abs"] * scale

    return results


def angular_scattering(
    wavelength,
    epsilon,
    radius,
    theta,
    medium=1.0,
    n_max=None,
) -> dict:
    """far-field angular scattering of a homogeneous sphere

    Results are returned as a dictionary with keys:
    'wavelength' : evaluation wavelengths
    'theta' : evaluation angles
    'S1' : amplitude function S1
    'S2' : amplitude function S2
    'i_per' : scattered irradiance per unit incident irradiance, perpendicular polarization
    'i_par' : scattered irradiance per unit incident irradiance, parallel polarization
    'i_unpol' : scattered irradiance per unit incident irradiance, unpolarized
    'pol_degree' : degree of linear polarization

    vectorization: dimension 0 is wavelength, dimension 1 is angle.

    Args:
        wavelength (torch.Tensor): vacuum wavelengths
        epsilon (torch.Tensor): complex permittivity of the sphere
        radius (float): sphere radius
        theta (torch.Tensor): scattering angles (rad)
        medium (float, optional): refractive index of environment. Defaults to 1.0.
        n_max (int, optional): truncation order. Defaults to None.

    Returns:
        dict: angular scattering results for all wavelengths and angles
    """
    wavelength, s, x = size_parameters(wavelength, epsilon, radius, medium)

    if n_max is None:
        n_max = helper.get_truncation_order(x)

    coeffs = coefficients.susceptibility(n_max, s, x)
    a_n, b_n = coefficients.mie_ab(coeffs)

    theta = torch.as_tensor(theta, dtype=special.DTYPE_FLOAT, device=a_n.device)
    theta = torch.atleast_1d(theta)
    pi, tau = special.pi_tau(n_max, torch.cos(theta))  # shape: n_max, N_theta

    # dim 0: wavelength, dim 1: Mie order, dim 2: angle
    n = torch.arange(1, n_max + 1, dtype=special.DTYPE_FLOAT, device=a_n.device)
    n = n.view(1, -1, 1)
    pi = pi.unsqueeze(0)
    tau = tau.unsqueeze(0)
    a_n = a_n.unsqueeze(-1)
    b_n = b_n.unsqueeze(-1)

    prefactor = (2 * n + 1) / (n * (n + 1))
    s1 = torch.sum(prefactor * (a_n * pi + b_n * tau), dim=1)
    s2 = torch.sum(prefactor * (a_n * tau + b_n * pi), dim=1)

    i_per = s1.abs() ** 2
    i_par = s2.abs() ** 2
    i_unpol = (i_par + i_per) / 2
    pol_degree = (i_per - i_par) / (i_per + i_par)

    return dict(
        wavelength=wavelength,
        theta=theta,
        S1=s1,
        S2=s2,
        i_per=i_per,
        i_par=i_par,
        i_unpol=i_unpol,
        pol_degree=pol_degree,
    )
