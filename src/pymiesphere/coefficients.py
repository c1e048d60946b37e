# -*- coding: utf-8 -*-
"""
Mie coefficients of a homogeneous sphere

The generalised susceptibilities Gamma, Delta (scattered field) and A, B
(internal field) are assembled from Riccati-Bessel functions evaluated at
the size parameter `x` and at `z = s x`.

Relation to the notation of

Bohren, Craig F., and Donald R. Huffman.
Absorption and scattering of light by small particles. John Wiley & Sons, 2008.

    a_n = -Delta_n,   b_n = -Gamma_n
"""
import warnings

import torch

from pymiesphere import special
from pymiesphere.helper import complex_divide


RESONANCE_TOL = 1e-12


class ResonanceWarning(RuntimeWarning):
    """a Mie denominator is (close to) zero"""


def _check_resonances(den, tol, name):
    small = den.detach().abs() < tol
    if torch.any(small):
        i_sample, i_order = torch.nonzero(small, as_tuple=True)
        warnings.warn(
            "|{}| < {:g} for {} (sample, order) pair(s), first at sample {}, order {}. "
            "Coefficients are numerically undefined there.".format(
                name, tol, len(i_sample), int(i_sample[0]), int(i_order[0]) + 1
            ),
            ResonanceWarning,
        )


def susceptibility(n_max, s, x, resonance_tol=None) -> dict:
    """generalised susceptibilities of a homogeneous sphere

    corresponds to the usual coefficients a_n, b_n, c_n, d_n

    vectorization conventions:
     - dimension 0: spectral dimension (one `s`, `x` pair per sample)
     - dimension 1: Mie order 1..n_max

    division by a vanishing denominator is not trapped, the resulting
    inf / nan values are returned as they are.

    Args:
        n_max (int): maximum order
        s (torch.Tensor): relative refractive index, complex, one per sample
        x (torch.Tensor): size parameter, real, same length as `s`
        resonance_tol (float, optional): if given, warn with a
            :class:`ResonanceWarning` when a denominator magnitude falls below it.
            Defaults to None.

    Returns:
        dict: "G", "D", "A", "B" tensors (Gamma, Delta, A, B) of shape (len(x), n_max)
    """
    n_max = int(n_max)
    x = torch.atleast_1d(torch.as_tensor(x).squeeze())
    s = torch.atleast_1d(torch.as_tensor(s).squeeze()).to(special.DTYPE_COMPLEX)
    assert len(s) == len(x), "`s` and `x` need the same number of samples"

    z = s * x

    psi_x, dpsi_x = special.riccati_first(x, n_max)
    xi_x, dxi_x = special.riccati_third(x, n_max)
    psi_z, dpsi_z = special.riccati_first(z, n_max)

    # same relative index for every order of a sample
    smat = torch.broadcast_to(s.unsqueeze(1), psi_z.shape)

    pp1 = psi_z * dpsi_x
    pp2 = psi_x * dpsi_z
    pp3 = psi_z * dxi_x
    pp4 = xi_x * dpsi_z

    G_numerator = -pp1 + smat * pp2
    D_numerator = pp2 - smat * pp1
    A_denominator = pp3 - smat * pp4
    B_denominator = -pp4 + smat * pp3

    if resonance_tol is not None:
        _check_resonances(A_denominator, resonance_tol, "A denominator")
        _check_resonances(B_denominator, resonance_tol, "B denominator")

    return dict(
        G=complex_divide(G_numerator, A_denominator),
        D=complex_divide(D_numerator, B_denominator),
        A=complex_divide(1j * smat, A_denominator),
        B=complex_divide(1j * smat, B_denominator),
    )


def mie_ab(coeffs: dict):
    """external Mie coefficients in Bohren & Huffman convention

    Args:
        coeffs (dict): result of :func:`susceptibility`

    Returns:
        torch.Tensor, torch.Tensor: electric `a_n` and magnetic `b_n`
    """
    return -coeffs["D"], -coeffs["G"]
