# -*- coding: utf-8 -*-
"""
auto-diff ready Riccati-Bessel functions

The cylindrical Bessel and Hankel functions of half-integer order are taken
from scipy and wrapped into `torch.autograd.Function` classes, so that the
Mie series can be differentiated with respect to the argument.

vectorization conventions:
 - dimension 0: spectral dimension (one argument value per wavelength)
 - dimension 1: Mie order
"""
# %%
import torch
import numpy as np
from scipy.special import jv, jvp, hankel1, h1vp

from pymiesphere.helper import detach_tensor


DTYPE_FLOAT = torch.float64
DTYPE_COMPLEX = torch.complex128


class _AutoDiffJv(torch.autograd.Function):
    @staticmethod
    def forward(nu, z):
        result = torch.from_numpy(np.asarray(jv(detach_tensor(nu), detach_tensor(z))))
        return result.to(z.device)

    @staticmethod
    def setup_context(ctx, inputs, output):
        nu, z = inputs
        ctx.save_for_backward(nu, z)

    @staticmethod
    @torch.autograd.function.once_differentiable
    def backward(ctx, grad_result):
        nu, z = ctx.saved_tensors

        # gradient of forward pass
        dz = torch.from_numpy(np.asarray(jvp(detach_tensor(nu), detach_tensor(z))))
        dz = dz.to(z.device)

        # torch convention for complex numbers: use conjugate
        # see: https://pytorch.org/docs/stable/notes/autograd.html#autograd-for-complex-numbers
        grad_wrt_z = grad_result * dz.conj()

        # sum over broadcasted dimensions (orders)
        grad_wrt_z = _unbroadcast(grad_wrt_z, z.shape)
        if not torch.is_complex(z):
            grad_wrt_z = grad_wrt_z.real

        # differentiation wrt the order is not supported
        return None, grad_wrt_z


class _AutoDiffH1v(torch.autograd.Function):
    @staticmethod
    def forward(nu, z):
        result = torch.from_numpy(np.asarray(hankel1(detach_tensor(nu), detach_tensor(z))))
        return result.to(z.device)

    @staticmethod
    def setup_context(ctx, inputs, output):
        nu, z = inputs
        ctx.save_for_backward(nu, z)

    @staticmethod
    @torch.autograd.function.once_differentiable
    def backward(ctx, grad_result):
        nu, z = ctx.saved_tensors

        dz = torch.from_numpy(np.asarray(h1vp(detach_tensor(nu), detach_tensor(z))))
        dz = dz.to(z.device)

        grad_wrt_z = grad_result * dz.conj()
        grad_wrt_z = _unbroadcast(grad_wrt_z, z.shape)

        return None, grad_wrt_z


def _unbroadcast(grad, shape):
    """sum a gradient over the dimensions that were broadcasted in forward"""
    while grad.ndim > len(shape):
        grad = grad.sum(0)
    for i, s in enumerate(shape):
        if s == 1 and grad.shape[i] != 1:
            grad = grad.sum(i, keepdim=True)
    return grad


# public API
def bessel_jv(nu: torch.Tensor, z: torch.Tensor):
    """cylindrical Bessel function of first kind

    `nu` and `z` are broadcasted against each other. Real `z` gives a real
    result, complex `z` a complex one.

    Args:
        nu (torch.Tensor): real (half-integer) order(s)
        z (torch.Tensor): real or complex argument(s)

    Returns:
        torch.Tensor: J_nu(z)
    """
    nu = torch.as_tensor(nu, dtype=DTYPE_FLOAT, device=z.device)
    return _AutoDiffJv.apply(nu, z)


def hankel_h1v(nu: torch.Tensor, z: torch.Tensor):
    """cylindrical Hankel function of first kind

    Args:
        nu (torch.Tensor): real (half-integer) order(s)
        z (torch.Tensor): complex argument(s)

    Returns:
        torch.Tensor: H^(1)_nu(z), always complex
    """
    nu = torch.as_tensor(nu, dtype=DTYPE_FLOAT, device=z.device)
    z = torch.as_tensor(z).to(DTYPE_COMPLEX)
    return _AutoDiffH1v.apply(nu, z)


def _expand_rho(rho, complex_domain=False):
    """canonicalize the argument to a 1D tensor of double precision"""
    if not torch.is_tensor(rho):
        # numpy keeps python floats in double precision
        rho = torch.as_tensor(np.asarray(rho))
    rho = torch.atleast_1d(rho.squeeze())
    assert rho.ndim == 1, "argument must be a vector (one value per sample)"

    if complex_domain or torch.is_complex(rho):
        rho = rho.to(DTYPE_COMPLEX)
    else:
        rho = rho.to(DTYPE_FLOAT)
    return rho


def _riccati(f_cyl, rho: torch.Tensor, n_max: int):
    """scaled spherical function from its cylindrical counterpart

    evaluates spherical orders 0..n_max in a single call, then derives
    orders 1..n_max and their derivatives via

        f'_n = f_{n-1} - n f_n / rho

    the order 0 column only enters the recurrence.
    """
    n_max = int(n_max)
    assert n_max >= 1, "truncation order must be a positive integer"

    # dim. 1: orders 1/2, 3/2, ..., n_max + 1/2
    nu = torch.arange(n_max + 1, dtype=DTYPE_FLOAT, device=rho.device) + 0.5
    nu = nu.unsqueeze(0)
    _rho = rho.unsqueeze(1)

    f_all = torch.sqrt(_rho * torch.pi / 2) * f_cyl(nu, _rho)

    n = torch.arange(1, n_max + 1, dtype=DTYPE_FLOAT, device=rho.device).unsqueeze(0)
    f_n = f_all[:, 1:]
    f_der = f_all[:, :-1] - n * f_n / _rho

    assert f_n.shape == (len(rho), n_max)
    return f_n, f_der


def riccati_first(rho: torch.Tensor, n_max: int):
    """Riccati-Bessel function of the first kind and its derivative

    psi_n(rho) = rho j_n(rho) = sqrt(pi rho / 2) J_{n+1/2}(rho)

    `rho` must not contain zeros (division in the derivative recurrence).

    Args:
        rho (torch.Tensor): real or complex argument vector
        n_max (int): maximum order

    Returns:
        torch.Tensor, torch.Tensor: psi_n and psi'_n, both of shape
        (len(rho), n_max), column `i` holding order `i + 1`
    """
    rho = _expand_rho(rho)
    return _riccati(bessel_jv, rho, n_max)


def riccati_third(rho: torch.Tensor, n_max: int):
    """Riccati-Bessel function of the third kind and its derivative

    xi_n(rho) = rho h^(1)_n(rho) = sqrt(pi rho / 2) H^(1)_{n+1/2}(rho)

    outgoing wave convention. The argument is always promoted to complex.

    Args:
        rho (torch.Tensor): real or complex argument vector
        n_max (int): maximum order

    Returns:
        torch.Tensor, torch.Tensor: xi_n and xi'_n, both of shape
        (len(rho), n_max)
    """
    rho = _expand_rho(rho, complex_domain=True)
    return _riccati(hankel_h1v, rho, n_max)


# angular functions
def pi_tau(n: int, mu: torch.Tensor):
    """angular functions pi_n and tau_n for orders 1..n

    Uses upward recurrence:
        pi_0 = 0, pi_1 = 1
        pi_{n+1} = ((2n+1) mu pi_n - (n+1) pi_{n-1}) / n
        tau_n = n mu pi_n - (n+1) pi_{n-1}

    Args:
        n (int): maximum order
        mu (torch.Tensor): cosine of the scattering angles (1D)

    Returns:
        tuple: (pi, tau), each of shape (n, len(mu))
    """
    n_max = int(n)
    assert n_max >= 1

    mu = torch.atleast_1d(torch.as_tensor(mu))

    # build lists to stay out-of-place (autograd)
    pies = [torch.zeros_like(mu), torch.ones_like(mu)]
    for nn in range(1, n_max):
        pies.append(((2 * nn + 1) * mu * pies[nn] - (nn + 1) * pies[nn - 1]) / nn)

    taus = [nn * mu * pies[nn] - (nn + 1) * pies[nn - 1] for nn in range(1, n_max + 1)]

    return torch.stack(pies[1:]), torch.stack(taus)
