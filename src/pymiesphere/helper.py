# -*- coding: utf-8 -*-
"""pymiesphere.helper – small utilities used by the Mie solver.

All functions operate on `torch.Tensor` objects and are written to stay
compatible with PyTorch's autograd system.

* **Series truncation**
  - :func:`get_truncation_order` – convergence heuristic for the maximum
    Mie order ``n_max``.
* **Numerics**
  - :func:`complex_divide` – Smith's scaled complex division.
  - :func:`interp1d` – 1D linear interpolation implemented with PyTorch.
* **Tensor handling**
  - :func:`detach_tensor` – convert one or several tensors to NumPy.
"""
import math

import torch


def detach_tensor(args, item=False):
    """convert tensor(s) to numpy, optionally extracting python scalars"""
    if isinstance(args, tuple) and not item:
        return tuple(x.detach().cpu().numpy() for x in args)
    elif isinstance(args, tuple) and item:
        return tuple(x.detach().cpu().numpy().item() for x in args)
    else:
        return args.detach().cpu().numpy()


def get_truncation_order(x):
    """truncation order of the Mie series for size parameter(s) `x`

    n_max = ceil(2 + x_max + 4 x_max^(1/3)), with x_max the largest
    magnitude in `x`.

    Args:
        x (torch.Tensor or float): size parameter(s)

    Returns:
        int: truncation order
    """
    x_max = float(torch.max(torch.abs(torch.as_tensor(x).detach())))
    return int(math.ceil(2 + x_max + 4 * x_max ** (1 / 3)))


def complex_divide(num: torch.Tensor, den: torch.Tensor):
    """elementwise complex division using Smith's algorithm

    avoids overflow of the intermediate |den|^2 for large denominators.
    Division by exactly zero yields inf / nan, as with plain division.

    Smith, R. L. "Algorithm 116: Complex division."
    Commun. ACM 5.8, 435 (1962)

    Args:
        num (torch.Tensor): numerator (real or complex)
        den (torch.Tensor): denominator (real or complex)

    Returns:
        torch.Tensor: complex quotient, broadcasted shape of the inputs
    """
    num = torch.as_tensor(num)
    den = torch.as_tensor(den)
    dtype = torch.promote_types(torch.promote_types(num.dtype, den.dtype), torch.complex64)
    num, den = torch.broadcast_tensors(num.to(dtype), den.to(dtype))

    a, b = num.real, num.imag
    c, d = den.real, den.imag

    use_c = c.abs() >= d.abs()
    ones = torch.ones_like(c)
    # keep the discarded branch finite, torch.where would leak its nan into gradients
    c_s = torch.where(use_c, c, ones)
    d_s = torch.where(use_c, ones, d)

    # |c| >= |d|
    r1 = d / c_s
    t1 = 1 / (c_s + d * r1)
    re1 = (a + b * r1) * t1
    im1 = (b - a * r1) * t1

    # |c| < |d|
    r2 = c / d_s
    t2 = 1 / (c * r2 + d_s)
    re2 = (a * r2 + b) * t2
    im2 = (b * r2 - a) * t2

    return torch.complex(torch.where(use_c, re1, re2), torch.where(use_c, im1, im2))


def interp1d(x_eval: torch.Tensor, x_dat: torch.Tensor, y_dat: torch.Tensor):
    """1D linear interpolation

    simple torch implementation of :func:`numpy.interp`, values outside the
    data range are clamped to the boundary values.

    Args:
        x_eval (torch.Tensor): positions at which to evaluate
        x_dat (torch.Tensor): x-coordinates of the data points (real)
        y_dat (torch.Tensor): y-values of the data points, same length as `x_dat`

    Returns:
        torch.Tensor: interpolated values, same shape as `x_eval`
    """
    assert len(x_dat) == len(y_dat)
    assert not torch.is_complex(x_dat)
    x_eval = torch.as_tensor(x_eval, dtype=x_dat.dtype, device=x_dat.device)

    i_sort = torch.argsort(x_dat)
    _x = x_dat[i_sort]
    _y = y_dat[i_sort]

    # left / right neighbours
    idx_r = torch.bucketize(x_eval, _x)
    idx_l = (idx_r - 1).clamp(0, _x.shape[0] - 1)
    idx_r = idx_r.clamp(0, _x.shape[0] - 1)

    # distances (=weights of the opposite point)
    dist_l = (x_eval - _x[idx_l]).clamp(min=0)
    dist_r = (_x[idx_r] - x_eval).clamp(min=0)
    on_node = torch.logical_and(dist_l == 0, dist_r == 0)
    dist_l = torch.where(on_node, torch.ones_like(dist_l), dist_l)

    return (_y[idx_l] * dist_r + _y[idx_r] * dist_l) / (dist_l + dist_r)
