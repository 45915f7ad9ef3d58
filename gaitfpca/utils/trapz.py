"""Trapezoidal quadrature for curves sampled on a shared grid."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from typing import Union

import numpy as np


def trapz(y: np.ndarray, x: np.ndarray) -> Union[np.ndarray, float]:
    """
    Integrate sampled curves with the trapezoidal rule.

    Parameters
    ----------
    y : array_like of shape (n_points,) or (n_curves, n_points)
        Curve values; each row of a 2D input is one curve sampled on `x`.
    x : array_like of shape (n_points,)
        Monotonic sample locations shared by every curve.

    Returns
    -------
    float or np.ndarray of shape (n_curves,)
        A scalar for 1D input, one integral per row for 2D input.

    Raises
    ------
    ValueError
        If the trailing dimension of `y` does not match `x`, or `y` is not 1D/2D.

    Notes
    -----
    For a curve with fewer than two points the integral is 0.
    """
    y = np.asarray(y)
    x = np.asarray(x, dtype=np.float64)
    if y.dtype not in [np.float64, np.float32]:
        y = y.astype(np.float64, copy=False)
    x = x.astype(y.dtype, copy=False)

    if y.ndim == 1:
        if y.shape[0] != x.shape[0]:
            raise ValueError("y and x must have the same length.")
        return float(np.dot(y[:-1] + y[1:], np.diff(x)) * 0.5)
    elif y.ndim == 2:
        if y.shape[1] != x.shape[0]:
            raise ValueError("The number of columns of y must match the size of x.")
        return np.matmul(y[:, :-1] + y[:, 1:], np.diff(x)) * 0.5
    else:
        raise ValueError("y must be 1D or 2D.")
