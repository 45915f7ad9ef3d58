"""B-spline basis systems for representing curves as basis expansions."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from typing import List, Optional, Tuple, Union

import numpy as np
from scipy.interpolate import BSpline
from sklearn.utils.validation import check_array

from gaitfpca.exceptions import ConfigError, DomainError


class BSplineBasis:
    """
    B-spline basis of a given order over a closed interval.

    Parameters
    ----------
    rangeval : tuple of float, default=(0.0, 1.0)
        Domain ``[a, b]`` of the basis, with ``a < b``.
    nbasis : int, default=20
        Number of basis functions. Must be at least `norder`.
    norder : int, default=4
        Order of the splines (degree + 1); 4 gives cubic splines.
    breaks : array-like, optional
        Break points including both ends of `rangeval`. Must contain
        ``nbasis - norder + 2`` strictly increasing values. If None, the breaks
        are equally spaced over `rangeval`.

    Attributes
    ----------
    knots : np.ndarray of shape (nbasis + norder,)
        Full knot sequence: the breaks with each end repeated `norder` times.

    Notes
    -----
    Derivatives of order ``0 .. norder - 1`` can be evaluated. The derivative of
    order ``norder - 1`` is piecewise constant and is evaluated from the right at
    the interior breaks. Orders ``>= norder`` vanish identically and are rejected
    with a :class:`~gaitfpca.exceptions.ConfigError`.

    Examples
    --------
    >>> basis = BSplineBasis(rangeval=(0, 100), nbasis=20, norder=4)
    >>> basis.evaluate([0.0, 50.0, 100.0]).shape
    (3, 20)
    """

    def __init__(
        self,
        rangeval: Tuple[float, float] = (0.0, 1.0),
        nbasis: int = 20,
        norder: int = 4,
        breaks: Optional[Union[np.ndarray, List[float]]] = None,
    ) -> None:
        if len(rangeval) != 2:
            raise ConfigError("rangeval must contain exactly two values (lower, upper).")
        lower, upper = float(rangeval[0]), float(rangeval[1])
        if not (np.isfinite(lower) and np.isfinite(upper)) or lower >= upper:
            raise ConfigError(f"rangeval must be a finite interval with lower < upper, got ({lower}, {upper}).")
        if not isinstance(norder, (int, np.integer)) or isinstance(norder, bool):
            raise ConfigError("Order of the splines, norder, should be an integer.")
        if not isinstance(nbasis, (int, np.integer)) or isinstance(nbasis, bool):
            raise ConfigError("Number of basis functions, nbasis, should be an integer.")
        if norder < 1:
            raise ConfigError(f"Order of the splines, norder, should be positive, got {norder}.")
        if nbasis < norder:
            raise ConfigError(f"Number of basis functions, nbasis, should be at least norder ({norder}), got {nbasis}.")

        n_breaks = nbasis - norder + 2
        if breaks is None:
            breaks = np.linspace(lower, upper, n_breaks)
        else:
            breaks = check_array(breaks, ensure_2d=False, dtype=np.float64)
            if breaks.ndim != 1 or breaks.size != n_breaks:
                raise ConfigError(f"breaks must be a 1D array of nbasis - norder + 2 = {n_breaks} values, got {breaks.size}.")
            if breaks[0] != lower or breaks[-1] != upper:
                raise ConfigError("The first and last breaks must coincide with rangeval.")
            if np.any(np.diff(breaks) <= 0):
                raise ConfigError("breaks must be strictly increasing.")

        self.rangeval = (lower, upper)
        self.nbasis = int(nbasis)
        self.norder = int(norder)
        self.breaks = np.asarray(breaks, dtype=np.float64)
        self.knots = np.concatenate([np.repeat(lower, norder - 1), self.breaks, np.repeat(upper, norder - 1)])
        self._spline = BSpline(self.knots, np.eye(self.nbasis), self.norder - 1, extrapolate=True)

    def __repr__(self):
        return f"BSplineBasis(rangeval={self.rangeval}, nbasis={self.nbasis}, norder={self.norder})"

    def __eq__(self, other):
        if not isinstance(other, BSplineBasis):
            return NotImplemented
        return (
            self.rangeval == other.rangeval
            and self.nbasis == other.nbasis
            and self.norder == other.norder
            and np.array_equal(self.breaks, other.breaks)
        )

    def __hash__(self):
        return hash((self.rangeval, self.nbasis, self.norder, self.breaks.tobytes()))

    @property
    def max_derivative(self) -> int:
        """Highest derivative order the basis can evaluate."""
        return self.norder - 1

    def check_domain(self, x: Union[np.ndarray, List[float], float]) -> np.ndarray:
        """Validate query points and return them as a 1D float array.

        Raises
        ------
        DomainError
            If any point lies outside `rangeval` or is not finite.
        """
        x = np.atleast_1d(np.asarray(x, dtype=np.float64))
        if x.ndim != 1:
            raise ValueError("Query points must be a scalar or a 1D array.")
        lower, upper = self.rangeval
        tol = 1e-12 * (upper - lower)
        outside = ~np.isfinite(x) | (x < lower - tol) | (x > upper + tol)
        if np.any(outside):
            bad = x[outside]
            raise DomainError(f"{bad.size} query point(s) outside the basis domain [{lower}, {upper}], e.g. {bad[0]!r}.")
        return np.clip(x, lower, upper)

    def evaluate(self, x: Union[np.ndarray, List[float], float], deriv: int = 0) -> np.ndarray:
        """
        Evaluate every basis function (or a derivative of it) at `x`.

        Parameters
        ----------
        x : float or array-like of shape (n_points,)
            Query points inside `rangeval`.
        deriv : int, default=0
            Derivative order, ``0 <= deriv <= norder - 1``.

        Returns
        -------
        np.ndarray of shape (n_points, nbasis)
            Column ``j`` holds ``D^deriv phi_j(x)``.

        Raises
        ------
        DomainError
            If a query point lies outside `rangeval`.
        ConfigError
            If `deriv` is negative or not below `norder`.
        """
        if not isinstance(deriv, (int, np.integer)) or deriv < 0:
            raise ConfigError(f"Derivative order, deriv, should be a non-negative integer, got {deriv!r}.")
        if deriv > self.max_derivative:
            raise ConfigError(
                f"Derivative of order {deriv} requested, but splines of order {self.norder} only have derivatives up to order "
                f"{self.max_derivative}; higher derivatives are identically zero."
            )
        x = self.check_domain(x)
        return self._spline(x, nu=int(deriv))

    def integrals(self) -> np.ndarray:
        """Closed-form integral of each basis function over `rangeval`.

        Returns
        -------
        np.ndarray of shape (nbasis,)
            ``(t[j + norder] - t[j]) / norder`` for knot sequence ``t``.
        """
        return (self.knots[self.norder :] - self.knots[: self.nbasis]) / self.norder

    def quadrature(self) -> Tuple[np.ndarray, np.ndarray]:
        """Gauss-Legendre nodes and weights, `norder` per break interval.

        The rule integrates polynomials of degree ``2 * norder - 1`` exactly on
        every interval, hence products of two basis functions (or of their
        derivatives) exactly over the whole range.

        Returns
        -------
        nodes : np.ndarray of shape (norder * (n_breaks - 1),)
        weights : np.ndarray of shape (norder * (n_breaks - 1),)
        """
        ref_nodes, ref_weights = np.polynomial.legendre.leggauss(self.norder)
        left = self.breaks[:-1].reshape((-1, 1))
        half_width = 0.5 * np.diff(self.breaks).reshape((-1, 1))
        nodes = left + half_width * (ref_nodes + 1.0)
        weights = half_width * ref_weights
        return nodes.ravel(), weights.ravel()

    def gram_matrix(self, deriv: int = 0) -> np.ndarray:
        """Inner products ``int D^deriv phi_i * D^deriv phi_j`` over `rangeval`.

        With ``deriv=0`` this is the mass matrix that defines the functional
        inner product of two expansions, ``<x, y> = c_x^T W c_y``.
        """
        nodes, weights = self.quadrature()
        values = self.evaluate(nodes, deriv=deriv)
        gram = values.T @ (weights.reshape((-1, 1)) * values)
        return 0.5 * (gram + gram.T)
