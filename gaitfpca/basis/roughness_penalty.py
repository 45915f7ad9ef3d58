"""Linear differential operators, roughness penalties and smoothing specifications."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from typing import List, Optional, Union

import numpy as np

from gaitfpca.basis.bspline_basis import BSplineBasis
from gaitfpca.exceptions import ConfigError


class LinearDifferentialOperator:
    """
    Constant-coefficient linear differential operator.

    ``L x = D^order x + sum_{j < order} coefficients[j] * D^j x``

    Parameters
    ----------
    order : int, default=2
        Order of the leading derivative. ``order=2`` penalizes curvature.
    coefficients : array-like of shape (order,), optional
        Weights of the lower-order derivatives. Defaults to zeros, which makes
        ``L = D^order``.
    """

    def __init__(self, order: int = 2, coefficients: Optional[Union[np.ndarray, List[float]]] = None):
        if not isinstance(order, (int, np.integer)) or isinstance(order, bool):
            raise ConfigError("Order of the differential operator, order, should be an integer.")
        if order < 0:
            raise ConfigError(f"Order of the differential operator, order, should be non-negative, got {order}.")
        if coefficients is None:
            coefficients = np.zeros(order)
        else:
            coefficients = np.atleast_1d(np.asarray(coefficients, dtype=np.float64))
            if coefficients.ndim != 1 or coefficients.size != order:
                raise ConfigError(f"coefficients must have exactly order={order} entries, got {coefficients.size}.")
            if not np.all(np.isfinite(coefficients)):
                raise ConfigError("coefficients must be finite.")
        self.order = int(order)
        self.coefficients = coefficients

    def __repr__(self):
        return f"LinearDifferentialOperator(order={self.order}, coefficients={self.coefficients.tolist()})"

    def apply(self, basis: BSplineBasis, x: np.ndarray) -> np.ndarray:
        """Evaluate ``L phi_j`` at `x` for every basis function.

        Raises
        ------
        ConfigError
            If the operator order is not below the spline order of `basis`.
        """
        if self.order > basis.max_derivative:
            raise ConfigError(
                f"A differential operator of order {self.order} needs splines of order at least {self.order + 1}, "
                f"got norder={basis.norder}."
            )
        values = basis.evaluate(x, deriv=self.order)
        for j, coef in enumerate(self.coefficients):
            if coef != 0.0:
                values = values + coef * basis.evaluate(x, deriv=j)
        return values


class RoughnessPenalty:
    """
    Quadratic roughness penalty of a basis expansion.

    For an expansion ``x(t) = c^T phi(t)`` the penalty is
    ``int (L x)(t)^2 dt = c^T P c`` with ``P_ij = int L phi_i * L phi_j``.

    Parameters
    ----------
    basis : BSplineBasis
        Basis of the expansions being penalized.
    operator : LinearDifferentialOperator, optional
        Operator defining roughness; defaults to the second derivative.
    """

    def __init__(self, basis: BSplineBasis, operator: Optional[LinearDifferentialOperator] = None):
        if not isinstance(basis, BSplineBasis):
            raise ConfigError("basis must be an instance of BSplineBasis.")
        if operator is None:
            operator = LinearDifferentialOperator(2)
        if not isinstance(operator, LinearDifferentialOperator):
            raise ConfigError("operator must be an instance of LinearDifferentialOperator.")
        if operator.order > basis.max_derivative:
            raise ConfigError(
                f"A differential operator of order {operator.order} needs splines of order at least {operator.order + 1}, "
                f"got norder={basis.norder}."
            )
        self.basis = basis
        self.operator = operator
        self._matrix = None

    def __repr__(self):
        return f"RoughnessPenalty(basis={self.basis!r}, operator={self.operator!r})"

    @property
    def matrix(self) -> np.ndarray:
        """Symmetric positive semi-definite penalty matrix of shape (nbasis, nbasis)."""
        if self._matrix is None:
            nodes, weights = self.basis.quadrature()
            values = self.operator.apply(self.basis, nodes)
            penalty = values.T @ (weights.reshape((-1, 1)) * values)
            self._matrix = 0.5 * (penalty + penalty.T)
        return self._matrix


class SmoothingSpec:
    """
    Basis, roughness operator and smoothing parameter used to fit curves.

    Parameters
    ----------
    basis : BSplineBasis
        Basis of the fitted expansions.
    operator : LinearDifferentialOperator, optional
        Roughness operator; defaults to the second derivative.
    lam : float, default=0.0
        Non-negative smoothing parameter. ``lam=0`` gives a plain least-squares
        fit; larger values pull the fit toward the null space of the operator.
    """

    def __init__(self, basis: BSplineBasis, operator: Optional[LinearDifferentialOperator] = None, lam: float = 0.0):
        if isinstance(lam, bool) or not isinstance(lam, (int, float, np.integer, np.floating)):
            raise ConfigError("Smoothing parameter lam must be a non-negative scalar.")
        if not np.isfinite(lam) or lam < 0:
            raise ConfigError(f"Smoothing parameter lam must be a finite non-negative scalar, got {lam}.")
        self.penalty = RoughnessPenalty(basis, operator)
        self.lam = float(lam)

    @property
    def basis(self) -> BSplineBasis:
        return self.penalty.basis

    @property
    def operator(self) -> LinearDifferentialOperator:
        return self.penalty.operator

    def with_lambda(self, lam: float) -> "SmoothingSpec":
        """Return a copy sharing basis and penalty matrix but with another `lam`."""
        spec = SmoothingSpec(self.basis, self.operator, lam)
        spec.penalty = self.penalty
        return spec

    def __repr__(self):
        return f"SmoothingSpec(basis={self.basis!r}, operator={self.operator!r}, lam={self.lam})"
