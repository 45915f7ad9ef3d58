"""Penalized least-squares fitting of discrete curves to basis expansions."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
import logging
from typing import List, Optional, Union

import numpy as np
from scipy.linalg import LinAlgError, cho_factor, cho_solve
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_array, check_is_fitted

from gaitfpca.basis import FunctionalPopulation, SmoothingSpec
from gaitfpca.exceptions import ConfigError, SingularSystemError
from gaitfpca.utils import DiscreteCurves

logger = logging.getLogger(__name__)


def _solve_penalized_system(basis_values: np.ndarray, weights: np.ndarray, penalty: np.ndarray, lam: float):
    """Factor ``B^T W B + lam * P`` and return the factor with the smoother map.

    Returns
    -------
    factor : tuple
        Cholesky factor as returned by :func:`scipy.linalg.cho_factor`.
    smoother_map : np.ndarray of shape (nbasis, n_points)
        ``(B^T W B + lam * P)^{-1} B^T W``, mapping observations to coefficients.

    Raises
    ------
    SingularSystemError
        If the regularized Gram matrix is not numerically positive definite.
    """
    btw = basis_values.T * weights
    system = btw @ basis_values + lam * penalty
    system = 0.5 * (system + system.T)

    eig_values = np.linalg.eigvalsh(system)
    tol = system.shape[0] * np.finfo(system.dtype).eps * max(eig_values[-1], 0.0)
    if eig_values[-1] <= 0 or eig_values[0] <= tol:
        raise SingularSystemError(
            f"The regularized Gram matrix is singular or nearly so (smallest/largest eigenvalue "
            f"{eig_values[0]:.3e}/{eig_values[-1]:.3e}) at lam={lam}. Increase lam or reduce nbasis.",
            lam=lam,
        )
    try:
        factor = cho_factor(system, lower=True, check_finite=False)
    except LinAlgError as e:
        raise SingularSystemError(f"Cholesky factorization failed at lam={lam}: {e!s}", lam=lam) from e
    return factor, cho_solve(factor, btw, check_finite=False)


class PenalizedBasisSmoother(BaseEstimator):
    """
    Fit discrete curves to a basis expansion by penalized least squares.

    For every curve the coefficients solve
    ``(B^T W B + lam * P) c = B^T W y``, where ``B`` holds the basis values at
    the sample points, ``W`` the observation weights and ``P`` the roughness
    penalty matrix of `smoothing_spec`.

    Parameters
    ----------
    smoothing_spec : SmoothingSpec
        Basis, roughness operator and smoothing parameter.

    Attributes
    ----------
    time_ : np.ndarray of shape (n_points,)
        Sample locations used in the fit.
    coef_ : np.ndarray of shape (n_curves, nbasis)
        Fitted coefficients, one row per curve.
    fd_ : FunctionalPopulation
        Fitted functions.
    df_ : float
        Effective degrees of freedom, the trace of the hat matrix.
    leverage_ : np.ndarray of shape (n_points,)
        Diagonal of the hat matrix.
    fitted_values_ : np.ndarray of shape (n_curves, n_points)
        Fitted curves at `time_`.
    residuals_ : np.ndarray of shape (n_curves, n_points)
        Observations minus fitted values.
    sse_ : np.ndarray of shape (n_curves,)
        Weighted residual sum of squares per curve.
    gcv_ : np.ndarray of shape (n_curves,)
        Generalized cross-validation criterion per curve,
        ``n * sse / (n - df)^2``. NaN where undefined.
    gcv_defined_ : bool
        False when ``df`` reaches the number of sample points, in which case
        the GCV denominator vanishes.

    Examples
    --------
    >>> from gaitfpca.basis import BSplineBasis, SmoothingSpec
    >>> spec = SmoothingSpec(BSplineBasis((0, 1), nbasis=8), lam=1e-4)
    >>> t = np.linspace(0, 1, 20)
    >>> smoother = PenalizedBasisSmoother(spec).fit(t, np.sin(2 * np.pi * t))
    >>> smoother.coef_.shape
    (1, 8)
    """

    def __init__(self, smoothing_spec: SmoothingSpec):
        self.smoothing_spec = smoothing_spec

    def fit(
        self,
        X: Union[DiscreteCurves, np.ndarray, List[float]],
        y: Optional[Union[np.ndarray, List[float], List[List[float]]]] = None,
        sample_weight: Optional[Union[np.ndarray, List[float]]] = None,
    ) -> "PenalizedBasisSmoother":
        """
        Fit one or several curves sampled on a shared grid.

        Parameters
        ----------
        X : DiscreteCurves or array-like of shape (n_points,)
            Either the curves themselves, or their sample locations.
        y : array-like of shape (n_points,) or (n_curves, n_points), optional
            Curve values; required when `X` holds sample locations.
        sample_weight : array-like of shape (n_points,), optional
            Positive observation weights, identical for every curve. Defaults to ones.

        Returns
        -------
        PenalizedBasisSmoother
            The fitted smoother.

        Raises
        ------
        DomainError
            If a sample location lies outside the basis range.
        SingularSystemError
            If ``B^T W B + lam * P`` is not numerically positive definite
            (e.g. ``lam=0`` with more basis functions than sample points).
        """
        if not isinstance(self.smoothing_spec, SmoothingSpec):
            raise ConfigError("smoothing_spec must be an instance of SmoothingSpec.")
        if isinstance(X, DiscreteCurves):
            if y is not None:
                raise ValueError("y must be None when X is a DiscreteCurves instance.")
            time, values, names = X.time, X.values, X.subject_ids
        else:
            if y is None:
                raise ValueError("y is required when X holds the sample locations.")
            curves = DiscreteCurves(time=X, values=y)
            time, values, names = curves.time, curves.values, ()

        n_points = time.shape[0]
        if sample_weight is None:
            sample_weight = np.ones(n_points)
        else:
            sample_weight = check_array(sample_weight, ensure_2d=False, dtype=np.float64)
            if sample_weight.ndim != 1 or sample_weight.shape[0] != n_points:
                raise ValueError(f"sample_weight must have the same length as time, got {sample_weight.shape[0]} vs {n_points}")
            if np.any(sample_weight <= 0):
                raise ValueError("All sample weights must be positive")

        basis = self.smoothing_spec.basis
        lam = self.smoothing_spec.lam
        basis_values = basis.evaluate(time)
        _, smoother_map = _solve_penalized_system(basis_values, sample_weight, self.smoothing_spec.penalty.matrix, lam)
        hat_matrix = basis_values @ smoother_map

        self.time_ = time
        self.sample_weight_ = sample_weight
        self.coef_ = values @ smoother_map.T
        self.fd_ = FunctionalPopulation(basis, self.coef_, names)
        self.leverage_ = np.diagonal(hat_matrix).copy()
        self.df_ = float(np.trace(hat_matrix))
        self.fitted_values_ = values @ hat_matrix.T
        self.residuals_ = values - self.fitted_values_
        self.sse_ = np.sum(sample_weight * self.residuals_**2, axis=1)

        denominator = n_points - self.df_
        self.gcv_defined_ = bool(denominator > np.sqrt(np.finfo(np.float64).eps) * n_points)
        if self.gcv_defined_:
            self.gcv_ = n_points * self.sse_ / denominator**2
        else:
            self.gcv_ = np.full(values.shape[0], np.nan)
        logger.debug("Smoothed %d curve(s) at lam=%g: df=%.4f, gcv=%s", values.shape[0], lam, self.df_, np.sum(self.gcv_))
        return self

    def predict(self, X: Union[np.ndarray, List[float], float], deriv: int = 0) -> np.ndarray:
        """
        Evaluate the fitted curves (or their derivatives) at new locations.

        Returns
        -------
        np.ndarray of shape (n_curves, n_points)
        """
        check_is_fitted(self, ["coef_", "fd_"])
        return self.fd_.evaluate(X, deriv=deriv)

    def fitted_values(self) -> np.ndarray:
        """Fitted curves at the sample locations, shape (n_curves, n_points)."""
        check_is_fitted(self, ["fitted_values_"])
        return self.fitted_values_
