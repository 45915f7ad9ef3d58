"""Functional Principal Component Analysis (FPCA) of basis expansions."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

import logging
import time
import warnings
from typing import Optional, Union

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.utils.validation import check_array, check_is_fitted

from gaitfpca.basis import FittedFunction, FunctionalPopulation, SmoothingSpec
from gaitfpca.exceptions import ConfigError, RankDeficiencyError
from gaitfpca.fpca.fpca_result_class import FPCAResult
from gaitfpca.fpca.utils import get_eigen_analysis_results, get_fpca_phi, get_principal_axes, select_num_pcs_fve

logger = logging.getLogger(__name__)


class FunctionalPCA(BaseEstimator):
    """
    Functional Principal Component Analysis of functions expanded over a basis.

    The covariance operator of a population with centered coefficient matrix
    ``C`` (one row per function) is ``Sigma = C^T C / (n - 1)`` in coefficient
    space. Harmonics solve the generalized symmetric eigenproblem

    ``W Sigma W u = mu (W + lam_h P_h) u``

    where ``W`` is the Gram matrix of the basis and ``lam_h P_h`` an optional
    roughness penalty on the harmonics.

    Parameters
    ----------
    n_components : int or float, default=5
        Number of harmonics to retain. A float in (0, 1) selects the smallest
        number whose cumulative proportion of variance reaches that fraction.
    harmonic_spec : SmoothingSpec, optional
        Roughness penalty on the harmonics. Its basis must be the basis of the
        fitted population. None (or ``lam=0``) means no penalty.
    rtol : float, default=1e-10
        Relative tolerance below which eigenvalues count as zero.
    verbose : bool, default=False
        If True, record timing diagnostics in `elapsed_time_`.

    Attributes
    ----------
    basis_ : BSplineBasis
        Basis of the fitted population.
    mean_coef_ : np.ndarray of shape (nbasis,)
        Coefficients of the mean function.
    covariance_ : np.ndarray of shape (nbasis, nbasis)
        Coefficient covariance ``Sigma``.
    mass_matrix_ : np.ndarray of shape (nbasis, nbasis)
        Gram matrix ``W`` of the basis.
    components_ : np.ndarray of shape (nbasis, n_components_)
        Harmonic coefficients (columns), orthonormal under ``W``.
    rank_ : int
        Number of nonzero eigenvalues of the covariance operator.
    n_components_ : int
        Resolved number of retained harmonics.
    cumulative_fve_ : np.ndarray of shape (rank_,)
        Cumulative fraction of the total variance ``trace(Sigma W)`` explained by
        the leading harmonics; entry ``k - 1`` equals ``result_.varprop.sum()``
        for ``k`` retained harmonics.
    result_ : FPCAResult
        Mean, harmonics, eigenvalues, variance proportions and scores.
    elapsed_time_ : dict
        Timings (seconds) per stage; only set when `verbose` is True.

    Notes
    -----
    Each harmonic is signed so that its inner product with the mean function
    is non-negative; when that inner product vanishes, its largest-magnitude
    coefficient is made positive. R's ``pca.fd`` signs harmonics by the sum of
    their coefficients instead, so individual harmonics and their scores may
    come out with the opposite sign when compared against R output.

    With a harmonic penalty the retained harmonics are rotated within their
    span so their scores are uncorrelated; `result_.eigenvalues` are then the
    score variances, in descending order, while `result_.all_eigenvalues` are
    the eigenvalues of the penalized problem.

    Examples
    --------
    >>> fpca = FunctionalPCA(n_components=3).fit(smoother.fd_)  # doctest: +SKIP
    >>> fpca.result_.varprop  # doctest: +SKIP
    """

    def __init__(
        self,
        n_components: Union[int, float] = 5,
        harmonic_spec: Optional[SmoothingSpec] = None,
        rtol: float = 1e-10,
        verbose: bool = False,
    ) -> None:
        self.n_components = n_components
        self.harmonic_spec = harmonic_spec
        self.rtol = rtol
        self.verbose = verbose

    def _check_params(self, population: FunctionalPopulation) -> None:
        n_components = self.n_components
        if isinstance(n_components, bool) or not isinstance(n_components, (int, float, np.integer, np.floating)):
            raise ConfigError("n_components must be a positive integer or a float in (0, 1).")
        if isinstance(n_components, (int, np.integer)) and n_components <= 0:
            raise ConfigError(f"n_components must be a positive integer, got {n_components}.")
        if isinstance(n_components, (float, np.floating)) and not 0 < n_components < 1:
            raise ConfigError(f"A float n_components must lie in (0, 1), got {n_components}.")
        if self.harmonic_spec is not None:
            if not isinstance(self.harmonic_spec, SmoothingSpec):
                raise ConfigError("harmonic_spec must be an instance of SmoothingSpec.")
            if self.harmonic_spec.basis != population.basis:
                raise ConfigError("harmonic_spec must use the basis of the fitted population.")
        if not isinstance(self.rtol, (int, float)) or not 0 <= self.rtol < 1:
            raise ConfigError("rtol must be a float in [0, 1).")
        if not isinstance(self.verbose, bool):
            raise ConfigError("verbose must be a boolean value.")

    def fit(self, X: FunctionalPopulation, y=None) -> "FunctionalPCA":
        """
        Fit the functional PCA of a population.

        Parameters
        ----------
        X : FunctionalPopulation
            Functions to analyse, e.g. ``PenalizedBasisSmoother(...).fit(curves).fd_``.
        y : None
            Ignored.

        Returns
        -------
        FunctionalPCA
            The fitted estimator; results are in `result_`.

        Raises
        ------
        RankDeficiencyError
            If more harmonics are requested than the covariance operator has
            nonzero eigenvalues.
        """
        start_time = time.time_ns()
        if not isinstance(X, FunctionalPopulation):
            raise ValueError("X must be an instance of FunctionalPopulation.")
        self._check_params(X)
        n_samples = X.n_functions
        if n_samples < 2:
            raise ValueError("At least two functions are required for functional PCA.")
        if n_samples <= 3:
            warnings.warn("The number of functions is less than or equal to 3. This may lead to unreliable results in functional PCA.")

        self.basis_ = X.basis
        self.mean_coef_ = np.mean(X.coefficients, axis=0)
        centered = X.coefficients - self.mean_coef_
        self.covariance_ = centered.T @ centered / (n_samples - 1)
        self.mass_matrix_ = self.basis_.gram_matrix()
        cov_time = (time.time_ns() - start_time) / 1e9

        start_eigen_time = time.time_ns()
        metric = self.mass_matrix_
        penalized = self.harmonic_spec is not None and self.harmonic_spec.lam > 0
        if penalized:
            metric = self.mass_matrix_ + self.harmonic_spec.lam * self.harmonic_spec.penalty.matrix
        cov_operator = self.mass_matrix_ @ self.covariance_ @ self.mass_matrix_
        eig_lambda, eig_vector, self.rank_ = get_eigen_analysis_results(cov_operator, metric, rtol=self.rtol)
        eigen_time = (time.time_ns() - start_eigen_time) / 1e9
        if self.rank_ == 0:
            raise RankDeficiencyError(1, 0)

        all_eigenvalues = eig_lambda[: self.rank_]
        total_variance = float(np.trace(self.covariance_ @ self.mass_matrix_))
        fve_threshold = self.n_components if isinstance(self.n_components, (float, np.floating)) else 1.0
        if fve_threshold == 1.0 and self.n_components > self.rank_:
            raise RankDeficiencyError(int(self.n_components), self.rank_)

        # L2-orthonormal harmonics; the variance captured by the leading j of them is
        # the cumulative sum of their score variances, whatever rotation follows
        phi = get_fpca_phi(eig_vector[:, : self.rank_], self.mass_matrix_, self.mean_coef_)
        captured = np.einsum("ij,jk,ki->i", phi.T, cov_operator, phi)
        self.cumulative_fve_, num_pcs = select_num_pcs_fve(captured, fve_threshold, max_components=self.rank_, total=total_variance)
        self.n_components_ = num_pcs if fve_threshold < 1.0 else int(self.n_components)

        self.components_ = phi[:, : self.n_components_]
        if penalized:
            # Gram-Schmidt leaves correlated scores; diagonalize within the retained span
            self.components_, eigenvalues = get_principal_axes(self.components_, cov_operator, self.mass_matrix_, self.mean_coef_)
        else:
            eigenvalues = captured[: self.n_components_]
        scores = centered @ self.mass_matrix_ @ self.components_
        logger.debug("Retained %d of %d harmonics; eigenvalues=%s", self.n_components_, self.rank_, eigenvalues)

        self.result_ = FPCAResult(
            mean=FittedFunction(self.basis_, self.mean_coef_, "mean"),
            harmonics=FunctionalPopulation(self.basis_, self.components_.T, tuple(f"PC{j + 1}" for j in range(self.n_components_))),
            eigenvalues=eigenvalues,
            all_eigenvalues=all_eigenvalues,
            varprop=eigenvalues / total_variance,
            scores=scores,
            total_variance=total_variance,
            subject_ids=X.names,
        )
        if self.verbose:
            self.elapsed_time_ = {
                "covariance_estimation": cov_time,
                "eigen_decomposition": eigen_time,
                "fit_total_time": (time.time_ns() - start_time) / 1e9,
            }
        return self

    def transform(self, X: FunctionalPopulation) -> np.ndarray:
        """
        Scores of new functions on the fitted harmonics.

        Parameters
        ----------
        X : FunctionalPopulation
            Functions over the fitted basis.

        Returns
        -------
        np.ndarray of shape (n_functions, n_components_)
        """
        check_is_fitted(self, ["components_", "mean_coef_", "mass_matrix_"])
        if not isinstance(X, FunctionalPopulation):
            raise ValueError("X must be an instance of FunctionalPopulation.")
        if X.basis != self.basis_:
            raise ValueError("X must be expanded over the basis the model was fitted on.")
        return (X.coefficients - self.mean_coef_) @ self.mass_matrix_ @ self.components_

    def fit_transform(self, X: FunctionalPopulation, y=None) -> np.ndarray:
        """Fit the model and return the scores of the training functions."""
        return self.fit(X).result_.scores

    def inverse_transform(self, scores: np.ndarray) -> FunctionalPopulation:
        """
        Functions reconstructed from scores, ``mean + sum_j scores[:, j] * phi_j``.

        Parameters
        ----------
        scores : array-like of shape (n_functions, n_components_)

        Returns
        -------
        FunctionalPopulation
        """
        check_is_fitted(self, ["components_", "mean_coef_"])
        scores = check_array(scores, dtype=np.float64)
        if scores.shape[1] != self.n_components_:
            raise ValueError(f"scores must have {self.n_components_} columns, got {scores.shape[1]}.")
        return FunctionalPopulation(self.basis_, self.mean_coef_ + scores @ self.components_.T)
