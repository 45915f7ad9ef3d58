"""Utility functions used for FPCA"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
import logging
import warnings
from typing import Optional, Tuple

import numpy as np
from scipy.linalg import LinAlgError, eigh

logger = logging.getLogger(__name__)


def get_eigen_analysis_results(
    cov_operator: np.ndarray, metric: Optional[np.ndarray] = None, rtol: float = 1e-10
) -> Tuple[np.ndarray, np.ndarray, int]:
    """
    Solve the symmetric (generalized) eigenproblem ``A u = mu B u``.

    Parameters
    ----------
    cov_operator : np.ndarray of shape (K, K)
        Symmetric positive semi-definite matrix ``A``.
    metric : np.ndarray of shape (K, K), optional
        Symmetric positive definite matrix ``B``; identity if None.
    rtol : float, default=1e-10
        Eigenvalues not larger than ``rtol`` times the largest one are treated
        as zero when counting the rank.

    Returns
    -------
    eig_lambda : np.ndarray of shape (K,)
        Eigenvalues in descending order; ties keep their solver order.
    eig_vector : np.ndarray of shape (K, K)
        Corresponding ``B``-orthonormal eigenvectors (columns).
    rank : int
        Number of eigenvalues above the tolerance.

    Warns
    -----
    UserWarning
        If eigenvalues are noticeably negative, i.e. `cov_operator` is not
        positive semi-definite.

    Raises
    ------
    numpy.linalg.LinAlgError
        If `metric` is not positive definite.
    """
    cov_operator = 0.5 * (cov_operator + cov_operator.T)
    try:
        if metric is None:
            eig_lambda, eig_vector = eigh(cov_operator)
        else:
            eig_lambda, eig_vector = eigh(cov_operator, 0.5 * (metric + metric.T))
    except LinAlgError as e:
        raise LinAlgError(f"Eigen decomposition of the covariance operator failed: {e!s}") from e

    ord_idx = np.argsort(-eig_lambda, kind="stable")
    eig_lambda = eig_lambda[ord_idx]
    eig_vector = eig_vector[:, ord_idx]

    largest = max(eig_lambda[0], 0.0) if eig_lambda.size > 0 else 0.0
    threshold = rtol * largest
    if np.any(eig_lambda < -max(threshold, 10.0 * np.finfo(eig_lambda.dtype).eps)):
        warnings.warn("Eigenvalues contain negative values. The covariance operator may not be positive semi-definite.")
    rank = int(np.sum(eig_lambda > threshold)) if largest > 0 else 0
    logger.debug("Eigen decomposition: rank=%d, leading eigenvalues=%s", rank, eig_lambda[: min(rank, 5)])
    return eig_lambda, eig_vector, rank


def select_num_pcs_fve(eig_lambda: np.ndarray, fve_threshold: float, max_components: int = 20, total: Optional[float] = None):
    """
    Select the number of principal components based on cumulative explained variance.

    Parameters
    ----------
    eig_lambda : np.ndarray of shape (k,)
        Non-negative eigenvalues.
    fve_threshold : float
        Target fraction of variance explained (typically in (0, 1]).
    max_components : int, default=20
        Upper bound on the number of components considered.
    total : float, optional
        Denominator of the explained fraction; the sum of `eig_lambda` if None.

    Returns
    -------
    cumulative_fve : np.ndarray of shape (k,)
        Cumulative explained variance curve.
    num_pcs : int
        Number of components needed to reach the threshold, clipped by `max_components`.
    """
    cumulative_fve = np.cumsum(eig_lambda) / (np.sum(eig_lambda) if total is None else total)
    num_pcs = int(min(np.searchsorted(cumulative_fve, fve_threshold) + 1, max_components))
    return cumulative_fve, num_pcs


def get_fpca_phi(eig_vector: np.ndarray, mass: np.ndarray, mean_coef: np.ndarray) -> np.ndarray:
    """
    Orthonormalize harmonic coefficients in L2 and fix their signs.

    Parameters
    ----------
    eig_vector : np.ndarray of shape (K, k)
        Coefficients of the harmonics (columns) over a basis.
    mass : np.ndarray of shape (K, K)
        Gram matrix ``W`` of the basis.
    mean_coef : np.ndarray of shape (K,)
        Coefficients of the mean function, used for sign alignment.

    Returns
    -------
    np.ndarray of shape (K, k)
        Coefficients ``U`` with ``U^T W U = I``.

    Notes
    -----
    - Columns are orthonormalized in order (Gram-Schmidt under ``W``), so a set
      that is already ``W``-orthogonal is only rescaled.
    - Signs are chosen so that ``<phi_j, mean> >= 0``. When the inner product
      vanishes, the coefficient of largest magnitude is made positive.
    """
    phi = np.array(eig_vector, dtype=np.float64, copy=True)
    for j in range(phi.shape[1]):
        for _ in range(2):
            if j > 0:
                phi[:, j] -= phi[:, :j] @ (phi[:, :j].T @ (mass @ phi[:, j]))
        norm = np.sqrt(phi[:, j] @ mass @ phi[:, j])
        if norm <= 0:
            raise ValueError(f"Harmonic {j} has zero norm and cannot be normalized.")
        phi[:, j] /= norm

    inner = phi.T @ (mass @ mean_coef)
    scale = max(np.sqrt(max(float(mean_coef @ mass @ mean_coef), 0.0)), 1.0)
    signs = np.sign(inner)
    for j in np.flatnonzero(np.abs(inner) <= 1e-12 * scale):
        signs[j] = np.sign(phi[np.argmax(np.abs(phi[:, j])), j])
    signs[signs == 0] = 1.0
    return phi * signs


def get_principal_axes(phi: np.ndarray, cov_operator: np.ndarray, mass: np.ndarray, mean_coef: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rotate orthonormal harmonics onto the principal axes of their span.

    Rayleigh-Ritz step: the covariance operator restricted to the span of
    `phi` is diagonalized, so the returned harmonics carry uncorrelated
    scores with descending variances while spanning the same space.

    Parameters
    ----------
    phi : np.ndarray of shape (K, k)
        Coefficients of harmonics with ``phi^T W phi = I``.
    cov_operator : np.ndarray of shape (K, K)
        ``W Sigma W``.
    mass : np.ndarray of shape (K, K)
        Gram matrix ``W`` of the basis.
    mean_coef : np.ndarray of shape (K,)
        Coefficients of the mean function, used for sign alignment.

    Returns
    -------
    phi : np.ndarray of shape (K, k)
        Rotated harmonics, still ``W``-orthonormal, signed as in :func:`get_fpca_phi`.
    variances : np.ndarray of shape (k,)
        Score variance of each rotated harmonic, in descending order.
    """
    restricted = phi.T @ cov_operator @ phi
    variances, rotation = eigh(0.5 * (restricted + restricted.T))
    ord_idx = np.argsort(-variances, kind="stable")
    phi = get_fpca_phi(phi @ rotation[:, ord_idx], mass, mean_coef)
    return phi, variances[ord_idx]
