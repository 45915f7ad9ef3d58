"""Varimax rotation of loadings and of functional PCA harmonics."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
import logging
from typing import List, Optional, Union

import numpy as np
from sklearn.utils.validation import check_array

from gaitfpca.basis import FunctionalPopulation
from gaitfpca.exceptions import ConfigError, ConvergenceError
from gaitfpca.fpca.fpca_result_class import FPCAResult, RotatedFPCAResult

logger = logging.getLogger(__name__)


def varimax(
    loadings: Union[np.ndarray, List[List[float]]], normalize: bool = False, max_iter: int = 100, tol: float = 1e-8
) -> np.ndarray:
    """
    Orthogonal rotation maximizing the Varimax criterion of a loading matrix.

    Kaiser's pairwise algorithm: every sweep visits each pair of columns and
    rotates it by the angle that maximizes the variance of the squared
    loadings of the pair. Sweeps stop once every angle in a sweep is below `tol`.

    Parameters
    ----------
    loadings : array-like of shape (n_variables, n_factors)
        Loadings to rotate, e.g. harmonics evaluated on a fine grid (columns).
    normalize : bool, default=False
        Kaiser normalization: scale each row to unit length before rotating.
    max_iter : int, default=100
        Maximum number of sweeps.
    tol : float, default=1e-8
        Convergence threshold on the absolute rotation angle (radians).

    Returns
    -------
    np.ndarray of shape (n_factors, n_factors)
        Orthogonal rotation matrix ``R``; the rotated loadings are ``loadings @ R``.

    Raises
    ------
    ConvergenceError
        If an angle still exceeds `tol` after `max_iter` sweeps.

    References
    ----------
    Kaiser, H. F. (1958). The varimax criterion for analytic rotation in factor
    analysis. Psychometrika, 23, 187-200.
    """
    loadings = check_array(loadings, dtype=np.float64, copy=True)
    if not isinstance(max_iter, (int, np.integer)) or max_iter <= 0:
        raise ConfigError("max_iter must be a positive integer.")
    if tol <= 0:
        raise ConfigError("tol must be positive.")
    n_vars, n_factors = loadings.shape
    rotation = np.eye(n_factors)
    if n_factors < 2:
        return rotation

    if normalize:
        row_norms = np.sqrt(np.sum(loadings**2, axis=1))
        row_norms[row_norms == 0] = 1.0
        loadings /= row_norms.reshape((-1, 1))

    max_angle = np.inf
    for n_iter in range(1, max_iter + 1):
        max_angle = 0.0
        for i in range(n_factors - 1):
            for j in range(i + 1, n_factors):
                x = loadings[:, i].copy()
                y = loadings[:, j].copy()
                u = x**2 - y**2
                v = 2.0 * x * y
                a, b = np.sum(u), np.sum(v)
                c = np.sum(u**2 - v**2)
                d = 2.0 * np.sum(u * v)
                phi = 0.25 * np.arctan2(d - 2.0 * a * b / n_vars, c - (a**2 - b**2) / n_vars)
                max_angle = max(max_angle, abs(phi))

                cos_phi, sin_phi = np.cos(phi), np.sin(phi)
                loadings[:, i] = x * cos_phi + y * sin_phi
                loadings[:, j] = -x * sin_phi + y * cos_phi

                givens = np.eye(n_factors)
                givens[i, i] = cos_phi
                givens[j, j] = cos_phi
                givens[j, i] = sin_phi
                givens[i, j] = -sin_phi
                rotation = rotation @ givens
        logger.debug("Varimax sweep %d: largest angle %.3e", n_iter, max_angle)
        if max_angle < tol:
            return rotation
    raise ConvergenceError(max_iter, max_angle)


def varimax_rotation(
    result: FPCAResult,
    n_rotated: Optional[int] = None,
    n_grid: int = 501,
    normalize: bool = False,
    max_iter: int = 100,
    tol: float = 1e-8,
) -> RotatedFPCAResult:
    """
    Varimax-rotate the leading harmonics of a functional PCA.

    The harmonics are evaluated on `n_grid` equally spaced points over the
    basis range and the resulting loading matrix is rotated with
    :func:`varimax`. Harmonic coefficients and scores are rotated with the
    same matrix, so the rotated harmonics stay orthonormal and the total
    variance explained by the rotated block is unchanged.

    Parameters
    ----------
    result : FPCAResult
        Unrotated result, e.g. ``FunctionalPCA(...).fit(pop).result_``.
    n_rotated : int, optional
        Number of leading harmonics to rotate; all retained ones if None.
    n_grid : int, default=501
        Number of evaluation points for the loading matrix.
    normalize : bool, default=False
        Kaiser row normalization (see :func:`varimax`).
    max_iter : int, default=100
        Maximum number of Varimax sweeps.
    tol : float, default=1e-8
        Convergence threshold on the rotation angle.

    Returns
    -------
    RotatedFPCAResult
        Rotated components first, remaining components unchanged.

    Raises
    ------
    ConvergenceError
        If the Varimax iteration does not converge.
    """
    if not isinstance(result, FPCAResult):
        raise ValueError("result must be an instance of FPCAResult.")
    if isinstance(result, RotatedFPCAResult):
        raise ValueError("result is already rotated.")
    k = result.n_components
    if n_rotated is None:
        n_rotated = k
    if not isinstance(n_rotated, (int, np.integer)) or not 1 <= n_rotated <= k:
        raise ConfigError(f"n_rotated must be an integer in [1, {k}], got {n_rotated}.")
    if not isinstance(n_grid, (int, np.integer)) or n_grid < 2:
        raise ConfigError("n_grid must be an integer of at least 2.")

    basis = result.harmonics.basis
    grid = np.linspace(basis.rangeval[0], basis.rangeval[1], n_grid)
    loadings = result.harmonics.evaluate(grid)[:n_rotated].T
    rotation = varimax(loadings, normalize=normalize, max_iter=max_iter, tol=tol)

    coefficients = result.harmonics.coefficients.copy()
    coefficients[:n_rotated] = rotation.T @ coefficients[:n_rotated]
    scores = result.scores.copy()
    scores[:, :n_rotated] = scores[:, :n_rotated] @ rotation
    eigenvalues = result.eigenvalues.copy()
    eigenvalues[:n_rotated] = np.var(scores[:, :n_rotated], axis=0, ddof=1)
    varprop = result.varprop.copy()
    varprop[:n_rotated] = eigenvalues[:n_rotated] / result.total_variance

    return RotatedFPCAResult(
        mean=result.mean,
        harmonics=FunctionalPopulation(basis, coefficients, result.harmonics.names),
        eigenvalues=eigenvalues,
        all_eigenvalues=result.all_eigenvalues,
        varprop=varprop,
        scores=scores,
        total_variance=result.total_variance,
        subject_ids=result.subject_ids,
        rotation_matrix=rotation,
        n_rotated=int(n_rotated),
    )
