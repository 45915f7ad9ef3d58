"""The classes to save the results of functional PCA and its rotations"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from gaitfpca.basis import FittedFunction, FunctionalPopulation
from gaitfpca.utils import get_perturbation_curves, get_score_std


@dataclass
class FPCAResult:
    """Mean, eigenfunctions, eigenvalues and scores of a functional PCA.

    Attributes
    ----------
    mean : FittedFunction
        Mean function of the population.
    harmonics : FunctionalPopulation
        Retained eigenfunctions (harmonics), orthonormal in L2.
    eigenvalues : np.ndarray of shape (k,)
        Variance captured by each retained harmonic, in descending order.
    all_eigenvalues : np.ndarray of shape (rank,)
        Every nonzero eigenvalue of the covariance operator.
    varprop : np.ndarray of shape (k,)
        Proportion of the total variance explained by each harmonic.
    scores : np.ndarray of shape (n_subjects, k)
        Inner products of each centered function with each harmonic.
    total_variance : float
        Denominator of `varprop`.
    subject_ids : tuple of str
        Identifier per row of `scores`.

    Notes
    -----
    This dataclass is a container with no validation logic; shapes and
    consistency are checked by :class:`~gaitfpca.fpca.FunctionalPCA`.
    """

    mean: FittedFunction
    harmonics: FunctionalPopulation
    eigenvalues: np.ndarray
    all_eigenvalues: np.ndarray
    varprop: np.ndarray
    scores: np.ndarray
    total_variance: float
    subject_ids: Tuple[str, ...] = ()

    @property
    def n_components(self) -> int:
        return self.harmonics.n_functions

    def evaluate_mean(self, grid: Union[np.ndarray, List[float]]) -> np.ndarray:
        """Mean function on `grid`, shape (n_points,)."""
        return self.mean.evaluate(grid)

    def evaluate_harmonics(self, grid: Union[np.ndarray, List[float]]) -> np.ndarray:
        """Harmonics on `grid`, shape (k, n_points)."""
        return self.harmonics.evaluate(grid)

    def score_std(self) -> np.ndarray:
        """Sample standard deviation of each column of `scores`."""
        return get_score_std(self.scores)

    def perturbation_curves(
        self, component: int, grid: Union[np.ndarray, List[float]], multiplier: float = 1.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Mean function plus and minus `multiplier` score SDs of one harmonic.

        Parameters
        ----------
        component : int
            Zero-based index of the harmonic.
        grid : array-like of shape (n_points,)
            Evaluation grid inside the basis range.
        multiplier : float, default=1.0
            Number of standard deviations.

        Returns
        -------
        plus, minus : np.ndarray of shape (n_points,)
        """
        if not 0 <= component < self.n_components:
            raise IndexError(f"component must be in [0, {self.n_components}), got {component}.")
        return get_perturbation_curves(
            self.evaluate_mean(grid), self.harmonics[component].evaluate(grid), self.score_std()[component], multiplier
        )


@dataclass
class RotatedFPCAResult(FPCAResult):
    """Functional PCA result whose leading harmonics were Varimax-rotated.

    The first `n_rotated` harmonics, scores and variance proportions are the
    rotated ones; the remaining components are carried through unchanged.
    Rotated components keep the order they were rotated in, so `eigenvalues`
    and `varprop` need not be descending.

    Attributes
    ----------
    rotation_matrix : np.ndarray of shape (n_rotated, n_rotated)
        Orthogonal matrix ``R`` with rotated harmonics ``U[:, :m] @ R``.
    n_rotated : int
        Number of rotated components.
    """

    rotation_matrix: np.ndarray = None
    n_rotated: int = 0
