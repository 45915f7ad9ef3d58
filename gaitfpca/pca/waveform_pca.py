"""Classical PCA of discretized waveforms."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
import logging
from typing import List, Optional, Tuple, Union

import numpy as np
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.decomposition import PCA
from sklearn.utils.validation import check_array, check_is_fitted

from gaitfpca.utils import DiscreteCurves, get_perturbation_curves, get_score_std

logger = logging.getLogger(__name__)


class WaveformPCA(BaseEstimator, TransformerMixin):
    """
    Principal component analysis of curves treated as plain vectors.

    Every time point is a variable and every subject an observation, so the
    components are loading vectors on the sampling grid rather than smooth
    functions. This is the discrete counterpart of
    :class:`~gaitfpca.fpca.FunctionalPCA`.

    Parameters
    ----------
    n_components : int, optional
        Number of components to keep; ``min(n_subjects, n_time)`` if None.

    Attributes
    ----------
    pca_ : sklearn.decomposition.PCA
        Underlying fitted PCA.
    time_ : np.ndarray of shape (n_time,)
        Sampling grid of the training curves.
    mean_curve_ : np.ndarray of shape (n_time,)
        Pointwise mean of the training curves.
    components_ : np.ndarray of shape (n_components, n_time)
        Unit-norm loading vectors, signed so that their dot product with
        `mean_curve_` is non-negative.
    explained_variance_ : np.ndarray of shape (n_components,)
        Variance of each score column.
    varprop_ : np.ndarray of shape (n_components,)
        Proportion of the total variance (all eigenvalues) per component.
    scores_ : np.ndarray of shape (n_subjects, n_components)
        Scores of the training curves.
    score_std_ : np.ndarray of shape (n_components,)
        Sample standard deviation of each score column.
    """

    def __init__(self, n_components: Optional[int] = None):
        self.n_components = n_components

    def fit(self, X: Union[DiscreteCurves, np.ndarray, List[List[float]]], y=None) -> "WaveformPCA":
        """
        Fit the PCA.

        Parameters
        ----------
        X : DiscreteCurves or array-like of shape (n_subjects, n_time)
            Curves sampled on a shared grid.
        y : None
            Ignored.

        Returns
        -------
        WaveformPCA
            The fitted estimator.
        """
        if isinstance(X, DiscreteCurves):
            time, values = X.time, X.values
        else:
            values = check_array(X, dtype=np.float64)
            time = np.arange(values.shape[1], dtype=np.float64)
        if values.shape[0] < 2:
            raise ValueError("At least two curves are required for PCA.")
        if self.n_components is not None and (
            isinstance(self.n_components, bool) or not isinstance(self.n_components, (int, np.integer)) or self.n_components <= 0
        ):
            raise ValueError("n_components must be a positive integer.")

        self.pca_ = PCA(n_components=self.n_components, svd_solver="full").fit(values)
        components = self.pca_.components_
        scores = self.pca_.transform(values)
        signs = np.sign(components @ self.pca_.mean_)
        signs[signs == 0] = 1.0

        self.time_ = time
        self.mean_curve_ = self.pca_.mean_
        self.components_ = components * signs.reshape((-1, 1))
        self.scores_ = scores * signs
        self.explained_variance_ = self.pca_.explained_variance_
        self.varprop_ = self.pca_.explained_variance_ratio_
        self.score_std_ = get_score_std(self.scores_)
        logger.debug("Waveform PCA with %d components: varprop=%s", self.components_.shape[0], self.varprop_)
        return self

    def transform(self, X: Union[DiscreteCurves, np.ndarray, List[List[float]]]) -> np.ndarray:
        """Scores of new curves sampled on the training grid."""
        check_is_fitted(self, ["components_", "mean_curve_"])
        values = X.values if isinstance(X, DiscreteCurves) else check_array(X, dtype=np.float64)
        if values.shape[1] != self.mean_curve_.shape[0]:
            raise ValueError(f"X must have {self.mean_curve_.shape[0]} time points, got {values.shape[1]}.")
        return (values - self.mean_curve_) @ self.components_.T

    def inverse_transform(self, scores: np.ndarray) -> np.ndarray:
        """Curves reconstructed from scores, shape (n_subjects, n_time)."""
        check_is_fitted(self, ["components_", "mean_curve_"])
        scores = check_array(scores, dtype=np.float64)
        return self.mean_curve_ + scores @ self.components_

    def perturbation_curves(self, component: int, multiplier: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
        """Mean curve plus and minus `multiplier` score SDs of one component."""
        check_is_fitted(self, ["components_", "score_std_"])
        if not 0 <= component < self.components_.shape[0]:
            raise IndexError(f"component must be in [0, {self.components_.shape[0]}), got {component}.")
        return get_perturbation_curves(self.mean_curve_, self.components_[component], self.score_std_[component], multiplier)
