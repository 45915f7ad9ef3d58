"""Generalized cross-validation sweep over the smoothing parameter."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
import logging
import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np
from joblib import Parallel, delayed
from sklearn.utils.validation import check_array

from gaitfpca.basis import SmoothingSpec
from gaitfpca.exceptions import ConfigError
from gaitfpca.smooth.penalized_smoother import PenalizedBasisSmoother
from gaitfpca.utils import DiscreteCurves

logger = logging.getLogger(__name__)


@dataclass
class GCVTable:
    """GCV criterion and degrees of freedom for each candidate smoothing parameter.

    Attributes
    ----------
    lambdas : np.ndarray of shape (n_lambdas,)
        Candidate smoothing parameters, in the order they were given.
    gcv : np.ndarray of shape (n_lambdas,)
        GCV criterion summed over curves; NaN where undefined.
    df : np.ndarray of shape (n_lambdas,)
        Effective degrees of freedom of each fit.
    gcv_defined : np.ndarray of shape (n_lambdas,), dtype bool
        False where ``df`` reaches the number of sample points.
    """

    lambdas: np.ndarray
    gcv: np.ndarray
    df: np.ndarray
    gcv_defined: np.ndarray

    def __len__(self) -> int:
        return self.lambdas.shape[0]

    def best_lambda(self) -> float:
        """Smoothing parameter with the smallest defined GCV value.

        Ties resolve to the first candidate in table order.

        Raises
        ------
        ValueError
            If no candidate has a defined GCV value.
        """
        if not np.any(self.gcv_defined):
            raise ValueError("No candidate smoothing parameter has a defined GCV value.")
        gcv = np.where(self.gcv_defined, self.gcv, np.inf)
        return float(self.lambdas[np.argmin(gcv)])

    def rows(self) -> List[Tuple[float, float, float]]:
        """``(lambda, df, gcv)`` triples, convenient for printing or plotting."""
        return list(zip(self.lambdas.tolist(), self.df.tolist(), self.gcv.tolist()))


def _gcv_for_lambda(
    curves: DiscreteCurves, smoothing_spec: SmoothingSpec, lam: float, sample_weight: Optional[np.ndarray]
) -> Tuple[float, float, bool]:
    smoother = PenalizedBasisSmoother(smoothing_spec.with_lambda(lam)).fit(curves, sample_weight=sample_weight)
    return smoother.df_, float(np.sum(smoother.gcv_)), smoother.gcv_defined_


def gcv_lambda_search(
    curves: DiscreteCurves,
    smoothing_spec: SmoothingSpec,
    lambdas: Union[np.ndarray, List[float]],
    sample_weight: Optional[Union[np.ndarray, List[float]]] = None,
    n_jobs: Optional[int] = None,
) -> GCVTable:
    """
    Evaluate the GCV criterion for every candidate smoothing parameter.

    Each candidate is fitted independently with :class:`PenalizedBasisSmoother`
    using the basis and operator of `smoothing_spec` (its own ``lam`` is
    ignored). The criterion for a candidate is the sum over curves of
    ``(n / (n - df))^2 * SSE / n``.

    Parameters
    ----------
    curves : DiscreteCurves
        Curves sampled on a shared grid.
    smoothing_spec : SmoothingSpec
        Basis and roughness operator to use.
    lambdas : array-like of shape (n_lambdas,)
        Strictly positive candidates, in any order. A typical sweep is
        ``10 ** np.arange(-4, 5)``.
    sample_weight : array-like of shape (n_points,), optional
        Observation weights passed to every fit.
    n_jobs : int, optional
        Number of parallel jobs for the independent fits (joblib semantics).

    Returns
    -------
    GCVTable
        One row per candidate, in input order. No candidate is selected; use
        :meth:`GCVTable.best_lambda` to pick one explicitly.

    Warns
    -----
    UserWarning
        For every candidate whose degrees of freedom reach the number of sample
        points; its GCV value is stored as NaN and flagged undefined.
    """
    if not isinstance(curves, DiscreteCurves):
        raise ValueError("curves must be an instance of DiscreteCurves.")
    if not isinstance(smoothing_spec, SmoothingSpec):
        raise ConfigError("smoothing_spec must be an instance of SmoothingSpec.")
    lambdas = check_array(lambdas, ensure_2d=False, dtype=np.float64)
    if lambdas.ndim != 1 or lambdas.size == 0:
        raise ConfigError("lambdas must be a non-empty 1D array.")
    if np.any(lambdas <= 0):
        raise ConfigError("All candidate smoothing parameters must be strictly positive.")

    results = Parallel(n_jobs=n_jobs)(delayed(_gcv_for_lambda)(curves, smoothing_spec, lam, sample_weight) for lam in lambdas)

    df = np.array([r[0] for r in results])
    gcv = np.array([r[1] for r in results])
    gcv_defined = np.array([r[2] for r in results], dtype=bool)
    for lam, d, g, ok in zip(lambdas, df, gcv, gcv_defined):
        logger.debug("lambda=%g df=%.4f gcv=%s", lam, d, g)
        if not ok:
            warnings.warn(
                f"GCV is undefined at lambda={lam:g}: the degrees of freedom ({d:.4f}) reach the number of sample points "
                f"({curves.n_time})."
            )
    return GCVTable(lambdas=lambdas, gcv=gcv, df=df, gcv_defined=gcv_defined)
