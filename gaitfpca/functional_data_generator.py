"""Functional Data Generator"""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from math import sqrt
from typing import Callable, Optional, Union

import numpy as np
import scipy.special

from gaitfpca.fpca.utils import get_eigen_analysis_results, get_fpca_phi, select_num_pcs_fve
from gaitfpca.utils import DiscreteCurves, trapz

# 20 equally spaced samples over the gait cycle, in percent, from heel strike to heel strike
GAIT_TIME = np.linspace(0, 100, 20)


def knee_flexion_mean(t: np.ndarray) -> np.ndarray:
    """Typical knee flexion angle (degrees) over a gait cycle given in percent.

    A loading-response bump near 15% and the swing-phase peak near 72%.
    """
    t = np.asarray(t, dtype=np.float64)
    return 5.0 + 15.0 * np.exp(-(((t - 15.0) / 7.0) ** 2)) + 55.0 * np.exp(-(((t - 72.0) / 12.0) ** 2))


def knee_flexion_variance(t: np.ndarray) -> np.ndarray:
    """Between-subject variance of the knee angle, larger during swing."""
    t = np.asarray(t, dtype=np.float64)
    return 36.0 + 64.0 * np.exp(-(((t - 72.0) / 15.0) ** 2))


class FunctionalDataGenerator(object):
    """
    FunctionalDataGenerator
    ========================
    Generates curves on a shared grid from a mean function, a variance function
    and a stationary correlation function. The covariance is decomposed into
    eigenfunctions and the curves are drawn as random combinations of them.

    parameters
    ----------
    t : array_like
        Strictly increasing time points shared by every generated curve.
    mean_func : Callable[[np.ndarray], np.ndarray]
        Mean function evaluated at `t`.
    var_func : Callable[[np.ndarray], np.ndarray]
        Pointwise variance function evaluated at `t`.
    corr_func : Callable[[np.ndarray], np.ndarray], optional
        Correlation as a function of the scaled lag ``|s - t| / length_scale``.
        Defaults to scipy.special.j0 (Bessel function of the first kind).
    length_scale : float, optional, default=10.0
        Scale of the lag passed to `corr_func`, in the units of `t`.
    variation_prop_thresh : float, optional, default=0.999999
        Proportion of variation the retained eigenfunctions must explain; used
        only when `num_pcs` is None.
    num_pcs : int, optional, default=None
        Number of eigenfunctions to retain.
    error_var : float, optional, default=1.0
        Variance of the independent measurement error.
    """

    def __init__(
        self,
        t: np.ndarray,
        mean_func: Callable[[np.ndarray], np.ndarray],
        var_func: Callable[[np.ndarray], np.ndarray],
        corr_func: Callable[[np.ndarray], np.ndarray] = scipy.special.j0,
        length_scale: float = 10.0,
        variation_prop_thresh: float = 0.999999,
        num_pcs: Optional[int] = None,
        error_var: float = 1.0,
    ):
        self.t: np.ndarray = np.asarray(t, dtype=np.float64)
        if self.t.ndim != 1 or self.t.size < 2 or np.any(np.diff(self.t) <= 0):
            raise ValueError("t must be a strictly increasing 1D array with at least two points.")
        self.mean_func: Callable[[np.ndarray], np.ndarray] = mean_func
        self.var_func: Callable[[np.ndarray], np.ndarray] = var_func
        self.corr_func: Callable[[np.ndarray], np.ndarray] = corr_func
        if length_scale <= 0:
            raise ValueError("length_scale must be positive.")
        if not (0 < variation_prop_thresh < 1):
            raise ValueError("variation_prop_thresh must be between 0 and 1.")
        if num_pcs is not None:
            if not isinstance(num_pcs, int):
                raise ValueError("num_pcs must be an integer.")
            if not (1 <= num_pcs <= len(self.t)):
                raise ValueError("num_pcs must be a positive integer between 1 and length of t.")
        if error_var < 0:
            raise ValueError("error_var must be non-negative.")
        self.length_scale: float = float(length_scale)
        self.variation_prop_thresh: float = variation_prop_thresh
        self.error_var: float = error_var
        self._num_pcs: Optional[int] = num_pcs
        self._fpca_phi: Optional[np.ndarray] = None

    @classmethod
    def knee_flexion(cls, t: Optional[Union[np.ndarray, list]] = None, **kwargs) -> "FunctionalDataGenerator":
        """Generator of knee-flexion-like curves over a gait cycle in percent."""
        return cls(GAIT_TIME if t is None else t, knee_flexion_mean, knee_flexion_variance, **kwargs)

    def __calculate_fpca_phi(self):
        corr_mat = self.corr_func(np.abs(self.t.reshape((-1, 1)) - self.t) / self.length_scale)
        # trapezoidal quadrature weights on t
        mass = np.diag(trapz(np.eye(self.t.size), self.t))
        eig_lambda, eig_vector, rank = get_eigen_analysis_results(mass @ corr_mat @ mass, mass)
        if self._num_pcs is None:
            _, self._num_pcs = select_num_pcs_fve(eig_lambda[:rank], self.variation_prop_thresh, max_components=rank)
        self._fpca_phi = get_fpca_phi(eig_vector[:, : self._num_pcs], mass, self.mean_func(self.t))

    def get_fpca_phi(self) -> np.ndarray:
        """Get the functional principal component basis functions.

        Returns
        -------
        fpca_phi : np.ndarray of shape (nt, num_pcs)
            Eigenfunctions on `t`, orthonormal under trapezoidal integration.
        """
        if self._fpca_phi is None:
            self.__calculate_fpca_phi()
        return self._fpca_phi

    def get_num_pcs(self) -> int:
        """Get the number of functional principal components."""
        if self._num_pcs is None:
            self.__calculate_fpca_phi()
        return self._num_pcs

    def generate(self, n: int, seed: Optional[int] = None) -> DiscreteCurves:
        """Generate functional data samples.

        Parameters
        ----------
        n : int
            The number of curves to generate. It must be a positive integer.
        seed : Optional[int], optional
            Random seed for reproducibility. If None, the random number generator will not be seeded.

        Returns
        -------
        DiscreteCurves
            `n` curves on `t`, with ids ``subject_0 .. subject_{n-1}``.
        """
        if not isinstance(n, int) or n <= 0:
            raise ValueError("n must be a positive integer.")
        rng = np.random.default_rng(seed)
        if self._fpca_phi is None:
            self.__calculate_fpca_phi()
        nt = len(self.t)
        fpc_scores = rng.multivariate_normal(np.zeros(self._num_pcs), np.eye(self._num_pcs), n)
        y_mat = (
            np.matmul(fpc_scores, self._fpca_phi.T) * np.sqrt(self.var_func(self.t))
            + rng.normal(0, sqrt(self.error_var), (n, nt))
            + self.mean_func(self.t)
        )
        return DiscreteCurves(time=self.t, values=y_mat)
