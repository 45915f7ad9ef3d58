"""Exceptions raised by the numerical core of gaitfpca."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from typing import Optional

import numpy as np


class DomainError(ValueError):
    """Raised when a basis is evaluated outside of its declared range."""


class ConfigError(ValueError):
    """Raised for an invalid basis, operator, penalty or rotation configuration."""


class SingularSystemError(np.linalg.LinAlgError):
    """Raised when the penalized normal equations are not positive definite.

    Parameters
    ----------
    message : str
        Human readable description.
    lam : float, optional
        The smoothing parameter that produced the singular system.
    """

    def __init__(self, message: str, lam: Optional[float] = None):
        super().__init__(message)
        self.lam = lam


class RankDeficiencyError(ValueError):
    """Raised when fewer nonzero eigencomponents exist than were requested.

    Parameters
    ----------
    requested : int
        Number of components requested by the caller.
    available : int
        Number of nonzero eigenvalues of the covariance operator.
    """

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Requested {requested} components but the covariance operator has only {available} nonzero eigenvalues. "
            "Reduce n_components or the number of basis functions, or add subjects."
        )
        self.requested = requested
        self.available = available


class ConvergenceError(RuntimeError):
    """Raised when the Varimax iteration does not converge.

    Parameters
    ----------
    n_iter : int
        Number of sweeps performed before giving up.
    """

    def __init__(self, n_iter: int, max_angle: float):
        super().__init__(f"Varimax rotation did not converge after {n_iter} sweeps (last max angle {max_angle:.3e} rad).")
        self.n_iter = n_iter
        self.max_angle = max_angle


__all__ = [
    "ConfigError",
    "ConvergenceError",
    "DomainError",
    "RankDeficiencyError",
    "SingularSystemError",
]
