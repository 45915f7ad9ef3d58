"""Functions represented as coefficient vectors over a basis."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np
from sklearn.utils.validation import check_array

from gaitfpca.basis.bspline_basis import BSplineBasis


@dataclass(eq=False)
class FittedFunction:
    """A single function ``x(t) = sum_j coefficients[j] * phi_j(t)``.

    Attributes
    ----------
    basis : BSplineBasis
        Basis of the expansion.
    coefficients : np.ndarray of shape (nbasis,)
        Expansion coefficients.
    name : str
        Label of the function (e.g. the subject id it was fitted from).
    """

    basis: BSplineBasis
    coefficients: np.ndarray
    name: str = ""

    def __post_init__(self):
        self.coefficients = check_array(self.coefficients, ensure_2d=False, dtype=np.float64).ravel()
        if self.coefficients.shape[0] != self.basis.nbasis:
            raise ValueError(f"coefficients must have nbasis={self.basis.nbasis} entries, got {self.coefficients.shape[0]}.")

    def evaluate(self, x: Union[np.ndarray, List[float], float], deriv: int = 0) -> np.ndarray:
        """Values (or derivatives) of the function at `x`, shape (n_points,)."""
        return self.basis.evaluate(x, deriv=deriv) @ self.coefficients

    def inner_product(self, other: "FittedFunction") -> float:
        """L2 inner product over the basis range."""
        if self.basis != other.basis:
            raise ValueError("Both functions must be expanded over the same basis.")
        return float(self.coefficients @ self.basis.gram_matrix() @ other.coefficients)


@dataclass(eq=False)
class FunctionalPopulation:
    """Several functions expanded over one shared basis.

    Attributes
    ----------
    basis : BSplineBasis
        Shared basis.
    coefficients : np.ndarray of shape (n_functions, nbasis)
        One row of coefficients per function.
    names : tuple of str
        Label per function; defaults to ``("0", "1", ...)``.
    """

    basis: BSplineBasis
    coefficients: np.ndarray
    names: Tuple[str, ...] = ()

    def __post_init__(self):
        coefficients = check_array(self.coefficients, ensure_2d=False, dtype=np.float64)
        if coefficients.ndim == 1:
            coefficients = coefficients.reshape((1, -1))
        if coefficients.ndim != 2 or coefficients.shape[1] != self.basis.nbasis:
            raise ValueError(f"coefficients must have shape (n_functions, {self.basis.nbasis}), got {coefficients.shape}.")
        self.coefficients = coefficients
        if len(self.names) == 0:
            self.names = tuple(str(i) for i in range(coefficients.shape[0]))
        elif len(self.names) != coefficients.shape[0]:
            raise ValueError(f"names must have one entry per function, got {len(self.names)} for {coefficients.shape[0]} functions.")
        else:
            self.names = tuple(str(s) for s in self.names)

    @property
    def n_functions(self) -> int:
        return self.coefficients.shape[0]

    def __len__(self) -> int:
        return self.n_functions

    def __getitem__(self, idx: int) -> FittedFunction:
        return FittedFunction(self.basis, self.coefficients[idx], self.names[idx])

    def evaluate(self, x: Union[np.ndarray, List[float], float], deriv: int = 0) -> np.ndarray:
        """Evaluate every function at `x`.

        Returns
        -------
        np.ndarray of shape (n_functions, n_points)
        """
        return self.coefficients @ self.basis.evaluate(x, deriv=deriv).T

    def mean(self) -> FittedFunction:
        """Pointwise mean function, i.e. the mean of the coefficient vectors."""
        return FittedFunction(self.basis, np.mean(self.coefficients, axis=0), "mean")

    def center(self) -> "FunctionalPopulation":
        """Population with the mean function subtracted from every member."""
        return FunctionalPopulation(self.basis, self.coefficients - np.mean(self.coefficients, axis=0), self.names)
