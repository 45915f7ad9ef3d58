"""Containers for discretized curves and helpers shared by PCA and fPCA results."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from sklearn.utils.validation import check_array


@dataclass(frozen=True, eq=False)
class DiscreteCurves:
    """Discretized curves of several subjects sampled on one shared time grid.

    Attributes
    ----------
    time : np.ndarray of shape (n_time,)
        Strictly increasing sample locations (e.g. percentage of the gait cycle).
    values : np.ndarray of shape (n_subjects, n_time)
        One row per subject.
    subject_ids : tuple of str
        Identifier per row of `values`.

    Notes
    -----
    Both arrays are copied and flagged read-only at construction, so a loaded
    dataset cannot be modified in place by downstream code.
    """

    time: np.ndarray
    values: np.ndarray
    subject_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        time = check_array(self.time, ensure_2d=False, dtype=np.float64, copy=True)
        values = check_array(self.values, ensure_2d=False, dtype=np.float64, copy=True)
        if time.ndim != 1:
            raise ValueError("time must be a 1D array.")
        if values.ndim == 1:
            values = values.reshape((1, -1))
        if values.ndim != 2:
            raise ValueError("values must be a 1D or 2D array.")
        if values.shape[1] != time.shape[0]:
            raise ValueError(f"values must have one column per time point, got {values.shape[1]} columns for {time.shape[0]} time points.")
        if time.shape[0] < 2:
            raise ValueError("At least two time points are required.")
        if np.any(np.diff(time) <= 0):
            raise ValueError("time must be strictly increasing.")

        subject_ids = tuple(str(s) for s in self.subject_ids) if len(self.subject_ids) > 0 else tuple(f"subject_{i}" for i in range(values.shape[0]))
        if len(subject_ids) != values.shape[0]:
            raise ValueError(f"subject_ids must have one entry per subject, got {len(subject_ids)} for {values.shape[0]} subjects.")

        time.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "time", time)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "subject_ids", subject_ids)

    @classmethod
    def from_time_major(
        cls,
        time: Union[np.ndarray, List[float]],
        values: Union[np.ndarray, List[List[float]]],
        subject_ids: Optional[Sequence[str]] = None,
    ) -> "DiscreteCurves":
        """Build from a (n_time, n_subjects) matrix, the layout used by the R/MATLAB gait data."""
        values = check_array(values, dtype=np.float64)
        return cls(time=time, values=values.T, subject_ids=tuple(subject_ids) if subject_ids is not None else ())

    @property
    def n_subjects(self) -> int:
        return self.values.shape[0]

    @property
    def n_time(self) -> int:
        return self.time.shape[0]

    def __len__(self) -> int:
        return self.n_subjects

    def __getitem__(self, idx: int) -> Tuple[np.ndarray, np.ndarray]:
        return self.time, self.values[idx]


def get_score_std(scores: np.ndarray) -> np.ndarray:
    """Sample standard deviation (ddof=1) of each column of a score matrix."""
    scores = check_array(scores, dtype=np.float64)
    if scores.shape[0] < 2:
        raise ValueError("At least two subjects are needed to compute score standard deviations.")
    return np.std(scores, axis=0, ddof=1)


def get_perturbation_curves(
    mean_curve: np.ndarray, component: np.ndarray, score_std: float, multiplier: float = 1.0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Mean curve plus and minus a scaled component.

    Parameters
    ----------
    mean_curve : np.ndarray of shape (n_points,)
        Mean curve on some grid.
    component : np.ndarray of shape (n_points,)
        Principal component (or eigenfunction) on the same grid.
    score_std : float
        Standard deviation of the component scores.
    multiplier : float, default=1.0
        Number of standard deviations (1 or 2 are customary).

    Returns
    -------
    plus : np.ndarray of shape (n_points,)
        ``mean_curve + multiplier * score_std * component``.
    minus : np.ndarray of shape (n_points,)
        ``mean_curve - multiplier * score_std * component``.
    """
    mean_curve = np.asarray(mean_curve, dtype=np.float64)
    component = np.asarray(component, dtype=np.float64)
    if mean_curve.shape != component.shape:
        raise ValueError("mean_curve and component must have the same shape.")
    shift = multiplier * float(score_std) * component
    return mean_curve + shift, mean_curve - shift
