"""Utilities to help with functional data analysis."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT
from gaitfpca.utils.trapz import trapz
from gaitfpca.utils.utility import DiscreteCurves, get_perturbation_curves, get_score_std

__all__ = [
    "DiscreteCurves",
    "get_perturbation_curves",
    "get_score_std",
    "trapz",
]
