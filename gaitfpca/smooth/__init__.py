"""Smoothing utilities for gaitfpca."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from gaitfpca.smooth.gcv_selection import GCVTable, gcv_lambda_search
from gaitfpca.smooth.penalized_smoother import PenalizedBasisSmoother

__all__ = [
    "GCVTable",
    "PenalizedBasisSmoother",
    "gcv_lambda_search",
]
