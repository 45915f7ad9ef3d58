"""Functional principal component analysis and Varimax rotation."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from gaitfpca.fpca.fpca_result_class import FPCAResult, RotatedFPCAResult
from gaitfpca.fpca.functional_pca import FunctionalPCA
from gaitfpca.fpca.varimax import varimax, varimax_rotation

__all__ = [
    "FPCAResult",
    "FunctionalPCA",
    "RotatedFPCAResult",
    "varimax",
    "varimax_rotation",
]
