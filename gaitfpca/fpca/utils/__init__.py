"""Numerical helpers shared by functional PCA and its rotations."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from gaitfpca.fpca.utils.fpca_base_func_utils import (
    get_eigen_analysis_results,
    get_fpca_phi,
    get_principal_axes,
    select_num_pcs_fve,
)

__all__ = [
    "get_eigen_analysis_results",
    "get_fpca_phi",
    "get_principal_axes",
    "select_num_pcs_fve",
]
