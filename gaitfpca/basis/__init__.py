"""Basis systems, roughness penalties and basis expansions for gaitfpca."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from gaitfpca.basis.bspline_basis import BSplineBasis
from gaitfpca.basis.functional_data import FittedFunction, FunctionalPopulation
from gaitfpca.basis.roughness_penalty import LinearDifferentialOperator, RoughnessPenalty, SmoothingSpec

__all__ = [
    "BSplineBasis",
    "FittedFunction",
    "FunctionalPopulation",
    "LinearDifferentialOperator",
    "RoughnessPenalty",
    "SmoothingSpec",
]
