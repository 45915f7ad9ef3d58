"""Configure global settings and get information about the working environment."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

# Functional PCA of gait curves (gaitfpca) for Python
# ====================================================
#
# gaitfpca compares classical PCA of discretized waveforms with functional PCA
# of smooth basis-expansion reconstructions, following the workflow of the R fda
# package and the MATLAB fdaM toolbox on knee flexion curves over a gait cycle.
#
# The package includes a B-spline basis with roughness penalties, a penalized
# smoother with GCV selection of the smoothing parameter, functional PCA with
# Varimax rotation and classical waveform PCA. Estimators follow scikit-learn's
# interface and utilities.

import importlib as _importlib
import logging

logger = logging.getLogger(__name__)


# PEP0440 compatible formatted version, see:
# https://www.python.org/dev/peps/pep-0440/
#
# Dev branch marker is: 'X.Y.dev' or 'X.Y.devN' where N is an integer.
# 'X.Y.dev0' is the canonical version of 'X.Y.dev'

__version__ = "0.1.0.dev0"

from gaitfpca.functional_data_generator import FunctionalDataGenerator  # noqa: F401 E402

_submodules = [
    "basis",
    "exceptions",
    "fpca",
    "pca",
    "smooth",
    "utils",
]

__all__ = _submodules + ["FunctionalDataGenerator", "__version__"]


def __dir__():
    return __all__


def __getattr__(name):
    if name in _submodules:
        return _importlib.import_module(f"gaitfpca.{name}")
    else:
        try:
            return globals()[name]
        except KeyError:
            raise AttributeError(f"Module 'gaitfpca' has no attribute '{name}'")
