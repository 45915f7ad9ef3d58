import pytest

from gaitfpca import FunctionalDataGenerator
from gaitfpca.basis import BSplineBasis, SmoothingSpec
from gaitfpca.smooth import PenalizedBasisSmoother


@pytest.fixture(scope="module")
def knee_basis():
    return BSplineBasis(rangeval=(0, 100), nbasis=20, norder=4)


@pytest.fixture(scope="module")
def knee_curves():
    return FunctionalDataGenerator.knee_flexion(error_var=1.0).generate(39, seed=2024)


@pytest.fixture(scope="module")
def knee_population(knee_basis, knee_curves):
    smoother = PenalizedBasisSmoother(SmoothingSpec(knee_basis, lam=10.0)).fit(knee_curves)
    return smoother.fd_
