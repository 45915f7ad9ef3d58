import numpy as np
import pytest
from numpy.testing import assert_allclose
from sklearn.base import clone
from sklearn.exceptions import NotFittedError

from gaitfpca.basis import BSplineBasis, SmoothingSpec
from gaitfpca.exceptions import DomainError, SingularSystemError
from gaitfpca.functional_data_generator import GAIT_TIME
from gaitfpca.smooth import PenalizedBasisSmoother
from gaitfpca.utils import DiscreteCurves



def _curves(n_subjects=5, seed=0):
    rng = np.random.default_rng(seed)
    values = 30.0 + 25.0 * np.sin(2 * np.pi * GAIT_TIME / 100.0) + rng.normal(0.0, 2.0, (n_subjects, GAIT_TIME.size))
    return DiscreteCurves(time=GAIT_TIME, values=values)


def test_interpolation_with_zero_lambda_and_nbasis_equal_to_n():
    curves = _curves()
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=20, norder=4), lam=0.0)
    smoother = PenalizedBasisSmoother(spec).fit(curves)
    assert smoother.coef_.shape == (5, 20)
    assert_allclose(smoother.fitted_values_, curves.values, atol=1e-8)
    assert_allclose(smoother.predict(GAIT_TIME), curves.values, atol=1e-8)
    assert np.isclose(smoother.df_, 20.0)
    assert_allclose(smoother.leverage_, np.ones(20), atol=1e-8)
    assert not smoother.gcv_defined_
    assert np.all(np.isnan(smoother.gcv_))


def test_fit_from_time_and_values():
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=8, norder=4), lam=1.0)
    y = np.sin(2 * np.pi * GAIT_TIME / 100.0)
    smoother = PenalizedBasisSmoother(spec).fit(GAIT_TIME, y)
    assert smoother.coef_.shape == (1, 8)
    assert smoother.fitted_values().shape == (1, 20)
    assert smoother.fd_.names == ("0",)
    assert smoother.gcv_defined_
    assert np.all(smoother.gcv_ > 0)


def test_diagnostics_are_consistent():
    curves = _curves()
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=12, norder=4), lam=10.0)
    smoother = PenalizedBasisSmoother(spec).fit(curves)
    n = curves.n_time
    assert np.isclose(smoother.leverage_.sum(), smoother.df_)
    assert_allclose(smoother.residuals_, curves.values - smoother.fitted_values_)
    assert_allclose(smoother.sse_, np.sum(smoother.residuals_**2, axis=1))
    assert_allclose(smoother.gcv_, n * smoother.sse_ / (n - smoother.df_) ** 2)
    assert smoother.fd_.names == curves.subject_ids


def test_normal_equations_are_satisfied():
    curves = _curves(n_subjects=2)
    basis = BSplineBasis((0, 100), nbasis=10, norder=4)
    spec = SmoothingSpec(basis, lam=5.0)
    weights = np.linspace(0.5, 2.0, curves.n_time)
    smoother = PenalizedBasisSmoother(spec).fit(curves, sample_weight=weights)
    B = basis.evaluate(curves.time)
    lhs = (B.T * weights) @ B + 5.0 * spec.penalty.matrix
    rhs = (B.T * weights) @ curves.values.T
    assert_allclose(lhs @ smoother.coef_.T, rhs, rtol=1e-8, atol=1e-8)


def test_df_is_non_increasing_in_lambda():
    curves = _curves()
    basis = BSplineBasis((0, 100), nbasis=20, norder=4)
    df = [PenalizedBasisSmoother(SmoothingSpec(basis, lam=lam)).fit(curves).df_ for lam in 10.0 ** np.arange(-4, 5)]
    assert np.all(np.diff(df) <= 1e-8)
    assert df[0] <= 20.0 + 1e-8
    assert df[-1] >= 2.0 - 1e-8


def test_huge_lambda_tends_to_linear_fit():
    y = 3.0 + 0.5 * GAIT_TIME + 4.0 * np.sin(GAIT_TIME / 7.0)
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=12, norder=4), lam=1e12)
    smoother = PenalizedBasisSmoother(spec).fit(GAIT_TIME, y)
    slope, intercept = np.polyfit(GAIT_TIME, y, 1)
    assert_allclose(smoother.fitted_values_[0], intercept + slope * GAIT_TIME, atol=1e-3)
    assert np.isclose(smoother.df_, 2.0, atol=1e-3)


def test_more_basis_functions_than_points_without_penalty_is_singular():
    curves = _curves()
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=25, norder=4), lam=0.0)
    with pytest.raises(SingularSystemError) as excinfo:
        PenalizedBasisSmoother(spec).fit(curves)
    assert excinfo.value.lam == 0.0
    # a positive penalty makes the same system solvable
    smoother = PenalizedBasisSmoother(spec.with_lambda(1.0)).fit(curves)
    assert smoother.df_ < 20.0


def test_sample_locations_outside_basis_range():
    spec = SmoothingSpec(BSplineBasis((0, 50), nbasis=8, norder=4), lam=1.0)
    with pytest.raises(DomainError):
        PenalizedBasisSmoother(spec).fit(_curves())


@pytest.mark.parametrize("weights", [np.ones(3), -np.ones(20), np.zeros(20)])
def test_invalid_sample_weight(weights):
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=8, norder=4), lam=1.0)
    with pytest.raises(ValueError):
        PenalizedBasisSmoother(spec).fit(_curves(), sample_weight=weights)


def test_invalid_inputs():
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=8, norder=4), lam=1.0)
    with pytest.raises(ValueError):
        PenalizedBasisSmoother(spec).fit(GAIT_TIME)
    with pytest.raises(ValueError):
        PenalizedBasisSmoother(spec).fit(_curves(), np.ones(20))
    with pytest.raises(ValueError):
        PenalizedBasisSmoother("spec").fit(_curves())


def test_not_fitted_and_clone():
    spec = SmoothingSpec(BSplineBasis((0, 100), nbasis=8, norder=4), lam=1.0)
    smoother = PenalizedBasisSmoother(spec)
    with pytest.raises(NotFittedError):
        smoother.predict([50.0])
    cloned = clone(smoother)
    assert cloned.get_params()["smoothing_spec"] is not None
