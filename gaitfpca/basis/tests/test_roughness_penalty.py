import numpy as np
import pytest
from numpy.testing import assert_allclose

from gaitfpca.basis import BSplineBasis, FittedFunction, FunctionalPopulation, LinearDifferentialOperator, RoughnessPenalty, SmoothingSpec
from gaitfpca.exceptions import ConfigError
from gaitfpca.utils import trapz


@pytest.fixture
def basis():
    return BSplineBasis(rangeval=(0, 1), nbasis=12, norder=4)


def test_operator_defaults():
    op = LinearDifferentialOperator()
    assert op.order == 2
    assert_allclose(op.coefficients, [0.0, 0.0])
    assert repr(op) == "LinearDifferentialOperator(order=2, coefficients=[0.0, 0.0])"


@pytest.mark.parametrize("kwargs", [{"order": -1}, {"order": 1.5}, {"order": 2, "coefficients": [1.0]}, {"order": 1, "coefficients": [np.nan]}])
def test_operator_invalid(kwargs):
    with pytest.raises(ConfigError):
        LinearDifferentialOperator(**kwargs)


def test_second_derivative_penalty_annihilates_lines(basis):
    penalty = RoughnessPenalty(basis).matrix
    assert_allclose(penalty, penalty.T)
    assert np.all(np.linalg.eigvalsh(penalty) > -1e-8 * np.abs(penalty).max())
    ones = np.ones(basis.nbasis)
    greville = np.array([np.mean(basis.knots[j + 1 : j + 4]) for j in range(basis.nbasis)])
    assert_allclose(penalty @ ones, 0.0, atol=1e-8)
    assert_allclose(penalty @ greville, 0.0, atol=1e-8)
    assert np.linalg.matrix_rank(penalty, tol=1e-8 * np.abs(penalty).max()) == basis.nbasis - 2


def test_penalty_matches_numerical_integral(basis):
    coef = np.sin(np.arange(basis.nbasis))
    penalty = RoughnessPenalty(basis, LinearDifferentialOperator(2)).matrix
    grid = np.linspace(0, 1, 40001)
    second = basis.evaluate(grid, deriv=2) @ coef
    assert_allclose(coef @ penalty @ coef, trapz(second**2, grid), rtol=1e-4)


def test_penalty_with_lower_order_terms():
    # L = D^2 + 4 pi^2 I annihilates sin(2 pi t)
    basis = BSplineBasis(rangeval=(0, 1), nbasis=30, norder=4)
    operator = LinearDifferentialOperator(2, [4.0 * np.pi**2, 0.0])
    grid = np.linspace(0, 1, 201)
    coef = np.linalg.lstsq(basis.evaluate(grid), np.sin(2 * np.pi * grid), rcond=None)[0]
    penalty = RoughnessPenalty(basis, operator).matrix
    plain = RoughnessPenalty(basis).matrix
    assert coef @ penalty @ coef < 1e-2 * (coef @ plain @ coef)


def test_penalty_order_too_high():
    basis = BSplineBasis(rangeval=(0, 1), nbasis=6, norder=2)
    with pytest.raises(ConfigError):
        RoughnessPenalty(basis, LinearDifferentialOperator(2))
    assert RoughnessPenalty(basis, LinearDifferentialOperator(1)).matrix.shape == (6, 6)


def test_penalty_invalid_arguments(basis):
    with pytest.raises(ConfigError):
        RoughnessPenalty("basis")
    with pytest.raises(ConfigError):
        RoughnessPenalty(basis, operator=2)


@pytest.mark.parametrize("lam", [-1.0, np.nan, np.inf, "1", True])
def test_smoothing_spec_invalid_lambda(basis, lam):
    with pytest.raises(ConfigError):
        SmoothingSpec(basis, lam=lam)


def test_smoothing_spec_with_lambda_shares_penalty(basis):
    spec = SmoothingSpec(basis, lam=0.0)
    matrix = spec.penalty.matrix
    other = spec.with_lambda(10.0)
    assert other.lam == 10.0
    assert spec.lam == 0.0
    assert other.penalty is spec.penalty
    assert other.penalty.matrix is matrix
    assert other.basis == basis
    assert other.operator.order == 2


def test_fitted_function_and_population(basis):
    coefficients = np.vstack([np.ones(basis.nbasis), 3.0 * np.ones(basis.nbasis)])
    population = FunctionalPopulation(basis, coefficients, names=("a", "b"))
    assert len(population) == 2
    grid = np.linspace(0, 1, 7)
    assert_allclose(population.evaluate(grid), [np.ones(7), 3.0 * np.ones(7)])
    assert_allclose(population.evaluate(grid, deriv=1), 0.0, atol=1e-10)

    mean = population.mean()
    assert isinstance(mean, FittedFunction)
    assert_allclose(mean.evaluate(grid), 2.0 * np.ones(7))
    assert population[1].name == "b"
    assert np.isclose(population[0].inner_product(population[1]), 3.0)
    assert_allclose(population.center().coefficients, [-np.ones(basis.nbasis), np.ones(basis.nbasis)])


def test_population_invalid_shapes(basis):
    with pytest.raises(ValueError):
        FunctionalPopulation(basis, np.ones((2, basis.nbasis + 1)))
    with pytest.raises(ValueError):
        FunctionalPopulation(basis, np.ones((2, basis.nbasis)), names=("only",))
    with pytest.raises(ValueError):
        FittedFunction(basis, np.ones(3))
