import numpy as np
import pytest
from numpy.testing import assert_allclose

from gaitfpca.functional_data_generator import GAIT_TIME, FunctionalDataGenerator, knee_flexion_mean
from gaitfpca.utils import DiscreteCurves, trapz


def test_functional_data_generator_happy_path():
    n = 20
    nt = 7
    t = np.linspace(0, 10, nt)
    fdg = FunctionalDataGenerator(t, lambda x: np.sin(0.4 * x), lambda x: 2.0 * np.log(x + 5.5))
    curves = fdg.generate(n, 100)

    assert isinstance(curves, DiscreteCurves)
    assert curves.values.shape == (n, nt)
    assert_allclose(curves.time, t)
    assert np.all(np.isfinite(curves.values))
    assert curves.subject_ids[0] == "subject_0"
    assert 1 <= fdg.get_num_pcs() <= nt
    assert fdg.get_fpca_phi().shape == (nt, fdg.get_num_pcs())


@pytest.mark.parametrize("num_pcs", [1, 2, 3, 4, 5])
def test_functional_data_generator_specific_num_pcs(num_pcs):
    nt = 7
    fdg = FunctionalDataGenerator(np.linspace(0, 10, nt), lambda x: np.sin(0.4 * x), lambda x: 2.0 * np.log(x + 5.5), num_pcs=num_pcs)
    curves = fdg.generate(20, 100)

    assert curves.values.shape == (20, nt)
    assert fdg.get_num_pcs() == num_pcs
    assert fdg.get_fpca_phi().shape == (nt, num_pcs)


def test_fpca_phi_is_orthonormal_under_trapezoidal_rule():
    t = np.linspace(0, 100, 41)
    fdg = FunctionalDataGenerator(t, knee_flexion_mean, lambda x: np.ones_like(x), num_pcs=4)
    phi = fdg.get_fpca_phi()
    gram = np.array([[trapz(phi[:, i] * phi[:, j], t) for j in range(4)] for i in range(4)])
    assert_allclose(gram, np.eye(4), atol=1e-10)
    # signs follow the mean function
    assert np.all(trapz(phi.T * knee_flexion_mean(t), t) >= 0)


@pytest.mark.parametrize("num_pcs", [0, -1, 8, 10])
def test_fdg_num_pcs_invalid(num_pcs):
    t = np.linspace(0, 1, 5)
    with pytest.raises(ValueError, match="num_pcs must be a positive integer between 1 and length of t."):
        FunctionalDataGenerator(t, np.sin, np.abs, num_pcs=num_pcs)


@pytest.mark.parametrize("num_pcs", [float("nan"), "string", [2.5], {"a": 2.5}])
def test_fdg_num_pcs_invalid_types(num_pcs):
    t = np.linspace(0, 1, 5)
    with pytest.raises(ValueError, match="num_pcs must be an integer."):
        FunctionalDataGenerator(t, np.sin, np.abs, num_pcs=num_pcs)


def test_fdg_variation_prop_thresh_invalid():
    t = np.linspace(0, 1, 5)
    with pytest.raises(ValueError):
        FunctionalDataGenerator(t, np.sin, np.abs, variation_prop_thresh=1.0)
    with pytest.raises(ValueError):
        FunctionalDataGenerator(t, np.sin, np.abs, variation_prop_thresh=0.0)
    with pytest.raises(ValueError):
        FunctionalDataGenerator(t, np.sin, np.abs, variation_prop_thresh=-0.1)


@pytest.mark.parametrize(
    "kwargs",
    [{"t": [0.0]}, {"t": [0.0, 0.0, 1.0]}, {"t": [[0.0, 1.0]]}, {"length_scale": 0.0}, {"error_var": -1.0}],
)
def test_fdg_invalid_arguments(kwargs):
    params = {"t": np.linspace(0, 1, 5), "mean_func": np.sin, "var_func": np.abs}
    params.update(kwargs)
    with pytest.raises(ValueError):
        FunctionalDataGenerator(**params)


@pytest.mark.parametrize("n", [0, -3, 2.0])
def test_fdg_generate_invalid_n(n):
    fdg = FunctionalDataGenerator(np.linspace(0, 1, 3), lambda x: x, lambda x: np.ones_like(x))
    with pytest.raises(ValueError, match="n must be a positive integer."):
        fdg.generate(n)


def test_fdg_generate_and_lazy_phi():
    fdg = FunctionalDataGenerator(np.linspace(0, 1, 3), lambda x: x, lambda x: np.ones_like(x))
    # call get_fpca_phi before generate
    phi = fdg.get_fpca_phi()
    curves = fdg.generate(2)
    assert phi.shape[0] == 3
    assert curves.values.shape == (2, 3)


def test_fdg_generate_same_seed():
    fdg = FunctionalDataGenerator(np.linspace(0, 1, 7), lambda x: np.sin(0.4 * x), lambda x: 2.0 * np.log(x + 5.5))
    y1 = fdg.generate(2, seed=123)
    y2 = fdg.generate(2, seed=123)
    y3 = fdg.generate(2, seed=124)
    assert_allclose(y1.values, y2.values)
    assert not np.allclose(y1.values, y3.values)


def test_knee_flexion_generator():
    fdg = FunctionalDataGenerator.knee_flexion(error_var=0.0)
    assert_allclose(fdg.t, GAIT_TIME)
    curves = fdg.generate(500, seed=1)
    assert curves.values.shape == (500, 20)
    # swing-phase peak of the mean curve
    assert np.argmax(curves.values.mean(axis=0)) == np.argmin(np.abs(GAIT_TIME - 72.0))
    assert_allclose(curves.values.mean(axis=0), knee_flexion_mean(GAIT_TIME), atol=2.5)
