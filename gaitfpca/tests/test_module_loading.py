import pytest

import gaitfpca


@pytest.fixture
def submodule_list():
    return ["basis", "exceptions", "fpca", "pca", "smooth", "utils"]


def test_gaitfpca(submodule_list):
    gaitfpca_items = set(dir(gaitfpca))
    expected_items = set(submodule_list + ["FunctionalDataGenerator", "__version__"])
    assert gaitfpca_items.issuperset(expected_items)
    assert gaitfpca_items.issubset(expected_items)


def test_import_submodules(submodule_list):
    for submodule in submodule_list:
        module = getattr(gaitfpca, submodule, None)
        assert module is not None
        assert hasattr(module, "__name__")


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        gaitfpca.not_a_submodule
