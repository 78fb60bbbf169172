import pytest

from workshare.config import ModelConfig, get_default_values
from workshare.engine import run_model


@pytest.fixture
def default_values():
    return get_default_values()


@pytest.fixture
def default_config(default_values):
    return ModelConfig.from_values(default_values)


@pytest.fixture(scope="session")
def default_outputs():
    """One full default run, shared since it covers 27 years."""
    return run_model(get_default_values())


@pytest.fixture
def zero_sigma_values(default_values):
    """Defaults with every tier's σ ceiling at zero: no AI anywhere."""
    values = dict(default_values)
    for key in list(values):
        if key.endswith("_maxSigma"):
            values[key] = 0.0
    return values
