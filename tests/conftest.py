import multiprocessing as mp

import numpy as np
import pytest

from mcpricer.config import SimulationParameters
from mcpricer.pricer import EuropeanCallPricer
from mcpricer.seeds import SeedTable


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def small_params():
    """Small, fast parameter set: 64 paths of 50 steps over 4 workers."""
    return SimulationParameters(
        spot_price=100.0,
        risk_free_rate=0.05,
        volatility=0.2,
        strike_price=100.0,
        n_steps=50,
        n_paths=64,
        discount_factor=0.95,
        n_workers=4,
    )


@pytest.fixture
def fixed_seeds():
    """Deterministic seed table matching ``small_params.n_paths``."""
    rng = np.random.default_rng(12345)
    return SeedTable.from_values(rng.integers(0, 2**63, size=64))


@pytest.fixture
def pricer(small_params):
    """Provide a pricer over the small parameter set."""
    return EuropeanCallPricer(small_params, name="TestPricer")
