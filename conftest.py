"""
Shared pytest fixtures.

Generator derivation and window tables are pure Python and slow to build,
so the parameter set is created once per session and shared.
"""

import os

import pytest

from curvetree_coin.protocol.curve_tree import SelRerandParameters
from curvetree_coin.protocol.security import RandomnessSource


@pytest.fixture(scope="session")
def randomized_trials():
    """Trial count for randomized soundness tests (CURVETREE_COIN_RANDOMIZED_TRIALS)."""
    return int(os.environ.get("CURVETREE_COIN_RANDOMIZED_TRIALS", "8"))


@pytest.fixture(scope="session")
def sel_rerand_params():
    """Select-and-rerandomize parameters for the Pallas/Vesta cycle."""
    return SelRerandParameters.new()


@pytest.fixture
def rng():
    """Randomness source fixture."""
    return RandomnessSource()
