import pytest

from acequia.config import AllocationConfig
from acequia.network import Network
from acequia.testing import make_canal, make_network, make_region, make_source


@pytest.fixture
def config() -> AllocationConfig:
    return AllocationConfig()


@pytest.fixture
def two_region_network() -> Network:
    """Donor A feeds needy B through a single canal."""
    return make_network(
        make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
        make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
        make_source("res", water_level=100.0),
        make_canal("AB", "A", "B", water_source="res"),
        max_hours=24,
    )


@pytest.fixture
def disconnected_network() -> Network:
    """A donor and a needy region with no canal between them."""
    return make_network(
        make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
        make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
        make_source("res", water_level=100.0),
        make_canal("BA", "B", "A", water_source="res"),
        max_hours=24,
    )
