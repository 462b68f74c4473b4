from typing import Any

from acequia.network import Canal, Network, Region, WaterSource

__all__ = [
    "make_region",
    "make_source",
    "make_canal",
    "make_network",
]


# --- Factory Functions ---


def make_region(id: str = "region", **overrides: Any) -> Region:
    overrides.setdefault("water_level", 10.0)
    overrides.setdefault("water_need", 10.0)
    overrides.setdefault("water_capacity", 20.0)
    return Region(id=id, **overrides)


def make_source(id: str = "source", **overrides: Any) -> WaterSource:
    overrides.setdefault("water_level", 100.0)
    return WaterSource(id=id, **overrides)


def make_canal(
    id: str,
    source_region: str,
    destination_region: str,
    water_source: str | None = "source",
    **overrides: Any,
) -> Canal:
    return Canal(
        id=id,
        source_region=source_region,
        destination_region=destination_region,
        water_source=water_source,
        **overrides,
    )


# --- Network Builder ---


def make_network(
    *components: Region | WaterSource | Canal,
    max_hours: int = 24,
    validate: bool = True,
) -> Network:
    network = Network(max_hours=max_hours)
    for component in components:
        if isinstance(component, Region):
            network.add_region(component)
        elif isinstance(component, WaterSource):
            network.add_source(component)
        else:
            network.add_canal(component)
    if validate:
        network.validate()
    return network
