from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import networkx as nx
import numpy as np

from acequia.common import DEFAULT_TOLERANCE

from .canal import Canal
from .region import Region
from .source import WaterSource
from .validation import DuplicateIdError, UnknownReferenceError, ValidationError


def canal_graph(canals: Iterable[Canal], regions: Iterable[str] = ()) -> nx.MultiDiGraph:
    """Directed multigraph of region ids with one edge per canal.

    Edge keys are canal ids and each edge carries its ``canal``. Parallel
    canals keep their iteration order.
    """
    graph = nx.MultiDiGraph()
    graph.add_nodes_from(regions)
    for canal in canals:
        graph.add_edge(canal.source_region, canal.destination_region, key=canal.id, canal=canal)
    return graph


@dataclass
class Network:
    """Regions, water sources and canals plus the simulation clock.

    Entities are stored in insertion-ordered dicts keyed by id. Canals refer
    to regions and sources by id, never by object.
    """

    max_hours: int
    hour: int = 0

    _regions: dict[str, Region] = field(default_factory=dict, init=False, repr=False)
    _sources: dict[str, WaterSource] = field(default_factory=dict, init=False, repr=False)
    _canals: dict[str, Canal] = field(default_factory=dict, init=False, repr=False)
    _graph: nx.MultiDiGraph = field(default_factory=nx.MultiDiGraph, init=False, repr=False)
    _validated: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_hours < 0:
            raise ValueError("max_hours cannot be negative")
        if self.hour < 0:
            raise ValueError("hour cannot be negative")

    def add_region(self, region: Region) -> None:
        if region.id in self._regions:
            raise DuplicateIdError("Region", region.id)
        self._regions[region.id] = region
        self._validated = False

    def add_source(self, source: WaterSource) -> None:
        if source.id in self._sources:
            raise DuplicateIdError("WaterSource", source.id)
        self._sources[source.id] = source
        self._validated = False

    def add_canal(self, canal: Canal) -> None:
        if canal.id in self._canals:
            raise DuplicateIdError("Canal", canal.id)
        self._canals[canal.id] = canal
        self._validated = False

    def validate(self) -> None:
        errors: list[str] = []

        # 1. Canal references
        for canal_id, canal in self._canals.items():
            if canal.source_region not in self._regions:
                errors.append(f"Canal '{canal_id}': source region '{canal.source_region}' does not exist")
            if canal.destination_region not in self._regions:
                errors.append(f"Canal '{canal_id}': destination region '{canal.destination_region}' does not exist")
            if canal.water_source is not None and canal.water_source not in self._sources:
                errors.append(f"Canal '{canal_id}': water source '{canal.water_source}' does not exist")

        if errors:
            raise ValidationError("\n".join(errors))

        # 2. Finite, in-range levels
        for region_id, region in self._regions.items():
            values = np.array([region.water_level, region.water_need, region.water_capacity], dtype=float)
            if not np.all(np.isfinite(values)):
                errors.append(f"Region '{region_id}': water quantities must be finite")
        for source_id, source in self._sources.items():
            if not np.isfinite(source.water_level):
                errors.append(f"WaterSource '{source_id}': water_level is not finite")

        if errors:
            raise ValidationError("\n".join(errors))

        # 3. Topology graph; cycles and disconnected parts are allowed
        self._graph = canal_graph(self._canals.values(), regions=self._regions)

        self._validated = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Network":
        """Build and validate a network from plain data.

        Expected keys: ``max_hours``, optional ``hour``, and lists
        ``regions``, ``sources`` and ``canals`` whose items map directly onto
        the entity constructors.
        """
        network = cls(max_hours=data["max_hours"], hour=data.get("hour", 0))
        for item in data.get("regions", []):
            network.add_region(Region(**item))
        for item in data.get("sources", []):
            network.add_source(WaterSource(**item))
        for item in data.get("canals", []):
            network.add_canal(Canal(**item))
        network.validate()
        return network

    @property
    def regions(self) -> list[Region]:
        return list(self._regions.values())

    @property
    def sources(self) -> list[WaterSource]:
        return list(self._sources.values())

    @property
    def canals(self) -> list[Canal]:
        return list(self._canals.values())

    @property
    def graph(self) -> nx.MultiDiGraph:
        if not self._validated:
            self.validate()
        return self._graph

    @property
    def is_validated(self) -> bool:
        return self._validated

    def region(self, region_id: str) -> Region:
        if region_id not in self._regions:
            raise UnknownReferenceError("Region", region_id)
        return self._regions[region_id]

    def source(self, source_id: str) -> WaterSource:
        if source_id not in self._sources:
            raise UnknownReferenceError("WaterSource", source_id)
        return self._sources[source_id]

    def canal(self, canal_id: str) -> Canal:
        if canal_id not in self._canals:
            raise UnknownReferenceError("Canal", canal_id)
        return self._canals[canal_id]

    def solved(self, tolerance: float = DEFAULT_TOLERANCE) -> bool:
        """True when no region has a deficit above ``tolerance``."""
        return all(r.deficit <= tolerance for r in self._regions.values())

    def next_hour(self) -> None:
        self.hour += 1

    def total_deficit(self) -> float:
        return float(np.sum([r.deficit for r in self._regions.values()]))

    def total_water(self) -> float:
        """Water held by all regions and sources together."""
        stored = [r.water_level for r in self._regions.values()]
        stored.extend(s.water_level for s in self._sources.values())
        return float(np.sum(stored))

    def close_canals(self) -> None:
        for canal in self._canals.values():
            canal.close()

    def reset(self) -> None:
        """Rewind the clock and every entity for a fresh simulation run.

        Preserves topology; restores initial levels and clears all events.
        """
        self.hour = 0
        for region in self._regions.values():
            region.reset()
        for source in self._sources.values():
            source.reset()
        for canal in self._canals.values():
            canal.reset()
