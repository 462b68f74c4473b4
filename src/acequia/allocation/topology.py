from collections.abc import Iterable

import networkx as nx

from acequia.network import Canal, Network, canal_graph


class TopologyIndex:
    """Lookup from an ordered (donor, recipient) region pair to its canals.

    Wraps a canal multigraph as built by :func:`acequia.network.canal_graph`
    and is read-only afterwards. Canals between the same pair keep their
    canal-list order.
    """

    def __init__(self, graph: nx.MultiDiGraph):
        self._graph = graph

    @classmethod
    def from_canals(cls, canals: Iterable[Canal]) -> "TopologyIndex":
        return cls(canal_graph(canals))

    @classmethod
    def from_network(cls, network: Network) -> "TopologyIndex":
        """Reuse the graph the network built during validation."""
        return cls(network.graph)

    def canals_between(self, donor_id: str, recipient_id: str) -> tuple[Canal, ...]:
        links = self._graph.get_edge_data(donor_id, recipient_id)
        if links is None:
            return ()
        return tuple(data["canal"] for data in links.values())

    def donors_of(self, recipient_id: str) -> list[str]:
        """Regions with at least one canal into ``recipient_id``."""
        if recipient_id not in self._graph:
            return []
        return list(self._graph.predecessors(recipient_id))

    def __len__(self) -> int:
        return self._graph.number_of_edges()
