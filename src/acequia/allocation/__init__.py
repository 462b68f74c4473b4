from .classifier import Classification, Need, NeedQueue, classify
from .controller import HourLoopController, SimulationState, TerminationReason, simulate
from .engine import HourOutcome, Transfer, TransferEngine
from .topology import TopologyIndex

__all__ = [
    # Topology
    "TopologyIndex",
    # Classification
    "Classification",
    "Need",
    "NeedQueue",
    "classify",
    # Matching
    "HourOutcome",
    "Transfer",
    "TransferEngine",
    # Hour loop
    "HourLoopController",
    "SimulationState",
    "TerminationReason",
    "simulate",
]
