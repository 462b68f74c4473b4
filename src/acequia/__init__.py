"""
acequia

Hour-by-hour redistribution of water between regions connected by canals
fed by finite water sources.

Each simulated hour the regions are split into needy regions (queued by
deficit, largest first) and donors (regions with water to spare beyond their
need and a safety margin). A greedy matcher then moves water from donors to
the neediest regions through connecting canals until deficits are met, the
donors run dry, or no canal connects them.

Classes:
    Network: Container for regions, water sources, canals and the hour counter.
    Region: A demand/supply node with a water level, need and capacity.
    WaterSource: A finite reservoir feeding a canal.
    Canal: A directed link between two regions.
    AllocationConfig: Tolerance, safety margin, loop cap and donor order.
    HourLoopController: Runs the hourly allocation until solved, out of hours or stagnated.
    SimulationResult: Per-hour reports and executed transfers of a run.
"""

from .allocation import HourLoopController, TerminationReason, TopologyIndex, Transfer, simulate
from .config import AllocationConfig, DonorOrder
from .network import Canal, Network, Region, ValidationError, WaterSource
from .result import HourReport, SimulationResult

__all__ = [
    "AllocationConfig",
    "Canal",
    "DonorOrder",
    "HourLoopController",
    "HourReport",
    "Network",
    "Region",
    "SimulationResult",
    "TerminationReason",
    "TopologyIndex",
    "Transfer",
    "ValidationError",
    "WaterSource",
    "simulate",
]

__version__ = "0.1.0"
