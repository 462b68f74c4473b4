import logging
from enum import Enum, auto

from acequia.config import AllocationConfig
from acequia.network import Network
from acequia.result import HourReport, SimulationResult

from .classifier import classify
from .engine import TransferEngine
from .topology import TopologyIndex

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    RUNNING = auto()
    DONE = auto()


class TerminationReason(Enum):
    SOLVED = "solved"  # no region has an outstanding deficit
    MAX_HOURS = "max_hours"  # the hour counter reached network.max_hours
    STAGNATED = "stagnated"  # a full hour passed without a single transfer


class HourLoopController:
    """Drives the hourly allocation until the network is solved, the hour
    budget is spent, or an hour passes without any transfer.

    Stagnation ends the run even when deficits remain: with unchanged state
    the next hour would classify and match exactly the same way.
    """

    def __init__(self, network: Network, config: AllocationConfig | None = None):
        self.network = network
        self.config = config if config is not None else AllocationConfig()
        if not network.is_validated:
            network.validate()
        self.topology = TopologyIndex.from_network(network)
        self.engine = TransferEngine(network, self.topology, self.config)
        self.state = SimulationState.RUNNING
        self.termination: TerminationReason | None = None
        self.reports: list[HourReport] = []

    def step(self) -> HourReport | None:
        """Run one tick. Returns the hour's report, or None once DONE."""
        if self.state is SimulationState.DONE:
            return None

        if self.network.solved(self.config.tolerance):
            self._finish(TerminationReason.SOLVED)
            return None
        if self.network.hour >= self.network.max_hours:
            self._finish(TerminationReason.MAX_HOURS)
            return None

        self.network.close_canals()
        classification = classify(self.network.regions, self.config)
        outcome = self.engine.run(classification)

        if not outcome.transferred:
            self._finish(TerminationReason.STAGNATED)
            return None

        report = HourReport(
            hour=self.network.hour,
            transfers=tuple(outcome.transfers),
            dequeues=outcome.dequeues,
            loop_cap_hit=outcome.loop_cap_hit,
            unmet_deficit=self.network.total_deficit(),
        )
        self.reports.append(report)
        self.network.next_hour()
        return report

    def run(self) -> SimulationResult:
        while self.state is SimulationState.RUNNING:
            self.step()
        return self.result()

    def result(self) -> SimulationResult:
        return SimulationResult(
            termination=self.termination,
            hours_run=len(self.reports),
            reports=tuple(self.reports),
            final_deficit=self.network.total_deficit(),
        )

    def _finish(self, reason: TerminationReason) -> None:
        self.state = SimulationState.DONE
        self.termination = reason
        if reason is TerminationReason.STAGNATED:
            logger.info(
                "Stagnated at hour %d with %.4f m³ of deficit left unmet",
                self.network.hour,
                self.network.total_deficit(),
            )
        else:
            logger.info("Finished at hour %d: %s", self.network.hour, reason.value)


def simulate(network: Network, config: AllocationConfig | None = None) -> SimulationResult:
    """Run the hourly allocation loop on ``network`` to completion."""
    return HourLoopController(network, config).run()
