import logging
from dataclasses import dataclass, field

from acequia.common import hourly_to_rate
from acequia.config import AllocationConfig
from acequia.network import Canal, Network, Region

from .classifier import Classification, Need
from .topology import TopologyIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Transfer:
    hour: int
    canal_id: str
    donor_id: str
    recipient_id: str
    source_id: str
    amount: float  # m³ moved during the hour
    flow_rate: float  # m³/s


@dataclass
class HourOutcome:
    transfers: list[Transfer] = field(default_factory=list)
    dequeues: int = 0
    loop_cap_hit: bool = False
    unmet: list[Need] = field(default_factory=list)

    @property
    def transferred(self) -> bool:
        return bool(self.transfers)

    @property
    def unmet_deficit(self) -> float:
        return sum(need.amount for need in self.unmet)


class TransferEngine:
    """Greedy matcher serving the largest outstanding deficit first.

    Each dequeued need scans the donors in classifier order and drains every
    connecting canal it can, sized by the smallest of the remaining deficit,
    the donor's safe surplus, the feeding source's level and the recipient's
    headroom. Needs that are still short after a full scan go back into the
    queue and may be popped again straight away if they are still the
    largest. Matching stops when either side runs dry or after
    ``config.max_loops`` dequeues. With ``config.set_aside_stalled`` a need
    whose scan moved nothing is parked as unmet instead; surpluses, source
    levels and headroom only shrink within an hour, so it cannot progress
    later anyway.

    Nothing here raises: a missing canal, an empty source or a full recipient
    simply means the candidate is skipped.
    """

    def __init__(self, network: Network, topology: TopologyIndex, config: AllocationConfig):
        self.network = network
        self.topology = topology
        self.config = config

    def run(self, classification: Classification) -> HourOutcome:
        needs = classification.needs
        donors = classification.donors
        outcome = HourOutcome()
        stalled: list[Need] = []

        while needs and donors:
            if outcome.dequeues >= self.config.max_loops:
                outcome.loop_cap_hit = True
                logger.warning(
                    "Hour %d: stopped matching after %d dequeues with %d needs pending",
                    self.network.hour,
                    outcome.dequeues,
                    len(needs),
                )
                break
            need = needs.pop()
            outcome.dequeues += 1

            remaining = self._serve(need, donors, outcome)
            if remaining <= self.config.tolerance:
                continue
            if self.config.set_aside_stalled and remaining >= need.amount:
                stalled.append(need)
            else:
                needs.push(Need(region=need.region, amount=remaining))

        outcome.unmet = stalled + list(needs)
        return outcome

    def _serve(self, need: Need, donors: list[Region], outcome: HourOutcome) -> float:
        target = need.region
        deficit = need.amount

        for donor in donors:
            if donor.safe_surplus(self.config.margin_fraction) <= self.config.tolerance:
                continue
            for canal in self.topology.canals_between(donor.id, target.id):
                amount = self._transferable(canal, donor, target, deficit)
                if amount <= self.config.tolerance:
                    continue
                outcome.transfers.append(self._execute(canal, donor, target, amount))
                deficit -= amount
                if deficit <= self.config.tolerance:
                    return deficit
        return deficit

    def _transferable(self, canal: Canal, donor: Region, target: Region, deficit: float) -> float:
        if canal.water_source is None:
            return 0.0
        source = self.network.source(canal.water_source)
        if source.water_level <= self.config.tolerance:
            return 0.0
        return min(
            deficit,
            donor.safe_surplus(self.config.margin_fraction),
            source.water_level,
            target.headroom,
        )

    def _execute(self, canal: Canal, donor: Region, target: Region, amount: float) -> Transfer:
        hour = self.network.hour
        flow_rate = hourly_to_rate(amount)
        source = self.network.source(canal.water_source)

        canal.open(amount, flow_rate, hour)
        source.draw(amount, canal.id, hour)
        donor.send(amount, canal.id, hour)
        target.receive(amount, canal.id, hour)

        logger.debug("Hour %d: %s -> %s via %s moved %.4f m³", hour, donor.id, target.id, canal.id, amount)
        return Transfer(
            hour=hour,
            canal_id=canal.id,
            donor_id=donor.id,
            recipient_id=target.id,
            source_id=source.id,
            amount=amount,
            flow_rate=flow_rate,
        )
