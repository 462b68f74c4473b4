import heapq
import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field

from acequia.config import AllocationConfig, DonorOrder
from acequia.network import Region


@dataclass(frozen=True, slots=True)
class Need:
    region: Region
    amount: float  # outstanding deficit, m³


class NeedQueue:
    """Max-priority queue of needs keyed by outstanding deficit.

    Equal deficits pop in insertion order.
    """

    def __init__(self, needs: Iterable[Need] = ()):
        self._heap: list[tuple[float, int, Need]] = []
        self._counter = itertools.count()
        for need in needs:
            self.push(need)

    def push(self, need: Need) -> None:
        heapq.heappush(self._heap, (-need.amount, next(self._counter), need))

    def pop(self) -> Need:
        if not self._heap:
            raise IndexError("pop from an empty NeedQueue")
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Need:
        if not self._heap:
            raise IndexError("peek at an empty NeedQueue")
        return self._heap[0][2]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self):
        return (entry[2] for entry in sorted(self._heap))


@dataclass
class Classification:
    needs: NeedQueue = field(default_factory=NeedQueue)
    donors: list[Region] = field(default_factory=list)


def classify(regions: Iterable[Region], config: AllocationConfig) -> Classification:
    """Split regions into a deficit queue and a donor list.

    A region whose deficit exceeds the tolerance is needy; otherwise it is a
    donor when its safe surplus exceeds the tolerance. No region is both.
    """
    result = Classification()
    surpluses: list[tuple[float, int, Region]] = []

    for position, region in enumerate(regions):
        deficit = region.deficit
        if deficit > config.tolerance:
            result.needs.push(Need(region=region, amount=deficit))
            continue
        surplus = region.safe_surplus(config.margin_fraction)
        if surplus > config.tolerance:
            surpluses.append((surplus, position, region))

    if config.donor_order is DonorOrder.LARGEST_SURPLUS:
        surpluses.sort(key=lambda item: (-item[0], item[1]))
    result.donors = [region for _, _, region in surpluses]
    return result
