from dataclasses import dataclass, replace
from enum import Enum
from typing import Self

from acequia.common import DEFAULT_MARGIN_FRACTION, DEFAULT_MAX_LOOPS, DEFAULT_TOLERANCE


class DonorOrder(Enum):
    NETWORK = "network"  # region insertion order
    LARGEST_SURPLUS = "largest_surplus"  # descending safe surplus, network order breaks ties


@dataclass(frozen=True, slots=True)
class AllocationConfig:
    """Tunables of the hourly greedy allocation.

    Attributes:
        tolerance: Absolute amount below which deficits, surpluses and
            transfers are treated as zero.
        margin_fraction: Fraction of a donor's capacity it keeps on top of
            its own need.
        max_loops: Upper bound on needs dequeued in a single hour.
        donor_order: Order in which donors are scanned for every need.
        set_aside_stalled: When true, a need whose scan moved no water is
            kept out of the queue for the rest of the hour instead of being
            requeued. Off by default, so stuck needs are retried until
            ``max_loops`` ends the hour.
    """

    tolerance: float = DEFAULT_TOLERANCE
    margin_fraction: float = DEFAULT_MARGIN_FRACTION
    max_loops: int = DEFAULT_MAX_LOOPS
    donor_order: DonorOrder = DonorOrder.NETWORK
    set_aside_stalled: bool = False

    def __post_init__(self) -> None:
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if not 0.0 <= self.margin_fraction < 1.0:
            raise ValueError(f"margin_fraction must be in [0.0, 1.0), got {self.margin_fraction}")
        if self.max_loops < 1:
            raise ValueError(f"max_loops must be at least 1, got {self.max_loops}")
        if not isinstance(self.donor_order, DonorOrder):
            raise TypeError(f"donor_order must be a DonorOrder, got {type(self.donor_order).__name__}")

    def with_changes(self, **kwargs: object) -> Self:
        """Create new config with updated fields (immutable)."""
        return replace(self, **kwargs)
