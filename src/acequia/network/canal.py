from dataclasses import dataclass, field

from .events import CanalEvent, CanalOpened


@dataclass
class Canal:
    """Directed link moving water from one region to another.

    Regions and the feeding water source are referenced by id. ``is_open``
    and ``flow_rate`` describe the current hour only; the allocation loop
    closes every canal before matching starts.
    """

    id: str
    source_region: str
    destination_region: str
    water_source: str | None = None
    is_open: bool = field(default=False, kw_only=True)
    flow_rate: float = field(default=0.0, kw_only=True)  # m³/s
    events: list[CanalEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if not self.source_region:
            raise ValueError("source_region cannot be empty")
        if not self.destination_region:
            raise ValueError("destination_region cannot be empty")
        if self.source_region == self.destination_region:
            raise ValueError("source_region and destination_region must differ")
        if self.flow_rate < 0:
            raise ValueError("flow_rate cannot be negative")

    def toggle_open(self, is_open: bool) -> None:
        self.is_open = is_open

    def set_flow_rate(self, flow_rate: float) -> None:
        self.flow_rate = flow_rate

    def open(self, amount: float, flow_rate: float, t: int) -> None:
        self.toggle_open(True)
        self.set_flow_rate(flow_rate)
        self.events.append(CanalOpened(amount=amount, flow_rate=flow_rate, t=t))

    def close(self) -> None:
        if self.is_open:
            self.toggle_open(False)
        self.set_flow_rate(0.0)

    def reset(self) -> None:
        self.close()
        self.events.clear()
