from dataclasses import dataclass, field
from typing import TypeVar

from .events import RegionEvent, WaterReceived, WaterSent

T = TypeVar("T", bound=RegionEvent)


@dataclass
class Region:
    id: str
    water_level: float
    water_need: float
    water_capacity: float
    events: list[RegionEvent] = field(default_factory=list, init=False, repr=False)
    _initial_level: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.water_capacity < 0:
            raise ValueError("water_capacity cannot be negative")
        if self.water_need < 0:
            raise ValueError("water_need cannot be negative")
        if self.water_level < 0:
            raise ValueError("water_level cannot be negative")
        if self.water_level > self.water_capacity:
            raise ValueError("water_level cannot exceed water_capacity")
        self._initial_level = self.water_level

    @property
    def deficit(self) -> float:
        return max(0.0, self.water_need - self.water_level)

    @property
    def headroom(self) -> float:
        return self.water_capacity - self.water_level

    def safe_surplus(self, margin_fraction: float) -> float:
        """Water the region can give away while keeping its need plus a buffer.

        The buffer is ``margin_fraction`` of the region's capacity.
        """
        extra = self.water_level - self.water_need
        buffer = margin_fraction * self.water_capacity
        return max(0.0, extra - buffer)

    def update_water_level(self, delta: float) -> None:
        # Bounds are the caller's responsibility.
        self.water_level += delta

    def receive(self, amount: float, canal_id: str, t: int) -> None:
        self.update_water_level(amount)
        self.events.append(WaterReceived(amount=amount, canal_id=canal_id, t=t))

    def send(self, amount: float, canal_id: str, t: int) -> None:
        self.update_water_level(-amount)
        self.events.append(WaterSent(amount=amount, canal_id=canal_id, t=t))

    def events_of_type(self, event_type: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, event_type)]

    def reset(self) -> None:
        """Restore the initial water level and clear recorded events."""
        self.water_level = self._initial_level
        self.events.clear()
