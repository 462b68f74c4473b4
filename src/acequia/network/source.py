from dataclasses import dataclass, field

from .events import SourceEvent, WaterDrawn


@dataclass
class WaterSource:
    id: str
    water_level: float
    events: list[SourceEvent] = field(default_factory=list, init=False, repr=False)
    _initial_level: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.water_level < 0:
            raise ValueError("water_level cannot be negative")
        self._initial_level = self.water_level

    def update_water_level(self, delta: float) -> None:
        self.water_level += delta

    def draw(self, amount: float, canal_id: str, t: int) -> None:
        self.update_water_level(-amount)
        self.events.append(WaterDrawn(amount=amount, canal_id=canal_id, t=t))

    def reset(self) -> None:
        self.water_level = self._initial_level
        self.events.clear()
