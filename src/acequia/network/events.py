from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WaterReceived:
    amount: float  # m³
    canal_id: str
    t: int  # hour


@dataclass(frozen=True, slots=True)
class WaterSent:
    amount: float
    canal_id: str
    t: int


@dataclass(frozen=True, slots=True)
class WaterDrawn:
    amount: float
    canal_id: str
    t: int


@dataclass(frozen=True, slots=True)
class CanalOpened:
    amount: float  # m³ carried during the hour
    flow_rate: float  # m³/s
    t: int


RegionEvent = WaterReceived | WaterSent
SourceEvent = WaterDrawn
CanalEvent = CanalOpened
