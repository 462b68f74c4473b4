from .canal import Canal
from .events import (
    CanalEvent,
    CanalOpened,
    RegionEvent,
    SourceEvent,
    WaterDrawn,
    WaterReceived,
    WaterSent,
)
from .network import Network, canal_graph
from .region import Region
from .source import WaterSource
from .validation import DuplicateIdError, UnknownReferenceError, ValidationError

__all__ = [
    # Events
    "CanalEvent",
    "CanalOpened",
    "RegionEvent",
    "SourceEvent",
    "WaterDrawn",
    "WaterReceived",
    "WaterSent",
    # Errors
    "DuplicateIdError",
    "UnknownReferenceError",
    "ValidationError",
    # Entities
    "Canal",
    "Network",
    "canal_graph",
    "Region",
    "WaterSource",
]
