DEFAULT_TOLERANCE = 1e-3  # amounts at or below this are negligible
DEFAULT_MARGIN_FRACTION = 0.10  # share of capacity a donor keeps beyond its need
DEFAULT_MAX_LOOPS = 1000  # dequeue operations per hour
SECONDS_PER_HOUR = 3600.0


def hourly_to_rate(volume: float) -> float:
    """Convert an hourly volume (m³) to a volumetric flow rate (m³/s)."""
    return volume / SECONDS_PER_HOUR
