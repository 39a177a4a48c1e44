import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level above probability-server/)
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

# Defaults are the canonical fixed values; overrides are for local runs only
PROBABILITY_PORT = int(os.getenv("PROBABILITY_PORT", "5174"))

POWER_BASE_URL = os.getenv(
    "POWER_BASE_URL",
    "https://power.larc.nasa.gov/api/temporal/climatology/point",
)
POWER_TIMEOUT_SECONDS = float(os.getenv("POWER_TIMEOUT_SECONDS", "30"))

# Renewable-energy community, one reference year
POWER_COMMUNITY = "RE"
POWER_START = "20100101"
POWER_END = "20101231"


@dataclass(frozen=True)
class Thresholds:
    """Heuristic cutoffs. Each condition ramps from 0% at the first bound to 100% at the second."""

    very_hot_c: float = 30.0
    very_hot_full_c: float = 35.0
    # Cold ramps downwards: 0% at very_cold_c, 100% at very_cold_full_c
    very_cold_c: float = 0.0
    very_cold_full_c: float = -10.0
    very_windy_ms: float = 8.3  # ~30 km/h
    very_windy_full_ms: float = 12.0
    very_humid_pct: float = 80.0
    very_humid_full_pct: float = 95.0
    rainy_mm: float = 5.0  # mm/day, monthly mean
    rainy_full_mm: float = 15.0
    uncomfortable_hot_weight: float = 0.5
    uncomfortable_humid_weight: float = 0.3
    uncomfortable_windy_weight: float = 0.2

    def __post_init__(self):
        if self.very_cold_full_c >= self.very_cold_c:
            raise ValueError(
                "very_cold_full_c must be colder than very_cold_c "
                f"(got {self.very_cold_full_c} >= {self.very_cold_c})"
            )


THRESHOLDS = Thresholds()
