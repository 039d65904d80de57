# domain/models.py
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional


class Destination(str, Enum):
    US = "US"
    EU = "EU"


class RateSourceTag(str, Enum):
    WOVE = "WOVE"
    TARIC = "TARIC"


class RateType(str, Enum):
    FTA = "FTA"
    MFN = "MFN"
    MFN_ADDITIONAL = "MFN+Additional"
    UNKNOWN = "Unknown"
    ERROR = "Error"


@dataclass(frozen=True)
class MaterialCode:
    name: str
    tariff_code: str


@dataclass(frozen=True)
class CandidateMeasure:
    measure_type: int
    rate: float
    description: Optional[str] = None


@dataclass(frozen=True)
class ResolvedRate:
    rate: Optional[float]
    rate_type: RateType
    description: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.rate is not None


@dataclass(frozen=True)
class DutyRateRecord:
    country_iso: str
    destination: Destination
    material: str
    tariff_code: str
    rate: float
    rate_type: RateType
    source: RateSourceTag

    def __post_init__(self) -> None:
        if self.rate is None:
            raise ValueError(f"DutyRateRecord for {self.material}/{self.country_iso} has no rate")

    def as_row(self) -> Dict:
        """Wiersz tabeli duty_rates (kolumna kodu nazywa się cn_code)."""
        return {
            "country_iso": self.country_iso,
            "destination": Destination(self.destination).value,
            "material": self.material,
            "cn_code": self.tariff_code,
            "rate": self.rate,
            "rate_type": RateType(self.rate_type).value,
            "source": RateSourceTag(self.source).value,
        }


@dataclass
class SyncRunSummary:
    success: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def exit_code(self) -> int:
        return 1 if self.errors > 0 else 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)
