# domain/regimes.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

import pycountry

from core.config import Config
from domain.models import Destination, MaterialCode, RateSourceTag


def _materials(table: Mapping[str, str]) -> Tuple[MaterialCode, ...]:
    return tuple(MaterialCode(name=name, tariff_code=code) for name, code in table.items())


def normalize_countries(codes) -> Tuple[str, ...]:
    """Normalizuje i sprawdza kody ISO alpha-2 (pycountry)."""
    out = []
    for code in codes:
        iso = code.strip().upper()
        if pycountry.countries.get(alpha_2=iso) is None:
            raise ValueError(f"Unknown ISO alpha-2 country code: {code!r}")
        if iso not in out:
            out.append(iso)
    return tuple(out)


def country_name(iso2: str) -> str:
    country = pycountry.countries.get(alpha_2=iso2.upper())
    if country is None:
        return iso2.upper()
    return getattr(country, "common_name", None) or country.name


@dataclass(frozen=True)
class DestinationRegime:
    """
    Wszystko, co odróżnia przebieg US od EU:
      - lista krajów pochodzenia i tabela materiał -> kod taryfowy,
      - źródło stawek (WOVE / TARIC) = partycja w tabeli duty_rates,
      - odstęp między zapytaniami,
      - ustawienia Config wymagane przed startem.
    """

    destination: Destination
    source: RateSourceTag
    countries: Tuple[str, ...]
    materials: Tuple[MaterialCode, ...]
    delay_seconds: float
    required_settings: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.destination.value.lower()

    def material_table(self) -> Dict[str, str]:
        return {m.name: m.tariff_code for m in self.materials}


US_MATERIALS: Dict[str, str] = {
    "Cigarette Paper": "4813100000",
    "Tipping Paper": "4813200000",
    "Plugwrap": "4813900000",
    "Filter Tow": "5502100000",
    "Filter Rods": "5601220000",
    "Adhesive": "3506910000",
    "Capsules": "3926909990",
    "Plasticizer": "2917125000",
    "Adsorbent": "3802100000",
    "Board Packaging": "4819100000",
    "Paper Packaging": "4819200000",
    "Inner Bundling": "4811900000",
    "Board Inner Frame": "4819100000",
}

# CN (UE) – Adhesive i Plasticizer mają inne podpozycje niż HTS
EU_MATERIALS: Dict[str, str] = {
    "Cigarette Paper": "4813100000",
    "Tipping Paper": "4813200000",
    "Plugwrap": "4813900000",
    "Filter Tow": "5502100000",
    "Filter Rods": "5601220000",
    "Adhesive": "3506911000",
    "Capsules": "3926909990",
    "Plasticizer": "2917120000",
    "Adsorbent": "3802100000",
    "Board Packaging": "4819100000",
    "Paper Packaging": "4819200000",
}

US_COUNTRIES = (
    # spoza UE
    "CN", "MX", "CA", "AU", "CL", "CO", "KR", "SG", "HN", "JP",
    "CH", "GB", "IN", "ID", "VN", "TH", "MY", "BR", "AR", "TR",
    "ZA", "EG", "AE", "NO", "PK", "BD", "LK",
    # UE
    "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
    "DE", "GR", "HU", "IE", "IT", "LV", "LT", "LU", "MT", "NL",
    "PL", "PT", "RO", "SK", "SI", "ES", "SE",
)

# Główni dostawcy spoza UE dla importu do UE
EU_COUNTRIES = (
    "US", "CN", "HK", "JP", "KR", "IN", "ID", "VN", "TH", "MY",
    "PH", "TW", "SG", "AU", "GB", "CH", "NO", "TR", "PK", "BD",
    "LK", "BR", "AR", "MX", "CA", "CL", "CO", "ZA", "EG", "AE",
)

# Kraje testowe prototypu UE (macierz /api/eu-rates)
EU_PREVIEW_COUNTRIES = ("CN", "JP", "DE", "US", "KR", "IN", "VN", "BR", "MX", "TH")


US_REGIME = DestinationRegime(
    destination=Destination.US,
    source=RateSourceTag.WOVE,
    countries=normalize_countries(US_COUNTRIES),
    materials=_materials(US_MATERIALS),
    delay_seconds=Config.WOVE_DELAY_SECONDS,
    required_settings=Config.WOVE_SETTINGS,
)

EU_REGIME = DestinationRegime(
    destination=Destination.EU,
    source=RateSourceTag.TARIC,
    countries=normalize_countries(EU_COUNTRIES),
    materials=_materials(EU_MATERIALS),
    delay_seconds=Config.TARIC_DELAY_SECONDS,
)

REGIMES: Dict[str, DestinationRegime] = {r.key: r for r in (US_REGIME, EU_REGIME)}


def get_regime(name: str) -> DestinationRegime:
    try:
        return REGIMES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown destination regime: {name!r} (expected one of {sorted(REGIMES)})")
