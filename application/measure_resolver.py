# application/measure_resolver.py
from __future__ import annotations
from typing import Iterable, Optional

from domain.models import CandidateMeasure, RateType, ResolvedRate

# Typy miar TARIC
TARIFF_PREFERENCE = 142
THIRD_COUNTRY_DUTY = 103

NO_RATE_DESCRIPTION = "No rate found"

# Prezentacja "detail" (endpointy UE) nazywa FTA "Preference"
DETAIL_LABELS = {RateType.FTA: "Preference"}


def _first_of_type(candidates, measure_type: int) -> Optional[CandidateMeasure]:
    for c in candidates:
        if c.measure_type == measure_type:
            return c
    return None


def resolve(candidates: Iterable[CandidateMeasure]) -> ResolvedRate:
    """
    Priorytet: preferencja taryfowa (142) > cło krajów trzecich (103).
    Inne typy miar są ignorowane; przy duplikatach wygrywa pierwszy.
    """
    candidates = list(candidates)

    preference = _first_of_type(candidates, TARIFF_PREFERENCE)
    if preference is not None:
        return ResolvedRate(rate=preference.rate, rate_type=RateType.FTA, description=preference.description)

    third_country = _first_of_type(candidates, THIRD_COUNTRY_DUTY)
    if third_country is not None:
        return ResolvedRate(rate=third_country.rate, rate_type=RateType.MFN, description=third_country.description)

    return ResolvedRate(rate=None, rate_type=RateType.UNKNOWN, description=NO_RATE_DESCRIPTION)


def display_label(rate_type: RateType, detail: bool = False) -> str:
    rate_type = RateType(rate_type)
    if detail:
        return DETAIL_LABELS.get(rate_type, rate_type.value)
    return rate_type.value
