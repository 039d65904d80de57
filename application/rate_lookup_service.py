# application/rate_lookup_service.py
from __future__ import annotations
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional
import logging
import time

from application.measure_resolver import display_label, resolve
from core.errors import ParseError, TransportError
from domain.models import CandidateMeasure, RateType, ResolvedRate
from domain.regimes import EU_REGIME, DestinationRegime
from integration.taric_adapter import TaricAdapter

logger = logging.getLogger(__name__)


class RateLookupService:
    """
    Lookupy na żądanie dla API (prototyp UE):
      - pojedyncza komórka (z opcjonalną listą miar),
      - macierz kraje x materiały.
    Błąd lookupu nie leci jako 500 – komórka dostaje typ "Error".
    Macierz robi pauzę po każdej komórce (jak sync), domyślnie tempo reżimu.
    """

    def __init__(
        self,
        taric: Optional[TaricAdapter] = None,
        regime: DestinationRegime = EU_REGIME,
        sleep: Callable[[float], None] = time.sleep,
        delay_seconds: Optional[float] = None,
    ) -> None:
        self._taric = taric or TaricAdapter()
        self._regime = regime
        self._sleep = sleep
        self._delay_seconds = regime.delay_seconds if delay_seconds is None else delay_seconds

    def _lookup(self, code: str, country: str, reference_date: Optional[date]):
        try:
            candidates = self._taric.lookup(code, country, reference_date)
        except (TransportError, ParseError) as e:
            logger.error("Error fetching rate for %s from %s: %s", code, country, e)
            return [], ResolvedRate(rate=None, rate_type=RateType.ERROR, description=str(e))
        return candidates, resolve(candidates)

    @staticmethod
    def _cell(resolved: ResolvedRate) -> Dict:
        return {
            "rate": resolved.rate,
            "type": display_label(resolved.rate_type, detail=True),
            "description": resolved.description or "",
        }

    def rate_for(
        self,
        code: str,
        country: str,
        detail: bool = False,
        reference_date: Optional[date] = None,
    ) -> Dict:
        candidates, resolved = self._lookup(code, country, reference_date)
        payload = self._cell(resolved)
        if detail:
            payload["measures"] = [_measure_dict(c) for c in candidates]
        return payload

    def rate_matrix(
        self,
        countries: Iterable[str],
        reference_date: Optional[date] = None,
    ) -> List[Dict]:
        results: List[Dict] = []
        for country in countries:
            materials = {}
            for material in self._regime.materials:
                _, resolved = self._lookup(material.tariff_code, country, reference_date)
                materials[material.name] = self._cell(resolved)
                if self._delay_seconds > 0:
                    self._sleep(self._delay_seconds)
            results.append({"country": country, "materials": materials})
            logger.info("Fetched rates for %s", country)
        return results


def _measure_dict(c: CandidateMeasure) -> Dict:
    return {"type": c.measure_type, "rate": c.rate, "description": c.description or ""}
