# application/rate_sources.py
from __future__ import annotations
from datetime import date
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional
import logging

from application.measure_resolver import resolve
from core.errors import DutySyncError
from domain.models import Destination, RateSourceTag, ResolvedRate
from domain.regimes import DestinationRegime
from integration.taric_adapter import TaricAdapter
from integration.wove_adapter import WoveAdapter

logger = logging.getLogger(__name__)


class RateSource(ABC):
    """
    Interfejs łańcucha lookupu dla jednego źródła.
      prepare(): raz przed macierzą (np. token).
      fetch(): stawka dla komórki albo None, gdy brak miary (skip).
    """

    tag: RateSourceTag

    def prepare(self) -> None:
        pass

    @abstractmethod
    def fetch(self, tariff_code: str, country: str) -> Optional[ResolvedRate]:
        ...


class TaricRateSource(RateSource):
    tag = RateSourceTag.TARIC

    def __init__(
        self,
        adapter: Optional[TaricAdapter] = None,
        reference_date: Optional[date] = None,
    ) -> None:
        self.adapter = adapter or TaricAdapter()
        self.reference_date = reference_date

    def fetch(self, tariff_code: str, country: str) -> Optional[ResolvedRate]:
        resolved = resolve(self.adapter.lookup(tariff_code, country, self.reference_date))
        return resolved if resolved.found else None


class WoveRateSource(RateSource):
    tag = RateSourceTag.WOVE

    def __init__(
        self,
        adapter: Optional[WoveAdapter] = None,
        destination: Destination = Destination.US,
    ) -> None:
        self.adapter = adapter or WoveAdapter()
        self.destination = Destination(destination)
        self._token: Optional[str] = None

    def prepare(self) -> None:
        # AuthError leci dalej – bez tokenu nie ma sensu iterować
        self._token = self.adapter.authenticate()
        logger.info("Wove token obtained")

    def fetch(self, tariff_code: str, country: str) -> Optional[ResolvedRate]:
        if self._token is None:
            raise DutySyncError("WoveRateSource.fetch called before prepare()")
        return self.adapter.lookup(self._token, tariff_code, country, self.destination.value)


SOURCE_FACTORIES: Dict[RateSourceTag, Callable[[DestinationRegime], RateSource]] = {
    RateSourceTag.TARIC: lambda regime: TaricRateSource(),
    RateSourceTag.WOVE: lambda regime: WoveRateSource(destination=regime.destination),
}


def source_for(regime: DestinationRegime) -> RateSource:
    return SOURCE_FACTORIES[regime.source](regime)
