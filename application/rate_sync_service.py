# application/rate_sync_service.py
from __future__ import annotations
from typing import Callable, Optional
import logging
import time

from application.rate_sources import RateSource, source_for
from core.config import Config, missing_settings
from core.errors import ConfigError, ParseError, StoreError, TransportError
from domain.models import DutyRateRecord, SyncRunSummary
from domain.regimes import DestinationRegime
from integration.supabase_store import SupabaseRateStore

logger = logging.getLogger(__name__)

# Błędy pojedynczej komórki – liczone, pętla idzie dalej
CELL_ERRORS = (TransportError, ParseError, StoreError)


class RateSyncService:
    """
    Jeden silnik dla wszystkich reżimów (US/Wove, EU/TARIC):
      INIT -> (CLEARING) -> ITERATING(country, material) -> DONE
    Przebieg przerywają tylko ConfigError i AuthError (przed pętlą).
    Brak retry: nieudana komórka zostaje policzona jako error.
    """

    def __init__(
        self,
        store: Optional[SupabaseRateStore] = None,
        source_factory: Callable[[DestinationRegime], RateSource] = source_for,
        sleep: Callable[[float], None] = time.sleep,
        delay_seconds: Optional[float] = None,
    ) -> None:
        self._store = store or SupabaseRateStore()
        self._source_factory = source_factory
        self._sleep = sleep
        self._delay_seconds = delay_seconds

    def _check_settings(self, regime: DestinationRegime) -> None:
        missing = missing_settings(tuple(regime.required_settings) + tuple(Config.STORE_SETTINGS))
        if missing:
            raise ConfigError(missing)

    def run(
        self,
        regime: DestinationRegime,
        reset_existing: Optional[bool] = None,
        dry_run: Optional[bool] = None,
    ) -> SyncRunSummary:
        reset_existing = Config.RESET_EXISTING if reset_existing is None else reset_existing
        dry_run = Config.DRY_RUN if dry_run is None else dry_run
        delay = regime.delay_seconds if self._delay_seconds is None else self._delay_seconds
        destination = regime.destination.value
        source_tag = regime.source.value

        self._check_settings(regime)

        logger.info("Starting %s duty rate sync (source=%s) to Supabase...", destination, source_tag)
        logger.info("Mode: %s", "DRY_RUN" if dry_run else "WRITE")

        source = self._source_factory(regime)
        source.prepare()

        summary = SyncRunSummary()

        if reset_existing:
            logger.info("Clearing existing %s %s rows...", source_tag, destination)
            if not dry_run:
                try:
                    self._store.clear_partition(regime.destination, regime.source)
                except StoreError as e:
                    summary.errors += 1
                    logger.error("Failed to clear %s %s rows: %s", source_tag, destination, e)

        for country in regime.countries:
            logger.info("=== %s ===", country)
            for material in regime.materials:
                self._sync_cell(regime, source, country, material, dry_run, summary)
                if delay > 0:
                    self._sleep(delay)

        logger.info(
            "SUMMARY %s/%s: inserted/prepared=%d skipped=%d errors=%d",
            destination, source_tag, summary.success, summary.skipped, summary.errors,
        )
        return summary

    def _sync_cell(self, regime, source, country, material, dry_run, summary) -> None:
        try:
            resolved = source.fetch(material.tariff_code, country)
            if resolved is None or resolved.rate is None:
                summary.skipped += 1
                logger.info("  SKIP: %s/%s (no applicable measure)", country, material.name)
                return

            if not dry_run:
                self._store.insert(DutyRateRecord(
                    country_iso=country,
                    destination=regime.destination,
                    material=material.name,
                    tariff_code=material.tariff_code,
                    rate=resolved.rate,
                    rate_type=resolved.rate_type,
                    source=regime.source,
                ))
            summary.success += 1
            logger.info("  OK: %s/%s = %s%% (%s)", country, material.name, resolved.rate, resolved.rate_type.value)
        except CELL_ERRORS as e:
            summary.errors += 1
            logger.error("  ERROR: %s/%s (%s) - %s", country, material.name, material.tariff_code, e)
