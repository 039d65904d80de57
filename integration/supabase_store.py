# integration/supabase_store.py
from __future__ import annotations
from typing import Dict, List, Optional
import logging

import requests

from core.config import Config
from core.errors import StoreError
from domain.models import Destination, DutyRateRecord, RateSourceTag

logger = logging.getLogger(__name__)

BODY_LIMIT = 400


class SupabaseRateStore:
    """
    Tabela duty_rates przez PostgREST (Supabase).
    Partycja = (destination, source); przebieg sync czyści ją i wstawia wiersze od nowa.
    Bez batchy i bez transakcji – częściowa podmiana partycji jest możliwa.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        table: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.s = session or requests.Session()
        self.base_url = (base_url or Config.SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else Config.SUPABASE_KEY
        self.table = table or Config.DUTY_RATES_TABLE
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT_SECONDS

    # ----------------- HTTP helpers -----------------

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, minimal: bool = True) -> Dict[str, str]:
        h = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if minimal:
            h["Prefer"] = "return=minimal"
        return h

    @staticmethod
    def _partition_params(destination: Destination, source: RateSourceTag) -> Dict[str, str]:
        return {
            "destination": f"eq.{Destination(destination).value}",
            "source": f"eq.{RateSourceTag(source).value}",
        }

    def _request(self, method: str, what: str, **kwargs) -> requests.Response:
        try:
            r = self.s.request(method, self.table_url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(None, str(e), target=what)
        if not r.ok:
            raise StoreError(r.status_code, r.text[:BODY_LIMIT], target=what)
        return r

    # ----------------- public -----------------

    def clear_partition(self, destination: Destination, source: RateSourceTag) -> None:
        params = self._partition_params(destination, source)
        self._request("DELETE", f"clear {params['destination']}/{params['source']}",
                      params=params, headers=self._headers())
        logger.info("Cleared duty_rates partition destination=%s source=%s",
                    Destination(destination).value, RateSourceTag(source).value)

    def insert(self, record: DutyRateRecord) -> None:
        row = record.as_row()
        self._request("POST", f"insert {row['country_iso']}/{row['material']}",
                      json=row, headers=self._headers())

    def list_partition(self, destination: Destination, source: RateSourceTag) -> List[Dict]:
        params = self._partition_params(destination, source)
        params["select"] = "*"
        params["order"] = "country_iso.asc,material.asc"
        r = self._request("GET", "list", params=params, headers=self._headers(minimal=False))
        try:
            rows = r.json()
        except ValueError:
            raise StoreError(r.status_code, r.text[:BODY_LIMIT], target="list (non-JSON body)")
        return rows if isinstance(rows, list) else []
