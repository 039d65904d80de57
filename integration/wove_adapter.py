# integration/wove_adapter.py
from __future__ import annotations
from typing import Any, Dict, Optional
import logging

import requests

from core.config import Config
from core.errors import AuthError, ParseError, TransportError
from domain.models import RateType, ResolvedRate

logger = logging.getLogger(__name__)

TOKEN_PATH = "/api/v1/external/auth/token"
LOOKUP_PATH = "/api/v1/external/tariffs/lookup"

BODY_LIMIT = 400


class WoveAdapter:
    """
    Wove – taryfy importowe USA (JSON).
      authenticate(): client_credentials -> access_token (raz na cały przebieg).
      lookup(): stawka z pierwszeństwem FTA > stawka ogólna (MFN / MFN+Additional).
    Cła dodatkowe (additionalDuties) nie są sumowane – zmieniają tylko etykietę.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.s = session or requests.Session()
        self.base_url = (base_url or Config.WOVE_BASE_URL).rstrip("/")
        self.client_id = client_id if client_id is not None else Config.WOVE_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else Config.WOVE_CLIENT_SECRET
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT_SECONDS

    # ----------------- HTTP helpers -----------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _json_or_none(r: requests.Response) -> Any:
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            return None

    # ----------------- public -----------------

    def authenticate(self) -> str:
        body = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            r = self.s.post(self._url(TOKEN_PATH), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(f"Wove token request failed: {e}")
        if not r.ok:
            raise AuthError(f"Wove token request failed ({r.status_code}): {r.text[:BODY_LIMIT]}")

        data = self._json_or_none(r)
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Wove token response missing access_token")
        return token

    def fetch_lookup(
        self,
        token: str,
        hs_code: str,
        origin_country: str,
        destination_country: str = "US",
    ) -> Dict:
        """Surowa odpowiedź lookup (dict)."""
        params = {
            "hsCode": hs_code,
            "originCountry": origin_country.upper(),
            "destinationCountry": destination_country.upper(),
            "includeFtaOptions": "true",
        }
        try:
            r = self.s.get(
                self._url(LOOKUP_PATH),
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(None, str(e), target="Wove")
        if not r.ok:
            raise TransportError(r.status_code, r.text[:BODY_LIMIT], target="Wove")

        data = self._json_or_none(r)
        if not isinstance(data, dict):
            raise ParseError(f"Wove lookup for {hs_code}/{origin_country} returned non-JSON body: {r.text[:BODY_LIMIT]}")
        return data

    def lookup(
        self,
        token: str,
        hs_code: str,
        origin_country: str,
        destination_country: str = "US",
    ) -> Optional[ResolvedRate]:
        payload = self.fetch_lookup(token, hs_code, origin_country, destination_country)
        return extract_rate(payload)


def extract_rate(payload: Dict) -> Optional[ResolvedRate]:
    """
    Pierwszeństwo:
      1) ftaOptions[0].adValoremRate (również 0) -> FTA
      2) applicableRate.adValoremRate -> MFN albo MFN+Additional (gdy są additionalDuties)
      3) nic -> None (skip, nie błąd)
    """
    if not payload or not payload.get("success") or not payload.get("data"):
        return None
    data = payload["data"]
    if not isinstance(data, dict):
        raise ParseError(f"Wove lookup 'data' is not an object: {type(data).__name__}")

    fta_options = data.get("ftaOptions") or []
    if isinstance(fta_options, list) and fta_options:
        first = fta_options[0]
        if isinstance(first, dict) and first.get("adValoremRate") is not None:
            return ResolvedRate(
                rate=_as_rate(first["adValoremRate"]),
                rate_type=RateType.FTA,
                description=first.get("name") or first.get("agreement"),
            )

    applicable = data.get("applicableRate")
    if isinstance(applicable, dict) and applicable.get("adValoremRate") is not None:
        additional = data.get("additionalDuties")
        has_additional = isinstance(additional, list) and len(additional) > 0
        return ResolvedRate(
            rate=_as_rate(applicable["adValoremRate"]),
            rate_type=RateType.MFN_ADDITIONAL if has_additional else RateType.MFN,
            description=applicable.get("description"),
        )

    return None


def _as_rate(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ParseError(f"Wove adValoremRate is not numeric: {value!r}")
