# integration/taric_adapter.py
from __future__ import annotations
from datetime import date
from typing import List, Optional
from xml.sax.saxutils import escape
import logging
import re
import xml.etree.ElementTree as ET

import requests

from core.config import Config
from core.errors import ParseError, TransportError
from domain.models import CandidateMeasure

logger = logging.getLogger(__name__)

ENVELOPE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" xmlns:tns="http://goodsNomenclatureForWS.ws.taric.dds.s/">
  <soap:Body>
    <tns:goodsMeasForWs>
      <tns:goodsCode>{goods_code}</tns:goodsCode>
      <tns:countryCode>{country_code}</tns:countryCode>
      <tns:referenceDate>{reference_date}</tns:referenceDate>
      <tns:tradeMovement>I</tns:tradeMovement>
    </tns:goodsMeasForWs>
  </soap:Body>
</soap:Envelope>"""

# "12.5 %" / "0.000 % " / ".5 %" – liczba, potem znak %
DUTY_RATE_RE = re.compile(r"^\s*(\d*\.?\d+)\s*%")

BODY_LIMIT = 300


def _local(tag: str) -> str:
    """Nazwa elementu bez namespace ({uri}measure -> measure)."""
    return tag.rsplit("}", 1)[-1].lower()


def _child_text(node: ET.Element, name: str) -> Optional[str]:
    for child in node.iter():
        if child is not node and _local(child.tag) == name:
            return (child.text or "").strip()
    return None


class TaricAdapter:
    """
    Adapter do TARIC (EU DDS2, SOAP goodsMeasForWs).
    - Zapytanie zawsze dla importu (tradeMovement=I) na podaną datę (domyślnie dziś).
    - Zwraca WSZYSTKIE miary z odpowiedzi; wybór stawki robi measure_resolver.
    - Bloki bez measure_type albo duty_rate są pomijane (to nie błąd).
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.s = session or requests.Session()
        self.service_url = service_url or Config.TARIC_SERVICE_URL
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT_SECONDS

    # ----------------- request -----------------

    @staticmethod
    def build_envelope(goods_code: str, country_code: str, reference_date: date) -> str:
        return ENVELOPE_TEMPLATE.format(
            goods_code=escape(goods_code.strip()),
            country_code=escape(country_code.strip().upper()),
            reference_date=reference_date.isoformat(),
        )

    @staticmethod
    def _headers() -> dict:
        return {"Content-Type": "text/xml; charset=utf-8", "SOAPAction": '""'}

    def _post(self, envelope: str) -> bytes:
        try:
            r = self.s.post(
                self.service_url,
                data=envelope.encode("utf-8"),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(None, str(e), target="TARIC")
        if not r.ok:
            raise TransportError(r.status_code, r.text[:BODY_LIMIT], target="TARIC")
        return r.content

    # ----------------- parsing -----------------

    @staticmethod
    def parse_measures(xml_payload) -> List[CandidateMeasure]:
        try:
            root = ET.fromstring(xml_payload)
        except ET.ParseError as e:
            raise ParseError(f"TARIC response is not valid XML: {e}")

        measures: List[CandidateMeasure] = []
        for node in root.iter():
            if _local(node.tag) != "measure":
                continue
            parsed = _parse_measure(node)
            if parsed is not None:
                measures.append(parsed)
        return measures

    # ----------------- public -----------------

    def lookup(
        self,
        goods_code: str,
        country_code: str,
        reference_date: Optional[date] = None,
    ) -> List[CandidateMeasure]:
        ref = reference_date or date.today()
        envelope = self.build_envelope(goods_code, country_code, ref)
        payload = self._post(envelope)
        measures = self.parse_measures(payload)
        logger.debug(
            "TARIC %s/%s @%s -> %d measure(s)", goods_code, country_code, ref.isoformat(), len(measures)
        )
        return measures


def _parse_measure(node: ET.Element) -> Optional[CandidateMeasure]:
    type_txt = _child_text(node, "measure_type")
    rate_txt = _child_text(node, "duty_rate")
    if not type_txt or not rate_txt or not type_txt.isdigit():
        return None
    m = DUTY_RATE_RE.match(rate_txt)
    if not m:
        return None
    description = _child_text(node, "description") or None
    return CandidateMeasure(measure_type=int(type_txt), rate=float(m.group(1)), description=description)
