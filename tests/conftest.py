"""
Pytest fixtures for the duty rate sync tests.

Provides:
- FakeResponse / session mocks for the HTTP adapters
- In-memory rate store with PostgREST partition semantics
- Config credentials fixture
- TARIC XML builders
"""

import json
from unittest.mock import Mock

import pytest

from core.config import Config
from core.errors import StoreError
from domain.models import Destination, RateSourceTag

_MISSING = object()


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=b"", json_data=_MISSING):
        self.status_code = status_code
        if json_data is not _MISSING:
            body = json.dumps(json_data).encode("utf-8")
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.content = body
        self.text = body.decode("utf-8", errors="replace")

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.content)


class InMemoryRateStore:
    """Row store keyed by partition, mimicking clear + single-row insert."""

    def __init__(self, rows=None, fail_on_materials=(), fail_clear=False):
        self.rows = list(rows or [])
        self.fail_on_materials = set(fail_on_materials)
        self.fail_clear = fail_clear
        self.clear_calls = []

    def clear_partition(self, destination, source):
        self.clear_calls.append((Destination(destination).value, RateSourceTag(source).value))
        if self.fail_clear:
            raise StoreError(500, "boom", target="clear")
        self.rows = [
            r for r in self.rows
            if not (r["destination"] == Destination(destination).value
                    and r["source"] == RateSourceTag(source).value)
        ]

    def insert(self, record):
        if record.material in self.fail_on_materials:
            raise StoreError(409, "duplicate key value", target="insert")
        self.rows.append(record.as_row())

    def list_partition(self, destination, source):
        return [
            dict(r) for r in self.rows
            if r["destination"] == Destination(destination).value
            and r["source"] == RateSourceTag(source).value
        ]


def taric_measure(measure_type=None, duty_rate=None, description=None):
    parts = ["<measure>"]
    if measure_type is not None:
        parts.append(f"<measure_type>{measure_type}</measure_type>")
    if duty_rate is not None:
        parts.append(f"<duty_rate>{duty_rate}</duty_rate>")
    if description is not None:
        parts.append(f"<description>{description}</description>")
    parts.append("</measure>")
    return "".join(parts)


def taric_response(*measures):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body><ns2:goodsMeasForWsResponse xmlns:ns2=\"http://goodsNomenclatureForWS.ws.taric.dds.s/\">"
        "<return><result><measures>"
        + "".join(measures)
        + "</measures></result></return>"
        "</ns2:goodsMeasForWsResponse></soap:Body></soap:Envelope>"
    ).encode("utf-8")


@pytest.fixture
def session():
    """requests.Session mock; tests set .post/.get/.request return values."""
    return Mock()


@pytest.fixture
def rate_store():
    return InMemoryRateStore()


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setattr(Config, "SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setattr(Config, "SUPABASE_KEY", "service-key")
    monkeypatch.setattr(Config, "WOVE_CLIENT_ID", "client-id")
    monkeypatch.setattr(Config, "WOVE_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(Config, "RESET_EXISTING", True)
    monkeypatch.setattr(Config, "DRY_RUN", False)
    return Config
