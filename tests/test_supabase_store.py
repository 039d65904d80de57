"""Tests for the Supabase (PostgREST) rate store."""

import pytest
import requests

from conftest import FakeResponse, InMemoryRateStore
from core.errors import StoreError
from domain.models import Destination, DutyRateRecord, RateSourceTag, RateType
from integration.supabase_store import SupabaseRateStore


def _store(session):
    return SupabaseRateStore(
        session=session,
        base_url="https://db.test/",
        api_key="key",
        table="duty_rates",
        timeout=9,
    )


def _record(country="CN", material="Filter Tow", rate=7.5):
    return DutyRateRecord(
        country_iso=country,
        destination=Destination.EU,
        material=material,
        tariff_code="5502100000",
        rate=rate,
        rate_type=RateType.MFN,
        source=RateSourceTag.TARIC,
    )


class TestSupabaseRateStore:

    def test_clear_partition_filters_destination_and_source(self, session):
        session.request.return_value = FakeResponse(204)

        _store(session).clear_partition(Destination.US, RateSourceTag.WOVE)

        args, kwargs = session.request.call_args
        assert args == ("DELETE", "https://db.test/rest/v1/duty_rates")
        assert kwargs["params"] == {"destination": "eq.US", "source": "eq.WOVE"}
        assert kwargs["headers"]["Prefer"] == "return=minimal"
        assert kwargs["headers"]["apikey"] == "key"
        assert kwargs["headers"]["Authorization"] == "Bearer key"
        assert kwargs["timeout"] == 9

    def test_insert_posts_single_row(self, session):
        session.request.return_value = FakeResponse(201)

        _store(session).insert(_record())

        args, kwargs = session.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {
            "country_iso": "CN",
            "destination": "EU",
            "material": "Filter Tow",
            "cn_code": "5502100000",
            "rate": 7.5,
            "rate_type": "MFN",
            "source": "TARIC",
        }

    def test_insert_failure_is_store_error(self, session):
        session.request.return_value = FakeResponse(400, "y" * 900)
        with pytest.raises(StoreError) as exc:
            _store(session).insert(_record())
        assert exc.value.status == 400
        assert len(exc.value.body) == 400

    def test_clear_failure_is_store_error(self, session):
        session.request.return_value = FakeResponse(401, "JWT expired")
        with pytest.raises(StoreError):
            _store(session).clear_partition(Destination.EU, RateSourceTag.TARIC)

    def test_connection_failure_is_store_error(self, session):
        session.request.side_effect = requests.Timeout("read timed out")
        with pytest.raises(StoreError) as exc:
            _store(session).insert(_record())
        assert exc.value.status is None

    def test_list_partition_returns_rows(self, session):
        rows = [{"country_iso": "CN", "material": "Filter Tow", "rate": 7.5}]
        session.request.return_value = FakeResponse(200, json_data=rows)

        assert _store(session).list_partition(Destination.EU, RateSourceTag.TARIC) == rows

        args, kwargs = session.request.call_args
        assert args[0] == "GET"
        assert kwargs["params"]["destination"] == "eq.EU"
        assert kwargs["params"]["order"] == "country_iso.asc,material.asc"
        assert "Prefer" not in kwargs["headers"]


class TestPartitionReplacement:

    def test_clear_then_inserts_leaves_exactly_n_rows(self):
        stale = [_record(country=c).as_row() for c in ("AR", "BR", "CL", "CO", "MX")]
        other = _record(country="CN").as_row()
        other.update(destination="US", source="WOVE")
        store = InMemoryRateStore(rows=stale + [other])

        store.clear_partition(Destination.EU, RateSourceTag.TARIC)
        for country in ("CN", "JP"):
            store.insert(_record(country=country))

        assert len(store.list_partition(Destination.EU, RateSourceTag.TARIC)) == 2
        assert store.list_partition(Destination.US, RateSourceTag.WOVE) == [other]


class TestDutyRateRecord:

    def test_null_rate_is_rejected(self):
        with pytest.raises(ValueError):
            _record(rate=None)
