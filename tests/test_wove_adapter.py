"""Tests for the Wove (JSON) tariff adapter."""

import pytest

from conftest import FakeResponse
from core.errors import AuthError, ParseError, TransportError
from domain.models import RateType
from integration.wove_adapter import WoveAdapter, extract_rate


def _adapter(session):
    return WoveAdapter(
        session=session,
        base_url="https://wove.test/",
        client_id="cid",
        client_secret="secret",
        timeout=5,
    )


class TestAuthenticate:

    def test_returns_access_token(self, session):
        session.post.return_value = FakeResponse(200, json_data={"access_token": "tok-1"})

        assert _adapter(session).authenticate() == "tok-1"

        args, kwargs = session.post.call_args
        assert args[0] == "https://wove.test/api/v1/external/auth/token"
        assert kwargs["json"] == {
            "grant_type": "client_credentials",
            "client_id": "cid",
            "client_secret": "secret",
        }
        assert kwargs["timeout"] == 5

    def test_missing_token_is_auth_error(self, session):
        session.post.return_value = FakeResponse(200, json_data={"token_type": "bearer"})
        with pytest.raises(AuthError):
            _adapter(session).authenticate()

    def test_rejected_credentials_is_auth_error(self, session):
        session.post.return_value = FakeResponse(401, json_data={"error": "invalid_client"})
        with pytest.raises(AuthError):
            _adapter(session).authenticate()


class TestLookup:

    def test_request_parameters(self, session):
        session.get.return_value = FakeResponse(200, json_data={"success": False})

        _adapter(session).lookup("tok", "5502100000", "cn")

        args, kwargs = session.get.call_args
        assert args[0] == "https://wove.test/api/v1/external/tariffs/lookup"
        assert kwargs["params"] == {
            "hsCode": "5502100000",
            "originCountry": "CN",
            "destinationCountry": "US",
            "includeFtaOptions": "true",
        }
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}

    def test_http_failure_is_transport_error(self, session):
        session.get.return_value = FakeResponse(429, "Too Many Requests")
        with pytest.raises(TransportError) as exc:
            _adapter(session).lookup("tok", "5502100000", "CN")
        assert exc.value.status == 429

    def test_non_json_body_is_parse_error(self, session):
        session.get.return_value = FakeResponse(200, "<html>gateway</html>")
        with pytest.raises(ParseError):
            _adapter(session).lookup("tok", "5502100000", "CN")


class TestExtractRate:

    def test_zero_fta_option_wins_over_general_rate(self):
        result = extract_rate({
            "success": True,
            "data": {
                "ftaOptions": [{"adValoremRate": 0, "name": "USMCA"}],
                "applicableRate": {"adValoremRate": 7.5},
            },
        })
        assert result.rate == 0
        assert result.rate_type == RateType.FTA

    def test_additional_duties_label_without_summing(self):
        result = extract_rate({
            "success": True,
            "data": {
                "ftaOptions": [],
                "applicableRate": {"adValoremRate": 7.5},
                "additionalDuties": [{"name": "Section 301", "adValoremRate": 25}],
            },
        })
        assert result.rate == 7.5
        assert result.rate_type == RateType.MFN_ADDITIONAL

    def test_general_rate_only_is_mfn(self):
        result = extract_rate({
            "success": True,
            "data": {"applicableRate": {"adValoremRate": 3.2}, "additionalDuties": []},
        })
        assert result.rate == 3.2
        assert result.rate_type == RateType.MFN

    def test_no_rate_is_none(self):
        assert extract_rate({"success": True, "data": {"ftaOptions": [], "applicableRate": {}}}) is None

    def test_unsuccessful_response_is_none(self):
        assert extract_rate({"success": False, "data": {"applicableRate": {"adValoremRate": 1}}}) is None
        assert extract_rate({"success": True}) is None

    def test_non_object_data_is_parse_error(self):
        with pytest.raises(ParseError):
            extract_rate({"success": True, "data": ["unexpected"]})
        with pytest.raises(ParseError):
            extract_rate({"success": True, "data": "maintenance"})

    def test_non_numeric_rate_is_parse_error(self):
        with pytest.raises(ParseError):
            extract_rate({"success": True, "data": {"applicableRate": {"adValoremRate": "free"}}})
