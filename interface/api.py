# interface/api.py
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from application.rate_lookup_service import RateLookupService
from core.errors import StoreError
from domain.models import Destination, RateSourceTag
from domain.regimes import EU_PREVIEW_COUNTRIES, EU_REGIME, REGIMES, country_name, normalize_countries
from integration.supabase_store import SupabaseRateStore

api_bp = Blueprint("api", __name__, url_prefix="/api")

# jedna macierz to kraje x materiały zapytań TARIC
MAX_MATRIX_COUNTRIES = len(EU_REGIME.countries)


def _lookup_service() -> RateLookupService:
    # testy podmieniają serwis przez app.extensions
    svc = current_app.extensions.get("rate_lookup_service")
    if svc is None:
        svc = RateLookupService()
        current_app.extensions["rate_lookup_service"] = svc
    return svc


def _rate_store() -> SupabaseRateStore:
    store = current_app.extensions.get("rate_store")
    if store is None:
        store = SupabaseRateStore()
        current_app.extensions["rate_store"] = store
    return store


def _truthy(v) -> bool:
    return str(v or "").strip().lower() in {"1", "true", "yes"}


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})


@api_bp.route("/material-codes")
def material_codes():
    """
    Tabela materiał -> kod taryfowy.

    Parametry:
      ?destination=EU|US (domyślnie EU)
    """
    destination = (request.args.get("destination") or "EU").lower()
    regime = REGIMES.get(destination)
    if regime is None:
        return jsonify({"error": f"Unknown destination '{destination}'"}), 400
    return jsonify(regime.material_table())


@api_bp.route("/eu-rate/<code>/<country>")
def eu_rate(code: str, country: str):
    """Stawka TARIC dla jednego kodu CN i kraju; ?detail=1 dokłada listę miar."""
    if not code.isdigit():
        return jsonify({"error": "Tariff code must be numeric"}), 400
    detail = _truthy(request.args.get("detail"))
    return jsonify(_lookup_service().rate_for(code, country.upper(), detail=detail))


@api_bp.route("/eu-rates")
def eu_rates():
    """
    Macierz stawek UE (kraje x materiały).

    Parametry:
      ?countries=CN,JP (domyślnie kraje testowe prototypu,
                        najwyżej MAX_MATRIX_COUNTRIES kodów ISO alpha-2)
    """
    raw = request.args.get("countries")
    if raw:
        try:
            countries = normalize_countries(c for c in raw.split(",") if c.strip())
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        if not countries:
            return jsonify({"error": "Empty 'countries' parameter"}), 400
        if len(countries) > MAX_MATRIX_COUNTRIES:
            return jsonify({
                "error": f"Too many countries ({len(countries)}), limit is {MAX_MATRIX_COUNTRIES}",
            }), 400
    else:
        countries = EU_PREVIEW_COUNTRIES
    return jsonify(_lookup_service().rate_matrix(countries))


@api_bp.route("/duty-rates")
def duty_rates():
    """
    Zapisane stawki jednej partycji (dashboard / kontekst czatu).

    Parametry:
      ?destination=US|EU (wymagane)
      ?source=WOVE|TARIC (domyślnie źródło reżimu)
    """
    destination = (request.args.get("destination") or "").upper()
    try:
        dest = Destination(destination)
    except ValueError:
        return jsonify({"error": "Missing or unknown 'destination' parameter (US|EU)"}), 400

    source_param = request.args.get("source")
    try:
        source = RateSourceTag(source_param.upper()) if source_param else REGIMES[dest.value.lower()].source
    except ValueError:
        return jsonify({"error": f"Unknown source '{source_param}'"}), 400

    try:
        rows = _rate_store().list_partition(dest, source)
    except StoreError as e:
        current_app.logger.error("duty_rates listing failed: %s", e)
        return jsonify({"error": "Failed to read duty rates", "details": str(e)}), 502

    for row in rows:
        iso = row.get("country_iso")
        if iso:
            row["country_name"] = country_name(iso)

    return jsonify({
        "destination": dest.value,
        "source": source.value,
        "count": len(rows),
        "rates": rows,
    })
