# core/config.py
import os
from typing import Iterable, List

from dotenv import load_dotenv

# .env (dev-friendly); .env.local uzupełnia tylko brakujące wartości
load_dotenv()
load_dotenv(dotenv_path=".env.local", override=False)


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


class Config:
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Wove – taryfy USA (JSON, token client_credentials)
    WOVE_BASE_URL = os.environ.get("WOVE_BASE_URL", "https://api.wove.com")
    WOVE_CLIENT_ID = os.environ.get("WOVE_CLIENT_ID", "")
    WOVE_CLIENT_SECRET = os.environ.get("WOVE_CLIENT_SECRET", "")

    # TARIC – taryfy UE (SOAP/XML, bez klucza)
    TARIC_SERVICE_URL = os.environ.get(
        "TARIC_SERVICE_URL",
        "https://ec.europa.eu/taxation_customs/dds2/taric/services/goods",
    )

    # Supabase (PostgREST) – tabela ze stawkami
    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")
    DUTY_RATES_TABLE = os.environ.get("DUTY_RATES_TABLE", "duty_rates")

    # Sync – RESET_EXISTING domyślnie włączony, wyłącza go tylko "false"
    RESET_EXISTING = os.environ.get("RESET_EXISTING", "true").strip().lower() != "false"
    DRY_RUN = _flag("DRY_RUN", "false")

    # HTTP timeout (s) dla każdego zapytania
    REQUEST_TIMEOUT_SECONDS = float(os.environ.get("REQUEST_TIMEOUT_SECONDS", "30"))

    # Odstęp między zapytaniami (s); TARIC toleruje mniej niż Wove
    TARIC_DELAY_SECONDS = float(os.environ.get("TARIC_DELAY_SECONDS", "0.12"))
    WOVE_DELAY_SECONDS = float(os.environ.get("WOVE_DELAY_SECONDS", "0.075"))

    STORE_SETTINGS = ("SUPABASE_URL", "SUPABASE_KEY")
    WOVE_SETTINGS = ("WOVE_CLIENT_ID", "WOVE_CLIENT_SECRET")


def missing_settings(names: Iterable[str]) -> List[str]:
    """Zwraca nazwy ustawień Config, które są puste."""
    return [name for name in names if not getattr(Config, name, None)]
