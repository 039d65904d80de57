# core/errors.py
from typing import Iterable, Optional


class DutySyncError(Exception):
    """Bazowy wyjątek dla lookupów i synchronizacji stawek."""


class ConfigError(DutySyncError):
    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required env vars: {', '.join(self.missing)}")


class AuthError(DutySyncError):
    pass


class _HttpFailure(DutySyncError):
    """Wspólny kształt dla błędów HTTP: status + ucięte body."""

    label = "HTTP request"
    body_limit = 400

    def __init__(self, status: Optional[int], body: str = "", target: str = "") -> None:
        self.status = status
        self.body = (body or "")[: self.body_limit]
        self.target = target
        where = f" for {target}" if target else ""
        status_txt = status if status is not None else "no response"
        super().__init__(f"{self.label} failed ({status_txt}){where}: {self.body}")


class TransportError(_HttpFailure):
    label = "Tariff lookup"


class ParseError(DutySyncError):
    pass


class StoreError(_HttpFailure):
    label = "Supabase request"
