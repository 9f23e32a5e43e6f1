"""Settings — one object built at start-up from the environment.

Every variable is prefixed with ``BOUTIQUE_``, e.g. ``BOUTIQUE_DATA_DIR``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from boutique.application.remove_order_line import RepricingPolicy
from boutique.domain.model.value_objects import DEFAULT_CURRENCY
from boutique.domain.model.variant import DEFAULT_LOCALES
from boutique.domain.service.stock_ledger import DEFAULT_MAX_ATTEMPTS

ENV_PREFIX = "BOUTIQUE_"

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_TRUE = {"1", "true", "yes", "on"}


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_tokens(value: str) -> dict[str, str]:
    """Parse ``"token:role,token:role"``; a bare token gets the admin role."""
    tokens: dict[str, str] = {}
    for entry in _split(value):
        token, _, role = entry.partition(":")
        tokens[token.strip()] = (role.strip() or "admin").lower()
    return tokens


@dataclass
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"
    log_json: bool = False
    currency: str = DEFAULT_CURRENCY
    locales: tuple[str, ...] = DEFAULT_LOCALES
    repricing_policy: RepricingPolicy = RepricingPolicy.CATALOG
    ledger_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    reconcile_max_attempts: int = 5
    api_tokens: dict[str, str] = field(default_factory=dict)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    mail_from: str | None = None
    store_name: str = "Wahret Zmen"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        settings = cls()
        if get("DATA_DIR"):
            settings.data_dir = Path(get("DATA_DIR")).expanduser()
        if get("LOG_LEVEL"):
            settings.log_level = get("LOG_LEVEL").upper()
        if get("LOG_JSON"):
            settings.log_json = get("LOG_JSON").lower() in _TRUE
        if get("CURRENCY"):
            settings.currency = get("CURRENCY").upper()
        if get("LOCALES"):
            settings.locales = tuple(_split(get("LOCALES")))
        if get("REPRICING_POLICY"):
            try:
                settings.repricing_policy = RepricingPolicy(get("REPRICING_POLICY").lower())
            except ValueError as exc:
                raise ValueError(
                    f"{ENV_PREFIX}REPRICING_POLICY must be one of "
                    f"{[p.value for p in RepricingPolicy]}"
                ) from exc
        if get("LEDGER_MAX_ATTEMPTS"):
            settings.ledger_max_attempts = int(get("LEDGER_MAX_ATTEMPTS"))
        if get("RECONCILE_MAX_ATTEMPTS"):
            settings.reconcile_max_attempts = int(get("RECONCILE_MAX_ATTEMPTS"))
        if get("API_TOKENS"):
            settings.api_tokens = parse_tokens(get("API_TOKENS"))
        settings.smtp_host = get("SMTP_HOST")
        if get("SMTP_PORT"):
            settings.smtp_port = int(get("SMTP_PORT"))
        settings.smtp_user = get("SMTP_USER")
        settings.smtp_password = get("SMTP_PASSWORD")
        settings.mail_from = get("MAIL_FROM") or settings.smtp_user
        if get("STORE_NAME"):
            settings.store_name = get("STORE_NAME")
        return settings
