"""Configuration loading for Room Inspection."""

from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

LLM_PROVIDERS = ("google", "openai")
STORE_BACKENDS = ("firestore", "memory")


@dataclass(frozen=True)
class AppConfig:
    app_id: str
    store_backend: str
    firestore_project: str | None
    llm_provider: str
    openai_api_key: str | None
    google_api_key: str | None
    openai_model: str
    google_model: str
    requests_per_minute: int
    store_timeout_seconds: float
    llm_timeout_seconds: float
    delete_passphrase: str
    photo_max_width: int
    photo_quality: int
    marker_quality: int
    export_prefix: str
    log_level: str


def load_config() -> AppConfig:
    # override=True ensures the .env file takes precedence over stale shell variables
    load_dotenv(override=True)

    provider = os.getenv("LLM_PROVIDER", "google").lower()
    if provider not in LLM_PROVIDERS:
        raise ValueError(f"LLM_PROVIDER must be one of {', '.join(LLM_PROVIDERS)}, got '{provider}'")

    store_backend = os.getenv("STORE_BACKEND", "firestore").lower()
    if store_backend not in STORE_BACKENDS:
        raise ValueError(f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got '{store_backend}'")

    return AppConfig(
        app_id=os.getenv("APP_ID", "default-app-id"),
        store_backend=store_backend,
        firestore_project=os.getenv("FIRESTORE_PROJECT") or None,
        llm_provider=provider,
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        google_model=os.getenv("GOOGLE_MODEL", "gemini-2.0-flash"),
        requests_per_minute=int(os.getenv("REQUESTS_PER_MINUTE", "60")),
        store_timeout_seconds=float(os.getenv("STORE_TIMEOUT_SECONDS", "15")),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
        delete_passphrase=os.getenv("DELETE_PASSPHRASE", "hoshinoya"),
        photo_max_width=int(os.getenv("PHOTO_MAX_WIDTH", "800")),
        photo_quality=int(os.getenv("PHOTO_QUALITY", "60")),
        marker_quality=int(os.getenv("MARKER_QUALITY", "70")),
        export_prefix=os.getenv("EXPORT_PREFIX", "Inspection"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
