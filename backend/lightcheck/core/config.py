from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_dotenv() -> None:
    if os.getenv("LIGHTCHECK_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    from dotenv import load_dotenv

    load_dotenv(env_path, override=True)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_non_negative_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def _parse_non_negative_float(value: str | None, default: float = 0.0) -> float:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    env: str
    app_name: str
    cors_origins: list[str]
    queue_backend: str
    queue_url: str | None
    queue_timeout_seconds: int
    classifier_backend: str
    gemini_api_key: str | None
    gemini_model: str
    llm_timeout_seconds: int
    image_relay_url: str | None
    image_timeout_seconds: int
    analysis_workers: int
    status_ttl_seconds: float
    report_filename: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    env = os.getenv("LIGHTCHECK_ENV", "development")
    cors = os.getenv("LIGHTCHECK_CORS_ORIGINS", "http://localhost:3000")
    queue_backend = os.getenv("LIGHTCHECK_QUEUE_BACKEND", "http").strip().lower() or "http"
    queue_timeout_seconds = _parse_non_negative_int(os.getenv("LIGHTCHECK_QUEUE_TIMEOUT_SECONDS"), default=30) or 30
    classifier_backend = os.getenv("LIGHTCHECK_CLASSIFIER_BACKEND", "mock").strip().lower() or "mock"
    llm_timeout_seconds = _parse_non_negative_int(os.getenv("LIGHTCHECK_LLM_TIMEOUT_SECONDS"), default=90) or 90
    image_timeout_seconds = _parse_non_negative_int(os.getenv("LIGHTCHECK_IMAGE_TIMEOUT_SECONDS"), default=30) or 30
    analysis_workers = _parse_non_negative_int(os.getenv("LIGHTCHECK_ANALYSIS_WORKERS"), default=1) or 1
    status_ttl_seconds = _parse_non_negative_float(os.getenv("LIGHTCHECK_STATUS_TTL_SECONDS"), default=5.0)
    report_filename = (
        os.getenv("LIGHTCHECK_REPORT_FILENAME", "").strip() or "Bus_Shelter_Light_Validation_Report.xlsx"
    )

    return Settings(
        env=env,
        app_name="Bus Shelter Light Validator",
        cors_origins=_split_csv(cors),
        queue_backend=queue_backend,
        queue_url=(os.getenv("LIGHTCHECK_QUEUE_URL") or "").strip() or None,
        queue_timeout_seconds=queue_timeout_seconds,
        classifier_backend=classifier_backend,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        llm_timeout_seconds=llm_timeout_seconds,
        image_relay_url=(os.getenv("LIGHTCHECK_IMAGE_RELAY_URL") or "").strip() or None,
        image_timeout_seconds=image_timeout_seconds,
        analysis_workers=analysis_workers,
        status_ttl_seconds=status_ttl_seconds,
        report_filename=report_filename,
    )
