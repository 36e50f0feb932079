"""
config.py
=========
Runtime settings, read from the environment (and ``.env`` at the project
root) once per process.

Variables:
  OPENAI_API_KEY        — explanation LLM key; unset disables the LLM call
  OPENAI_BASE_URL       — OpenAI-compatible endpoint
  OPENAI_MODEL          — chat model name
  LLM_TIMEOUT_SECONDS   — hard bound on one explanation call
  LLM_MAX_TOKENS / LLM_TEMPERATURE
  MAX_UPLOAD_MB         — VCF upload cap
  FRONTEND_URL          — extra CORS origin
  LOG_LEVEL
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv  # type: ignore

PROJECT_ROOT = Path(__file__).resolve().parent.parent

API_VERSION = "1.0.0"


def _clean_env(name: str, default: str = "") -> str:
    value = os.getenv(name, default)
    return value.strip().strip('"').strip("'")


def _float_env(name: str, default: float) -> float:
    raw = _clean_env(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    llm_timeout_seconds: float = 15.0
    llm_max_tokens: int = 500
    llm_temperature: float = 0.5
    max_upload_bytes: int = 5 * 1024 * 1024
    cors_origins: Tuple[str, ...] = field(
        default_factory=lambda: ("http://localhost:3000", "http://127.0.0.1:3000")
    )
    log_level: str = "INFO"

    @property
    def llm_enabled(self) -> bool:
        key = self.openai_api_key
        return bool(key) and not key.startswith("your_")


def load_settings() -> Settings:
    """Build Settings from the current environment (loads ``.env`` first)."""
    load_dotenv(PROJECT_ROOT / ".env")

    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    frontend = _clean_env("FRONTEND_URL", "")
    if frontend:
        origins.append(frontend)

    return Settings(
        openai_api_key      = _clean_env("OPENAI_API_KEY", ""),
        openai_base_url     = _clean_env("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        openai_model        = _clean_env("OPENAI_MODEL", "gpt-3.5-turbo"),
        llm_timeout_seconds = _float_env("LLM_TIMEOUT_SECONDS", 15.0),
        llm_max_tokens      = int(_float_env("LLM_MAX_TOKENS", 500)),
        llm_temperature     = _float_env("LLM_TEMPERATURE", 0.5),
        max_upload_bytes    = int(_float_env("MAX_UPLOAD_MB", 5) * 1024 * 1024),
        cors_origins        = tuple(origins),
        log_level           = _clean_env("LOG_LEVEL", "INFO").upper() or "INFO",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
