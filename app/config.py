"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_ALLOWED_TEXT_BACKENDS = {"none", "mock", "huggingface", "openai"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_optional_int_env(name: str) -> int | None:
    raw_value = _get_optional_str_env(name)
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


@dataclass(frozen=True)
class PipelineSettings:
    """
    Runtime settings for the churn scoring and persona pipeline.
    """

    persona_split_threshold: int = 10
    persona_split_ratio: float = 0.5
    random_seed: int | None = None
    insight_count: int = 6


@dataclass(frozen=True)
class TextGenerationSettings:
    """
    Optional text-generation collaborator settings.

    ``backend="none"`` disables generation; every generator then uses
    its deterministic templates.
    """

    backend: str = "none"
    model: str = "distilgpt2"
    max_retries: int = 1
    api_key: str | None = None
    base_url: str | None = None


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits applied to uploaded activity files.
    """

    max_upload_bytes: int = 10 * 1024 * 1024
    include_users_in_response: bool = True


@lru_cache(maxsize=1)
def get_pipeline_settings() -> PipelineSettings:
    """
    Return cached pipeline settings from environment variables.
    """

    ratio = _get_float_env("CHURN_PERSONA_SPLIT_RATIO", 0.5)
    if not 0.0 < ratio < 1.0:
        ratio = 0.5

    return PipelineSettings(
        persona_split_threshold=max(2, _get_int_env("CHURN_PERSONA_SPLIT_THRESHOLD", 10)),
        persona_split_ratio=ratio,
        random_seed=_get_optional_int_env("CHURN_RANDOM_SEED"),
        insight_count=max(1, _get_int_env("CHURN_INSIGHT_COUNT", 6)),
    )


@lru_cache(maxsize=1)
def get_text_generation_settings() -> TextGenerationSettings:
    """
    Return cached text-generation settings from environment variables.

    Unknown backend names are treated as ``none``.
    """

    backend = _get_str_env("TEXT_GENERATION_BACKEND", "none").lower()
    if backend not in _ALLOWED_TEXT_BACKENDS:
        backend = "none"

    return TextGenerationSettings(
        backend=backend,
        model=_get_str_env("TEXT_GENERATION_MODEL", "distilgpt2"),
        max_retries=max(0, _get_int_env("TEXT_GENERATION_MAX_RETRIES", 1)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 10 * 1024 * 1024)),
        include_users_in_response=_get_bool_env("ANALYZE_INCLUDE_USERS", True),
    )

