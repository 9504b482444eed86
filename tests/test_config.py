import pytest

from app.config import (
    get_pipeline_settings,
    get_text_generation_settings,
    get_upload_settings,
)

_ENV_NAMES = (
    "CHURN_PERSONA_SPLIT_THRESHOLD",
    "CHURN_PERSONA_SPLIT_RATIO",
    "CHURN_RANDOM_SEED",
    "CHURN_INSIGHT_COUNT",
    "TEXT_GENERATION_BACKEND",
    "TEXT_GENERATION_MODEL",
    "TEXT_GENERATION_MAX_RETRIES",
    "LLM_API_KEY",
    "OPENAI_API_KEY",
    "LLM_BASE_URL",
    "UPLOAD_MAX_BYTES",
    "ANALYZE_INCLUDE_USERS",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    for getter in (get_pipeline_settings, get_text_generation_settings, get_upload_settings):
        getter.cache_clear()
    yield
    for getter in (get_pipeline_settings, get_text_generation_settings, get_upload_settings):
        getter.cache_clear()


class TestPipelineSettings:
    def test_defaults(self):
        settings = get_pipeline_settings()

        assert settings.persona_split_threshold == 10
        assert settings.persona_split_ratio == 0.5
        assert settings.random_seed is None
        assert settings.insight_count == 6

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CHURN_PERSONA_SPLIT_THRESHOLD", "4")
        monkeypatch.setenv("CHURN_PERSONA_SPLIT_RATIO", "0.25")
        monkeypatch.setenv("CHURN_RANDOM_SEED", "99")
        monkeypatch.setenv("CHURN_INSIGHT_COUNT", "8")

        settings = get_pipeline_settings()

        assert settings.persona_split_threshold == 4
        assert settings.persona_split_ratio == 0.25
        assert settings.random_seed == 99
        assert settings.insight_count == 8

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("CHURN_PERSONA_SPLIT_THRESHOLD", "many")
        monkeypatch.setenv("CHURN_PERSONA_SPLIT_RATIO", "1.5")
        monkeypatch.setenv("CHURN_RANDOM_SEED", "abc")

        settings = get_pipeline_settings()

        assert settings.persona_split_threshold == 10
        assert settings.persona_split_ratio == 0.5
        assert settings.random_seed is None

    def test_settings_are_cached(self, monkeypatch):
        first = get_pipeline_settings()
        monkeypatch.setenv("CHURN_INSIGHT_COUNT", "2")

        assert get_pipeline_settings() is first


class TestTextGenerationSettings:
    def test_unknown_backend_is_treated_as_none(self, monkeypatch):
        monkeypatch.setenv("TEXT_GENERATION_BACKEND", "telepathy")

        assert get_text_generation_settings().backend == "none"

    def test_backend_name_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("TEXT_GENERATION_BACKEND", "MOCK")
        monkeypatch.setenv("TEXT_GENERATION_MAX_RETRIES", "-3")

        settings = get_text_generation_settings()

        assert settings.backend == "mock"
        assert settings.max_retries == 0

    def test_openai_key_is_used_when_llm_key_missing(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert get_text_generation_settings().api_key == "sk-test"


class TestUploadSettings:
    def test_defaults(self):
        settings = get_upload_settings()

        assert settings.max_upload_bytes == 10 * 1024 * 1024
        assert settings.include_users_in_response is True

    def test_include_users_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("ANALYZE_INCLUDE_USERS", "false")
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "2048")

        settings = get_upload_settings()

        assert settings.include_users_in_response is False
        assert settings.max_upload_bytes == 2048
