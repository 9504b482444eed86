"""
tests/test_text_generation.py

Unit tests for the text-generation boundary: result-shape extraction,
retry on empty output, the generate-or-fallback synthesizer, and
backend selection.
"""

from __future__ import annotations

import pytest

from app.config import TextGenerationSettings
from llm_synthesis.adapter import (
    BaseTextGenerator,
    MockTextGenerator,
    TextGenerationError,
    build_text_generator,
)
from llm_synthesis.extraction import extract_generated_text
from llm_synthesis.retry import TextGenerationExhaustedError, generate_with_retry
from llm_synthesis.schema import GenerationOptions
from llm_synthesis.synthesizer import TextSynthesizer, open_synthesizer

OPTIONS = GenerationOptions(max_length=20)


class _ScriptedGenerator(BaseTextGenerator):
    """Raises or returns scripted outcomes in order."""

    def __init__(self, outcomes: list) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtractGeneratedText:
    @pytest.mark.parametrize(
        "result",
        [
            "hello",
            {"generated_text": "hello"},
            {"generated_text": ["hello", "other"]},
            {"generated_text": [{"text": "hello"}]},
            {"text": "hello"},
            {"sequences": [{"text": "hello"}, {"text": "other"}]},
            ["hello", "other"],
            [{"generated_text": "hello"}],
            [{"text": "hello"}],
        ],
    )
    def test_recognised_shapes(self, result) -> None:
        assert extract_generated_text(result) == "hello"

    @pytest.mark.parametrize("result", [None, 42, {}, [], {"sequences": []}, [{"score": 1}], {"generated_text": 3}])
    def test_unrecognised_shapes_yield_empty_string(self, result) -> None:
        assert extract_generated_text(result) == ""


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestGenerateWithRetry:
    def test_retries_empty_output_then_succeeds(self) -> None:
        generator = _ScriptedGenerator([TextGenerationError("blank", stage="empty_output"), "ok"])

        assert generate_with_retry(generator, "p", OPTIONS, max_retries=1) == "ok"
        assert generator.calls == 2

    def test_transport_errors_are_not_retried(self) -> None:
        generator = _ScriptedGenerator([TextGenerationError("down", stage="transport"), "ok"])

        with pytest.raises(TextGenerationError) as excinfo:
            generate_with_retry(generator, "p", OPTIONS, max_retries=3)

        assert excinfo.value.stage == "transport"
        assert generator.calls == 1

    def test_exhaustion_carries_history(self) -> None:
        errors = [TextGenerationError(f"blank {i}", stage="empty_output") for i in range(3)]
        generator = _ScriptedGenerator(errors)

        with pytest.raises(TextGenerationExhaustedError) as excinfo:
            generate_with_retry(generator, "p", OPTIONS, max_retries=2)

        assert excinfo.value.attempts == 3
        assert excinfo.value.history == errors
        assert excinfo.value.last_error is errors[-1]


# ---------------------------------------------------------------------------
# Synthesizer
# ---------------------------------------------------------------------------


class TestTextSynthesizer:
    def test_complete_strips_prompt_echo_and_trailing_period(self) -> None:
        synthesizer = TextSynthesizer(MockTextGenerator(default="Say: something useful."))

        answer = synthesizer.complete("Say:", OPTIONS, "fallback", strip_trailing_period=True)

        assert answer == "something useful"
        assert synthesizer.generated_count == 1

    def test_complete_keeps_prompt_when_asked(self) -> None:
        synthesizer = TextSynthesizer(MockTextGenerator(default="As Ann, I want speed"))

        assert synthesizer.complete("As Ann, I want", OPTIONS, "fb", keep_prompt=True) == "As Ann, I want speed"

    def test_echo_only_answer_falls_back(self) -> None:
        synthesizer = TextSynthesizer(MockTextGenerator(default="Prompt:"))

        assert synthesizer.complete("Prompt:", OPTIONS, "fallback") == "fallback"
        assert synthesizer.fallback_count == 1

    def test_generator_error_falls_back(self) -> None:
        generator = _ScriptedGenerator([TextGenerationError("down", stage="transport")])
        synthesizer = TextSynthesizer(generator)

        assert synthesizer.complete("p", OPTIONS, "fallback") == "fallback"

    def test_list_answers_are_filtered_and_capped(self) -> None:
        text = "List: one, two; an item that is definitely far too long. three, four"
        synthesizer = TextSynthesizer(MockTextGenerator(default=text))

        assert synthesizer.complete_list("List:", OPTIONS, ("fb",)) == ["one", "two", "three"]

    def test_list_with_no_usable_items_falls_back(self) -> None:
        synthesizer = TextSynthesizer(MockTextGenerator(default="List: ,;."))

        assert synthesizer.complete_list("List:", OPTIONS, ("a", "b")) == ["a", "b"]

    def test_mock_records_prompts(self) -> None:
        generator = MockTextGenerator()
        TextSynthesizer(generator).complete("Hello", OPTIONS, "fb")

        assert generator.prompts == ["Hello"]


class TestOpenSynthesizer:
    def test_no_factory_means_templates_only(self) -> None:
        assert open_synthesizer(None, component="test") is None

    def test_factory_returning_none_means_templates_only(self) -> None:
        assert open_synthesizer(lambda: None, component="test") is None

    def test_factory_failure_is_swallowed(self) -> None:
        def factory():
            raise RuntimeError("cannot load model")

        assert open_synthesizer(factory, component="test") is None


class TestBuildTextGenerator:
    def test_none_backend_disables_generation(self) -> None:
        assert build_text_generator(TextGenerationSettings(backend="none")) is None

    def test_mock_backend(self) -> None:
        assert isinstance(build_text_generator(TextGenerationSettings(backend="mock")), MockTextGenerator)

    def test_unknown_backend_is_unavailable(self) -> None:
        from llm_synthesis.adapter import TextGeneratorUnavailableError

        with pytest.raises(TextGeneratorUnavailableError):
            build_text_generator(TextGenerationSettings(backend="carrier-pigeon"))

    def test_generation_options_validate(self) -> None:
        with pytest.raises(ValueError):
            GenerationOptions(max_length=0)
