"""Text-generation adapters for persona, story, and insight synthesis.

Provides a base interface, concrete adapters for a local Hugging Face
text-generation pipeline and OpenAI-compatible APIs, and a deterministic
mock for testing. Adapters normalise backend output shapes at the
boundary; callers only ever receive a non-empty string or an exception.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional

from app.config import TextGenerationSettings
from llm_synthesis.extraction import extract_generated_text
from llm_synthesis.schema import GenerationOptions

logger = logging.getLogger(__name__)


class TextGeneratorUnavailableError(RuntimeError):
    """Raised when a text generator cannot be initialised (missing package,
    model download failure, missing credentials)."""


class TextGenerationError(RuntimeError):
    """Raised when a generation call fails or yields no usable text.

    Attributes:
        stage: ``"transport"`` for backend failures, ``"empty_output"``
            when the result shape was unrecognised or blank.
    """

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class BaseTextGenerator(ABC):
    """Abstract base for all text generators."""

    @abstractmethod
    def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate text continuing ``prompt``.

        Args:
            prompt: The prompt string.
            options: Generation caps.

        Returns:
            Non-empty generated text (may include the prompt echo).

        Raises:
            TextGenerationError: On backend failure or unusable output.
        """

    @staticmethod
    def _require_text(result: Any) -> str:
        text = extract_generated_text(result)
        if not text.strip():
            raise TextGenerationError("Generator returned no usable text.", stage="empty_output")
        return text


class HuggingFaceTextGenerator(BaseTextGenerator):
    """Adapter for a local ``transformers`` text-generation pipeline."""

    def __init__(self, model: str = "distilgpt2") -> None:
        """Load the text-generation pipeline.

        Args:
            model: Hugging Face model identifier.

        Raises:
            TextGeneratorUnavailableError: If transformers is missing or the
                model cannot be loaded.
        """
        try:
            from transformers import pipeline  # type: ignore[import-untyped]
        except ImportError as exc:
            raise TextGeneratorUnavailableError(
                "transformers package is required for HuggingFaceTextGenerator. "
                "Install it with: pip install transformers"
            ) from exc

        try:
            self._pipeline = pipeline("text-generation", model=model)
        except Exception as exc:  # noqa: BLE001
            raise TextGeneratorUnavailableError(
                f"Failed to initialise text-generation model '{model}': {exc}"
            ) from exc
        self._model = model

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        try:
            result = self._pipeline(
                prompt,
                max_length=options.max_length,
                num_return_sequences=options.num_return_sequences,
            )
        except Exception as exc:  # noqa: BLE001
            raise TextGenerationError(str(exc), stage="transport") from exc
        return self._require_text(result)


class OpenAITextGenerator(BaseTextGenerator):
    """Adapter for OpenAI-compatible chat completion APIs.

    ``max_length`` maps to ``max_tokens`` and ``num_return_sequences``
    maps to ``n``.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Raises:
            TextGeneratorUnavailableError: If the openai package or an API
                key is missing.
        """
        try:
            from openai import OpenAI  # type: ignore[import-untyped]
        except ImportError as exc:
            raise TextGeneratorUnavailableError(
                "openai package is required for OpenAITextGenerator. "
                "Install it with: pip install openai"
            ) from exc

        if not api_key:
            raise TextGeneratorUnavailableError("No API key configured for OpenAITextGenerator.")

        client_kwargs: dict = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=options.max_length,
                n=options.num_return_sequences,
                stream=False,
            )
        except Exception as exc:  # noqa: BLE001
            raise TextGenerationError(str(exc), stage="transport") from exc

        candidates = [
            {"text": choice.message.content}
            for choice in response.choices
            if choice.message.content
        ]
        return self._require_text(candidates)


class MockTextGenerator(BaseTextGenerator):
    """Deterministic generator returning canned raw results.

    Raw results go through the same shape extraction as real backends,
    so any shape accepted by ``extract_generated_text`` can be used.
    Used for local testing and CI where no model is available.
    """

    def __init__(
        self,
        responses: Optional[Mapping[str, Any]] = None,
        default: Any = None,
        responder: Optional[Callable[[str, GenerationOptions], Any]] = None,
    ) -> None:
        """
        Args:
            responses: Raw results keyed by exact prompt.
            default: Raw result for prompts not in ``responses``. ``None``
                echoes the prompt followed by a fixed sentence.
            responder: Optional callable taking precedence over both.
        """
        self._responses = dict(responses or {})
        self._default = default
        self._responder = responder
        self.prompts: list[str] = []

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        self.prompts.append(prompt)
        if self._responder is not None:
            raw = self._responder(prompt, options)
        elif prompt in self._responses:
            raw = self._responses[prompt]
        elif self._default is not None:
            raw = self._default
        else:
            raw = [{"generated_text": f"{prompt} mock generated text for testing."}]
        return self._require_text(raw)


def build_text_generator(settings: TextGenerationSettings) -> Optional[BaseTextGenerator]:
    """Instantiate the generator selected by ``settings.backend``.

    backend=none        -> None (templates only)
    backend=mock        -> MockTextGenerator
    backend=huggingface -> HuggingFaceTextGenerator
    backend=openai      -> OpenAITextGenerator

    Raises:
        TextGeneratorUnavailableError: If the selected backend cannot start.
    """
    backend = settings.backend
    logger.info("Text generation backend: %s (model=%s)", backend, settings.model)
    if backend == "none":
        return None
    if backend == "mock":
        return MockTextGenerator()
    if backend == "openai":
        return OpenAITextGenerator(
            model=settings.model,
            api_key=settings.api_key,
            base_url=settings.base_url,
        )
    if backend == "huggingface":
        return HuggingFaceTextGenerator(model=settings.model)

    raise TextGeneratorUnavailableError(f"Unknown text-generation backend '{backend}'.")
