"""Generate-or-fallback wrapper around an optional text generator.

Generator services never call a generator directly: they go through a
``TextSynthesizer``, which strips prompt echoes, post-processes list
answers, and substitutes template text on any failure.
"""

import logging
import re
from typing import Callable, List, Optional, Sequence

from app.logging_utils import log_event
from llm_synthesis.adapter import BaseTextGenerator, TextGenerationError
from llm_synthesis.retry import generate_with_retry
from llm_synthesis.schema import GenerationOptions

logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[], Optional[BaseTextGenerator]]

_LIST_SPLIT_PATTERN = re.compile(r"[,.;]")
_MAX_LIST_ITEMS = 3
_MAX_LIST_ITEM_LENGTH = 30


class TextSynthesizer:
    """Wraps a text generator with deterministic template fallback.

    Attributes:
        generated_count: Fields filled from generated text.
        fallback_count: Fields filled from templates.
    """

    def __init__(self, generator: BaseTextGenerator, max_retries: int = 1) -> None:
        self._generator = generator
        self._max_retries = max_retries
        self.generated_count = 0
        self.fallback_count = 0

    def complete(
        self,
        prompt: str,
        options: GenerationOptions,
        fallback: str,
        *,
        strip_trailing_period: bool = False,
        keep_prompt: bool = False,
    ) -> str:
        """Generate a continuation of ``prompt`` or return ``fallback``.

        Args:
            prompt: The prompt string.
            options: Generation caps.
            fallback: Template text used on failure or empty output.
            strip_trailing_period: Drop one trailing ``.`` from the answer.
            keep_prompt: Leave the prompt echo in the answer.

        Returns:
            Generated text with the prompt echo removed, or ``fallback``.
        """
        text = self._generate(prompt, options)
        if text is None:
            return self._fall_back(fallback)

        answer = text.strip() if keep_prompt else text.replace(prompt, "", 1).strip()
        if strip_trailing_period and answer.endswith("."):
            answer = answer[:-1].rstrip()
        if not answer:
            return self._fall_back(fallback)

        self.generated_count += 1
        return answer

    def complete_list(
        self,
        prompt: str,
        options: GenerationOptions,
        fallback: Sequence[str],
    ) -> List[str]:
        """Generate a short list answer or return ``fallback``.

        The answer is split on ``,`` ``.`` ``;``; items must be non-empty
        and shorter than 30 characters, and at most three are kept.
        """
        text = self._generate(prompt, options)
        if text is None:
            return list(self._fall_back(fallback))

        items = [
            item.strip()
            for item in _LIST_SPLIT_PATTERN.split(text.replace(prompt, "", 1))
        ]
        items = [item for item in items if 0 < len(item) < _MAX_LIST_ITEM_LENGTH][:_MAX_LIST_ITEMS]
        if not items:
            return list(self._fall_back(fallback))

        self.generated_count += 1
        return items

    def _generate(self, prompt: str, options: GenerationOptions) -> Optional[str]:
        try:
            return generate_with_retry(
                self._generator,
                prompt,
                options,
                max_retries=self._max_retries,
            )
        except TextGenerationError as exc:
            logger.warning("Text generation failed for prompt %r: %s", prompt, exc)
            return None

    def _fall_back(self, fallback):
        self.fallback_count += 1
        return fallback


def open_synthesizer(
    generator_factory: Optional[GeneratorFactory],
    *,
    component: str,
    max_retries: int = 1,
) -> Optional[TextSynthesizer]:
    """Create a synthesizer from a generator factory.

    Returns ``None`` when no factory is configured, the factory yields no
    generator, or the generator fails to initialise. ``None`` tells the
    caller to use its template-only path without any external call.
    """
    if generator_factory is None:
        return None

    try:
        generator = generator_factory()
    except Exception as exc:  # noqa: BLE001
        # TextGeneratorUnavailableError in the common case
        log_event(
            logger,
            logging.WARNING,
            "text_generator_unavailable",
            component=component,
            error=str(exc),
        )
        return None

    if generator is None:
        return None
    return TextSynthesizer(generator, max_retries=max_retries)
