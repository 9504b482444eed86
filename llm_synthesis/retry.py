"""Retry logic for empty text-generation output.

Retries only when a generator returns no usable text. Does NOT retry on
transport errors; those are raised immediately so callers can fall back.
"""

import logging
from typing import List

from llm_synthesis.adapter import BaseTextGenerator, TextGenerationError
from llm_synthesis.schema import GenerationOptions

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"empty_output"})


class TextGenerationExhaustedError(TextGenerationError):
    """Raised when every attempt returned unusable output.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: The error from the final attempt.
        history: Errors from every failed attempt.
    """

    def __init__(
        self,
        attempts: int,
        last_error: TextGenerationError,
        history: List[TextGenerationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"Text generation failed after {attempts} attempt(s). Last error: {last_error}",
            stage=last_error.stage,
        )


def generate_with_retry(
    generator: BaseTextGenerator,
    prompt: str,
    options: GenerationOptions,
    max_retries: int = 1,
) -> str:
    """Generate text with retry on empty output.

    Args:
        generator: A text generator implementing ``generate(prompt, options)``.
        prompt: The prompt string.
        options: Generation caps forwarded to the generator.
        max_retries: Maximum number of *additional* attempts after the
            first failure. Total attempts = 1 + max_retries.

    Returns:
        The generated text.

    Raises:
        TextGenerationError: If a non-retryable error occurs.
        TextGenerationExhaustedError: If all attempts return unusable output.
    """
    errors: List[TextGenerationError] = []
    total_attempts = 1 + max(0, max_retries)

    for attempt in range(1, total_attempts + 1):
        try:
            text = generator.generate(prompt, options)
            if attempt > 1:
                logger.info("Text generated on attempt %d/%d", attempt, total_attempts)
            return text

        except TextGenerationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise

            errors.append(exc)
            logger.warning(
                "Attempt %d/%d failed at stage '%s': %s",
                attempt,
                total_attempts,
                exc.stage,
                exc,
            )

    raise TextGenerationExhaustedError(
        attempts=total_attempts,
        last_error=errors[-1],
        history=errors,
    )
