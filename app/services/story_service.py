"""
app/services/story_service.py

User story generation: one story per persona.

Priority follows the persona segment (atrisk -> high, power -> medium,
occasional -> low). Story text comes from the optional text generator,
falling back to per-segment templates.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Callable, Sequence

from app.domain.user_activity import Persona, StoryPriority, UserSegment, UserStory
from app.logging_utils import log_event
from llm_synthesis import fallbacks
from llm_synthesis.prompt_builder import (
    STORY_CRITERION_OPTIONS,
    STORY_DESCRIPTION_OPTIONS,
    STORY_TITLE_OPTIONS,
    SynthesisPromptBuilder,
)
from llm_synthesis.synthesizer import GeneratorFactory, TextSynthesizer, open_synthesizer

logger = logging.getLogger(__name__)

MIN_ACCEPTANCE_CRITERIA = 3

_PRIORITY_BY_SEGMENT: dict[UserSegment, StoryPriority] = {
    UserSegment.ATRISK: StoryPriority.HIGH,
    UserSegment.POWER: StoryPriority.MEDIUM,
    UserSegment.OCCASIONAL: StoryPriority.LOW,
}


def priority_for_segment(segment: UserSegment) -> StoryPriority:
    return _PRIORITY_BY_SEGMENT[segment]


def pad_acceptance_criteria(criteria: Sequence[str]) -> tuple[str, ...]:
    """
    Return ``criteria`` topped up with the standard criteria until at
    least ``MIN_ACCEPTANCE_CRITERIA`` entries are present.
    """
    padded = [item for item in criteria if item]
    for default in fallbacks.DEFAULT_ACCEPTANCE_CRITERIA:
        if len(padded) >= MIN_ACCEPTANCE_CRITERIA:
            break
        if default not in padded:
            padded.append(default)
    return tuple(padded)


class StoryService:
    """
    Builds exactly one user story per persona, in persona order.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        generator_factory: GeneratorFactory | None = None,
        max_retries: int = 1,
        id_factory: Callable[[], str] | None = None,
        prompt_builder: SynthesisPromptBuilder | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._generator_factory = generator_factory
        self._max_retries = max_retries
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._prompts = prompt_builder or SynthesisPromptBuilder()

    def build_stories(self, personas: Sequence[Persona]) -> list[UserStory]:
        if not personas:
            logger.warning("No personas available for story generation")
            return []

        synthesizer = open_synthesizer(
            self._generator_factory,
            component="stories",
            max_retries=self._max_retries,
        )
        if synthesizer is not None:
            try:
                stories = [self._generated_story(persona, synthesizer) for persona in personas]
                log_event(
                    logger,
                    logging.INFO,
                    "stories_generated",
                    count=len(stories),
                    generated_fields=synthesizer.generated_count,
                    fallback_fields=synthesizer.fallback_count,
                )
                return stories
            except Exception as exc:  # noqa: BLE001
                log_event(logger, logging.WARNING, "story_generation_failed", error=str(exc))

        stories = [self._template_story(persona) for persona in personas]
        log_event(logger, logging.INFO, "stories_from_templates", count=len(stories))
        return stories

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _generated_story(self, persona: Persona, synthesizer: TextSynthesizer) -> UserStory:
        segment = persona.segment.value
        story_type = self._rng.choice(fallbacks.STORY_TYPES[segment])

        title = synthesizer.complete(
            self._prompts.story_title(story_type),
            STORY_TITLE_OPTIONS,
            story_type,
        )

        description_prompt = self._prompts.story_description(persona.name)
        description = synthesizer.complete(
            description_prompt,
            STORY_DESCRIPTION_OPTIONS,
            f"{description_prompt} {fallbacks.STORY_WANTS[segment]}",
            keep_prompt=True,
        )

        criterion_prompt = self._prompts.story_criterion(title)
        criteria = [
            synthesizer.complete(criterion_prompt, STORY_CRITERION_OPTIONS, "")
            for _ in range(MIN_ACCEPTANCE_CRITERIA)
        ]

        return UserStory(
            id=self._id_factory(),
            persona_id=persona.id,
            title=title,
            description=description,
            priority=priority_for_segment(persona.segment),
            acceptance_criteria=pad_acceptance_criteria(criteria),
        )

    def _template_story(self, persona: Persona) -> UserStory:
        template = self._rng.choice(fallbacks.STORY_TEMPLATES[persona.segment.value])
        return UserStory(
            id=self._id_factory(),
            persona_id=persona.id,
            title=str(template["title"]),
            description=str(template["description"]),
            priority=priority_for_segment(persona.segment),
            acceptance_criteria=pad_acceptance_criteria(template["criteria"]),  # type: ignore[arg-type]
        )
