"""
app/services/insight_service.py

Product insight generation.

Produces a fixed number of insights with categories cycling
onboarding -> engagement -> support -> product. Impact is drawn from
per-category weights using the injected random source.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Callable, Sequence

from app.domain.user_activity import Insight, InsightCategory, InsightImpact, UserRecord
from app.logging_utils import log_event
from llm_synthesis import fallbacks
from llm_synthesis.prompt_builder import INSIGHT_TEXT_OPTIONS, INSIGHT_TITLE_OPTIONS, SynthesisPromptBuilder
from llm_synthesis.synthesizer import GeneratorFactory, TextSynthesizer, open_synthesizer

logger = logging.getLogger(__name__)

DEFAULT_INSIGHT_COUNT = 6

CATEGORY_CYCLE: tuple[InsightCategory, ...] = (
    InsightCategory.ONBOARDING,
    InsightCategory.ENGAGEMENT,
    InsightCategory.SUPPORT,
    InsightCategory.PRODUCT,
)

_IMPACT_LEVELS: tuple[InsightImpact, ...] = (InsightImpact.HIGH, InsightImpact.MEDIUM, InsightImpact.LOW)

# high / medium / low
IMPACT_WEIGHTS: dict[InsightCategory, tuple[float, float, float]] = {
    InsightCategory.ONBOARDING: (0.5, 0.3, 0.2),
    InsightCategory.ENGAGEMENT: (0.6, 0.3, 0.1),
    InsightCategory.SUPPORT: (0.3, 0.4, 0.3),
    InsightCategory.PRODUCT: (0.4, 0.4, 0.2),
}


def category_for_index(index: int) -> InsightCategory:
    return CATEGORY_CYCLE[index % len(CATEGORY_CYCLE)]


def pick_impact(category: InsightCategory, draw: float) -> InsightImpact:
    """
    Map a uniform draw in [0, 1) onto the category's impact weights.
    """
    cumulative = 0.0
    for level, weight in zip(_IMPACT_LEVELS, IMPACT_WEIGHTS[category]):
        cumulative += weight
        if draw <= cumulative:
            return level
    return _IMPACT_LEVELS[-1]


class InsightService:
    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        generator_factory: GeneratorFactory | None = None,
        max_retries: int = 1,
        insight_count: int = DEFAULT_INSIGHT_COUNT,
        id_factory: Callable[[], str] | None = None,
        prompt_builder: SynthesisPromptBuilder | None = None,
    ) -> None:
        if insight_count < 1:
            raise ValueError(f"insight_count must be positive, got {insight_count!r}.")
        self._rng = rng or random.Random()
        self._generator_factory = generator_factory
        self._max_retries = max_retries
        self._insight_count = insight_count
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._prompts = prompt_builder or SynthesisPromptBuilder()

    def build_insights(self, users: Sequence[UserRecord]) -> list[Insight]:
        """
        Build insights for a processed upload.

        Returns an empty list when there are no users.
        """
        if not users:
            logger.warning("No user data available for insights generation")
            return []

        synthesizer = open_synthesizer(
            self._generator_factory,
            component="insights",
            max_retries=self._max_retries,
        )
        if synthesizer is not None:
            try:
                insights = [self._generated_insight(i, synthesizer) for i in range(self._insight_count)]
                log_event(
                    logger,
                    logging.INFO,
                    "insights_generated",
                    count=len(insights),
                    generated_fields=synthesizer.generated_count,
                    fallback_fields=synthesizer.fallback_count,
                )
                return insights
            except Exception as exc:  # noqa: BLE001
                log_event(logger, logging.WARNING, "insight_generation_failed", error=str(exc))

        insights = [self._template_insight(i) for i in range(self._insight_count)]
        log_event(logger, logging.INFO, "insights_from_templates", count=len(insights))
        return insights

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _template_for(index: int) -> dict[str, str]:
        templates = fallbacks.INSIGHT_TEMPLATES[category_for_index(index).value]
        return templates[(index // len(CATEGORY_CYCLE)) % len(templates)]

    def _generated_insight(self, index: int, synthesizer: TextSynthesizer) -> Insight:
        category = category_for_index(index)
        template = self._template_for(index)

        title = synthesizer.complete(
            self._prompts.insight_title(category.value),
            INSIGHT_TITLE_OPTIONS,
            f"Improve {category.value} experience",
        )
        description = synthesizer.complete(
            self._prompts.insight_description(category.value),
            INSIGHT_TEXT_OPTIONS,
            template["description"],
        )
        recommendation = synthesizer.complete(
            self._prompts.insight_recommendation(title),
            INSIGHT_TEXT_OPTIONS,
            template["recommendation"],
        )

        return Insight(
            id=self._id_factory(),
            title=title,
            description=description,
            impact=pick_impact(category, self._rng.random()),
            recommendation=recommendation,
            category=category,
        )

    def _template_insight(self, index: int) -> Insight:
        category = category_for_index(index)
        template = self._template_for(index)
        return Insight(
            id=self._id_factory(),
            title=template["title"],
            description=template["description"],
            impact=pick_impact(category, self._rng.random()),
            recommendation=template["recommendation"],
            category=category,
        )
