"""
Persona aggregation module.

Turns segment profiles into human-readable personas, each carrying the
real users it summarises. Text comes from the optional text generator
with deterministic template fallback.
"""

import logging
import math
import random
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from app.domain.user_activity import Persona, UserRecord, UserSegment
from app.logging_utils import log_event
from llm_synthesis import fallbacks
from llm_synthesis.prompt_builder import (
    PERSONA_DESCRIPTION_OPTIONS,
    PERSONA_LIST_OPTIONS,
    SynthesisPromptBuilder,
)
from llm_synthesis.synthesizer import GeneratorFactory, TextSynthesizer, open_synthesizer
from segmentation.profiling import SegmentProfile, SegmentProfiler

logger = logging.getLogger(__name__)

_MAX_NAME_DRAWS = 10


@dataclass(frozen=True)
class PersonaSplitPolicy:
    """
    When to split one segment into two complementary personas.

    A segment with at least ``split_threshold`` members is divided into two
    disjoint, contiguous slices of its risk-ordered member list: the first
    ``ceil(size * split_ratio)`` members, then the rest.
    """

    split_threshold: int = 10
    split_ratio: float = 0.5

    def __post_init__(self) -> None:
        if self.split_threshold < 2:
            raise ValueError(f"split_threshold must be at least 2, got {self.split_threshold!r}.")
        if not 0.0 < self.split_ratio < 1.0:
            raise ValueError(f"split_ratio must be in (0, 1), got {self.split_ratio!r}.")

    def partition(self, members: Sequence[UserRecord]) -> List[Sequence[UserRecord]]:
        size = len(members)
        if size < self.split_threshold:
            return [members]
        cut = min(max(math.ceil(size * self.split_ratio), 1), size - 1)
        return [members[:cut], members[cut:]]


class PersonaAggregator:
    """
    Builds personas from scored users.

    Responsibilities:
        - Profile segments (grouping, ordering, average risk).
        - Apply the split policy.
        - Name personas and fill description, pain points, and goals.

    Empty segments produce no persona.
    """

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        split_policy: Optional[PersonaSplitPolicy] = None,
        generator_factory: Optional[GeneratorFactory] = None,
        max_retries: int = 1,
        id_factory: Optional[Callable[[], str]] = None,
        profiler: Optional[SegmentProfiler] = None,
        prompt_builder: Optional[SynthesisPromptBuilder] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._split_policy = split_policy or PersonaSplitPolicy()
        self._generator_factory = generator_factory
        self._max_retries = max_retries
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._profiler = profiler or SegmentProfiler()
        self._prompts = prompt_builder or SynthesisPromptBuilder()

    def build_personas(self, users: Sequence[UserRecord]) -> List[Persona]:
        """
        Build personas for every non-empty segment.

        Args:
            users: Scored user records.

        Returns:
            Personas ordered power, atrisk, occasional; split personas
            follow each other, higher-risk slice first.
        """
        profiles = self._profiler.profile_segments(users)
        log_event(
            logger,
            logging.INFO,
            "segment_distribution",
            **{segment.value: profile.size for segment, profile in profiles.items()},
        )
        for profile in profiles.values():
            log_event(
                logger,
                logging.DEBUG,
                "segment_profiled",
                segment=profile.segment.value,
                size=profile.size,
                avg_churn_risk=round(profile.avg_churn_risk, 4),
                avg_activity_score=round(profile.avg_activity_score, 2),
            )
        if not profiles:
            return []

        synthesizer = open_synthesizer(
            self._generator_factory,
            component="personas",
            max_retries=self._max_retries,
        )
        if synthesizer is not None:
            try:
                personas = self._assemble(list(profiles.values()), synthesizer)
                log_event(
                    logger,
                    logging.INFO,
                    "personas_generated",
                    count=len(personas),
                    generated_fields=synthesizer.generated_count,
                    fallback_fields=synthesizer.fallback_count,
                )
                return personas
            except Exception as exc:  # noqa: BLE001
                log_event(logger, logging.WARNING, "persona_generation_failed", error=str(exc))

        return self._assemble(list(profiles.values()), None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _assemble(
        self,
        profiles: List[SegmentProfile],
        synthesizer: Optional[TextSynthesizer],
    ) -> List[Persona]:
        personas: List[Persona] = []
        used_names: set[str] = set()

        for profile in profiles:
            slices = self._split_policy.partition(profile.members)
            for members in slices:
                if len(slices) == 1:
                    churn_risk = profile.avg_churn_risk
                else:
                    churn_risk = self._profiler.mean([user.churn_risk for user in members])

                name = self._persona_name(profile.segment, used_names)
                used_names.add(name)
                description, pain_points, goals = self._persona_text(profile.segment, synthesizer)

                personas.append(
                    Persona(
                        id=self._id_factory(),
                        name=name,
                        segment=profile.segment,
                        description=description,
                        pain_points=tuple(pain_points) or ("N/A",),
                        goals=tuple(goals) or ("N/A",),
                        churn_risk=churn_risk,
                        users=tuple(user.to_persona_user() for user in members),
                    )
                )
        return personas

    def _persona_name(self, segment: UserSegment, used_names: set[str]) -> str:
        prefixes = fallbacks.PERSONA_NAME_PREFIXES[segment.value]
        name = ""
        for _ in range(_MAX_NAME_DRAWS):
            name = f"{self._rng.choice(prefixes)} {self._rng.choice(fallbacks.PERSONA_GIVEN_NAMES)}"
            if name not in used_names:
                break
        return name

    def _persona_text(
        self,
        segment: UserSegment,
        synthesizer: Optional[TextSynthesizer],
    ) -> tuple[str, List[str], List[str]]:
        key = segment.value
        if synthesizer is None:
            return (
                fallbacks.PERSONA_DESCRIPTIONS[key],
                list(fallbacks.PERSONA_PAIN_POINTS[key]),
                list(fallbacks.PERSONA_GOALS[key]),
            )

        description_prompt = self._prompts.persona_description(key)
        continuation = synthesizer.complete(
            description_prompt,
            PERSONA_DESCRIPTION_OPTIONS,
            fallbacks.PERSONA_DESCRIPTION_CONTINUATIONS[key],
            strip_trailing_period=True,
        )
        pain_points = synthesizer.complete_list(
            self._prompts.persona_pain_points(key),
            PERSONA_LIST_OPTIONS,
            fallbacks.PERSONA_PAIN_POINTS[key],
        )
        goals = synthesizer.complete_list(
            self._prompts.persona_goals(key),
            PERSONA_LIST_OPTIONS,
            fallbacks.PERSONA_GOALS[key],
        )
        return f"{description_prompt} {continuation}.", pain_points, goals
