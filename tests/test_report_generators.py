"""
tests/test_report_generators.py

Pytest unit tests for StoryService, MetricService, and InsightService.
"""

from __future__ import annotations

import random

import pytest

from app.domain.user_activity import (
    InsightCategory,
    InsightImpact,
    Persona,
    StoryPriority,
    UserRecord,
    UserSegment,
)
from app.services.insight_service import InsightService, category_for_index, pick_impact
from app.services.metric_service import MetricService, compute_churn_figures
from app.services.story_service import StoryService, pad_acceptance_criteria
from llm_synthesis import fallbacks
from llm_synthesis.adapter import MockTextGenerator


def _persona(persona_id: str, segment: UserSegment) -> Persona:
    return Persona(
        id=persona_id,
        name=f"Persona {persona_id}",
        segment=segment,
        description="d",
        pain_points=("p",),
        goals=("g",),
        churn_risk=0.5,
    )


def _user(risk: float, activity: float) -> UserRecord:
    return UserRecord(
        id=f"u-{risk}-{activity}",
        name="n",
        email="e@example.com",
        last_login="2024-10-01T00:00:00+00:00",
        registered_date="2024-01-01T00:00:00+00:00",
        user_segment=UserSegment.OCCASIONAL,
        churn_risk=risk,
        activity_score=activity,
    )


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


class TestStoryService:
    def test_one_story_per_persona_with_segment_priority(self) -> None:
        personas = [
            _persona("a", UserSegment.POWER),
            _persona("b", UserSegment.ATRISK),
            _persona("c", UserSegment.OCCASIONAL),
        ]

        stories = StoryService(rng=random.Random(1)).build_stories(personas)

        assert [story.persona_id for story in stories] == ["a", "b", "c"]
        assert [story.priority for story in stories] == [
            StoryPriority.MEDIUM,
            StoryPriority.HIGH,
            StoryPriority.LOW,
        ]

    def test_template_story_comes_from_segment_templates(self) -> None:
        (story,) = StoryService(rng=random.Random(2)).build_stories([_persona("a", UserSegment.ATRISK)])

        titles = [template["title"] for template in fallbacks.STORY_TEMPLATES["atrisk"]]
        assert story.title in titles
        assert len(story.acceptance_criteria) == 3

    def test_no_personas_no_stories(self) -> None:
        assert StoryService().build_stories([]) == []

    def test_generated_story_pads_criteria(self) -> None:
        generator = MockTextGenerator(
            responder=lambda prompt, options: (
                f"{prompt} Export works" if prompt.startswith("Acceptance criteria") else f"{prompt} Faster setup"
            )
        )

        (story,) = StoryService(rng=random.Random(0), generator_factory=lambda: generator).build_stories(
            [_persona("a", UserSegment.POWER)]
        )

        assert story.title == "Faster setup"
        assert story.description == "As Persona a, I want Faster setup"
        assert story.acceptance_criteria[0] == "Export works"
        assert len(story.acceptance_criteria) >= 3

    def test_pad_acceptance_criteria(self) -> None:
        assert pad_acceptance_criteria([]) == fallbacks.DEFAULT_ACCEPTANCE_CRITERIA
        assert pad_acceptance_criteria(["x", ""]) == ("x",) + fallbacks.DEFAULT_ACCEPTANCE_CRITERIA[:2]
        assert pad_acceptance_criteria(["a", "b", "c", "d"]) == ("a", "b", "c", "d")


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class TestMetricService:
    def test_figures(self) -> None:
        users = [_user(0.9, 2.0), _user(0.8, 4.0), _user(0.2, 6.0), _user(0.5, 8.0)]

        figures = compute_churn_figures(users)

        assert figures.at_risk_users == 2
        assert figures.at_risk_percentage == pytest.approx(50.0)
        assert figures.churn_rate == pytest.approx(5.0)
        assert figures.retention_rate == pytest.approx(95.0)
        assert figures.avg_engagement == pytest.approx(5.0)

    def test_threshold_is_strict(self) -> None:
        assert compute_churn_figures([_user(0.7, 5.0)]).at_risk_users == 0

    def test_metric_cards_order_and_jitter_ranges(self) -> None:
        users = [_user(0.9, 2.0), _user(0.1, 9.0)]

        metrics = MetricService(rng=random.Random(8)).build_metrics(users)

        churn, at_risk, engagement, retention = metrics
        assert (churn.title, churn.value, churn.is_positive) == ("Churn Rate", pytest.approx(5.0), False)
        assert -0.5 <= churn.change < 0.5
        assert at_risk.value == 1.0
        assert at_risk.change == int(at_risk.change) and -5 <= at_risk.change <= 5
        assert engagement.value == pytest.approx(5.5) and engagement.is_positive
        assert 0.0 <= engagement.change <= 5.0
        assert retention.value == pytest.approx(95.0)
        assert 0.0 <= retention.change <= 3.0

    def test_empty_users_yield_no_metrics(self) -> None:
        assert MetricService().build_metrics([]) == []
        with pytest.raises(ValueError):
            compute_churn_figures([])


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class TestInsightService:
    def test_six_insights_with_cycling_categories(self) -> None:
        insights = InsightService(rng=random.Random(4)).build_insights([_user(0.5, 5.0)])

        assert [insight.category for insight in insights] == [
            InsightCategory.ONBOARDING,
            InsightCategory.ENGAGEMENT,
            InsightCategory.SUPPORT,
            InsightCategory.PRODUCT,
            InsightCategory.ONBOARDING,
            InsightCategory.ENGAGEMENT,
        ]

    def test_template_pass_uses_second_template_on_second_cycle(self) -> None:
        insights = InsightService(rng=random.Random(4)).build_insights([_user(0.5, 5.0)])

        assert insights[0].title == fallbacks.INSIGHT_TEMPLATES["onboarding"][0]["title"]
        assert insights[4].title == fallbacks.INSIGHT_TEMPLATES["onboarding"][1]["title"]

    def test_configured_count(self) -> None:
        insights = InsightService(insight_count=2).build_insights([_user(0.5, 5.0)])
        assert len(insights) == 2

    def test_no_users_no_insights(self) -> None:
        assert InsightService().build_insights([]) == []

    def test_generated_insight_falls_back_per_field(self) -> None:
        generator = MockTextGenerator(responses={"Insight about onboarding:": "Insight about onboarding: Shorter tours"})

        insights = InsightService(
            rng=random.Random(1),
            generator_factory=lambda: generator,
            insight_count=1,
        ).build_insights([_user(0.5, 5.0)])

        assert insights[0].title == "Shorter tours"
        assert insights[0].description == "mock generated text for testing."
        assert "Recommendation for Shorter tours:" in generator.prompts

    def test_category_cycle(self) -> None:
        assert category_for_index(7) is InsightCategory.PRODUCT

    @pytest.mark.parametrize(
        "category, draw, expected",
        [
            (InsightCategory.ONBOARDING, 0.49, InsightImpact.HIGH),
            (InsightCategory.ONBOARDING, 0.79, InsightImpact.MEDIUM),
            (InsightCategory.ONBOARDING, 0.81, InsightImpact.LOW),
            (InsightCategory.ENGAGEMENT, 0.95, InsightImpact.LOW),
            (InsightCategory.SUPPORT, 0.31, InsightImpact.MEDIUM),
            (InsightCategory.PRODUCT, 0.0, InsightImpact.HIGH),
        ],
    )
    def test_pick_impact_follows_weights(self, category, draw, expected) -> None:
        assert pick_impact(category, draw) is expected

    def test_invalid_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            InsightService(insight_count=0)
