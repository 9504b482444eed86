"""Prompt builder for persona, story, and insight text generation.

Prompts are short continuations suited to small causal language models;
each comes paired with the generation caps used for it.
"""

from llm_synthesis.schema import GenerationOptions

PERSONA_DESCRIPTION_OPTIONS = GenerationOptions(max_length=100)
PERSONA_LIST_OPTIONS = GenerationOptions(max_length=70)
STORY_TITLE_OPTIONS = GenerationOptions(max_length=30)
STORY_DESCRIPTION_OPTIONS = GenerationOptions(max_length=100)
STORY_CRITERION_OPTIONS = GenerationOptions(max_length=50)
INSIGHT_TITLE_OPTIONS = GenerationOptions(max_length=50)
INSIGHT_TEXT_OPTIONS = GenerationOptions(max_length=80)

_SEGMENT_ADJECTIVES = {
    "power": "a highly engaged",
    "atrisk": "at risk of churning",
    "occasional": "an occasional",
}

_SEGMENT_AUDIENCES = {
    "power": "power users",
    "atrisk": "users about to churn",
    "occasional": "occasional users",
}


class SynthesisPromptBuilder:
    """Builds deterministic prompts keyed by segment or insight category."""

    def persona_description(self, segment: str) -> str:
        adjective = _SEGMENT_ADJECTIVES[segment]
        if segment == "atrisk":
            return f"This user is {adjective} from a SaaS product. They"
        return f"This user is {adjective} user of a SaaS product. They"

    def persona_pain_points(self, segment: str) -> str:
        return f"Pain points for {_SEGMENT_AUDIENCES[segment]} include:"

    def persona_goals(self, segment: str) -> str:
        return f"Goals for {_SEGMENT_AUDIENCES[segment]} include:"

    def story_title(self, story_type: str) -> str:
        return f"User story for {story_type}:"

    def story_description(self, persona_name: str) -> str:
        return f"As {persona_name}, I want"

    def story_criterion(self, title: str) -> str:
        return f"Acceptance criteria for {title}:"

    def insight_title(self, category: str) -> str:
        return f"Insight about {category}:"

    def insight_description(self, category: str) -> str:
        return f"Description of insight about {category}:"

    def insight_recommendation(self, title: str) -> str:
        return f"Recommendation for {title}:"
