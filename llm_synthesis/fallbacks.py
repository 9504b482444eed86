"""Deterministic template text used when generation is disabled or fails.

Keyed by segment (``power`` / ``atrisk`` / ``occasional``) or insight
category (``onboarding`` / ``engagement`` / ``support`` / ``product``).
"""

from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Personas
# ---------------------------------------------------------------------------

PERSONA_NAME_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "power": ("Power", "Pro", "Expert", "Advanced", "Champion"),
    "atrisk": ("At-Risk", "Churning", "Leaving", "Fading", "Wavering"),
    "occasional": ("Casual", "Occasional", "Infrequent", "Part-time", "Rare"),
}

PERSONA_GIVEN_NAMES: Tuple[str, ...] = (
    "Alex", "Bailey", "Casey", "Dana", "Ellis",
    "Francis", "Glenn", "Harper", "Ivy", "Jordan",
    "Kelly", "Leslie", "Morgan", "Nico", "Ollie",
    "Parker", "Quinn", "Riley", "Sage", "Taylor",
)

PERSONA_DESCRIPTIONS: Dict[str, str] = {
    "power": (
        "This user is a highly engaged user of a SaaS product. "
        "They use the product daily and leverage advanced features."
    ),
    "atrisk": (
        "This user is at risk of churning from a SaaS product. "
        "They have decreased their usage recently and may not renew."
    ),
    "occasional": (
        "This user is an occasional user of a SaaS product. "
        "They log in periodically for specific tasks."
    ),
}

# Continuations appended to a generated-description prompt when the
# generator fails for that one field.
PERSONA_DESCRIPTION_CONTINUATIONS: Dict[str, str] = {
    "power": (
        "log in multiple times per week, rely on the product for critical work tasks "
        "and use advanced features regularly"
    ),
    "atrisk": (
        "have shown decreased activity in recent weeks, experienced some technical issues "
        "and have not received the value they expected"
    ),
    "occasional": (
        "use the product for specific tasks but have not fully incorporated it "
        "into their regular workflow"
    ),
}

PERSONA_PAIN_POINTS: Dict[str, Tuple[str, ...]] = {
    "power": ("Limited advanced features", "Occasional performance issues", "Needs better integration options"),
    "atrisk": ("Unclear value proposition", "Difficult onboarding", "Too expensive for current usage"),
    "occasional": ("Forgets how to use interface", "Doesn't see regular value", "Notifications are too frequent"),
}

PERSONA_GOALS: Dict[str, Tuple[str, ...]] = {
    "power": ("Improve workflow efficiency", "Access advanced analytics", "Customize experience further"),
    "atrisk": ("Find immediate value", "Resolve technical issues", "Simplify complex processes"),
    "occasional": ("Complete specific tasks quickly", "Learn essential features only", "Minimize time investment"),
}

# ---------------------------------------------------------------------------
# User stories
# ---------------------------------------------------------------------------

STORY_TYPES: Dict[str, Tuple[str, ...]] = {
    "power": ("Advanced features", "Workflow optimization", "Integration capabilities", "Power tools"),
    "atrisk": ("Simplified interface", "Onboarding improvements", "Value demonstration", "Problem resolution"),
    "occasional": ("Re-engagement", "Feature discovery", "Value reminders", "Quick wins"),
}

STORY_WANTS: Dict[str, str] = {
    "power": "to have more customization options for advanced workflows so that I can optimize my productivity.",
    "atrisk": "to see immediate value from the core features so that I can justify continuing to use the product.",
    "occasional": (
        "to quickly accomplish specific tasks without a steep learning curve "
        "so that I can get in and out efficiently."
    ),
}

DEFAULT_ACCEPTANCE_CRITERIA: Tuple[str, ...] = (
    "Feature must be implemented according to specifications",
    "User testing shows positive feedback",
    "Performance metrics remain stable",
)

STORY_TEMPLATES: Dict[str, Tuple[Dict[str, object], ...]] = {
    "power": (
        {
            "title": "Advanced Analytics Dashboard",
            "description": (
                "As a power user, I want to see comprehensive analytics and insights "
                "so that I can make data-driven decisions more effectively."
            ),
            "criteria": (
                "Dashboard should include customizable widgets",
                "Data should be exportable in multiple formats",
                "Advanced filtering options should be available",
            ),
        },
        {
            "title": "Keyboard Shortcuts",
            "description": (
                "As a power user, I want to use keyboard shortcuts for common actions "
                "so that I can work more efficiently."
            ),
            "criteria": (
                "All primary actions should have shortcuts",
                "Shortcuts should be customizable",
                "A shortcut reference guide should be accessible",
            ),
        },
    ),
    "atrisk": (
        {
            "title": "Value Demonstration Wizard",
            "description": (
                "As an at-risk user, I want to see concrete examples of how the product can solve "
                "my specific problems so that I can justify continued usage."
            ),
            "criteria": (
                "Wizard should identify user pain points",
                "Solutions should be tailored to user needs",
                "Benefits should be quantified where possible",
            ),
        },
        {
            "title": "Simplified Workflow Guide",
            "description": (
                "As an at-risk user, I want simpler ways to accomplish my goals "
                "so that I don't feel overwhelmed by the product."
            ),
            "criteria": (
                "Guide should focus on essential steps only",
                "Visual cues should highlight primary actions",
                "Progress should be clearly tracked",
            ),
        },
    ),
    "occasional": (
        {
            "title": "Quick Start Templates",
            "description": (
                "As an occasional user, I want predefined templates for common tasks "
                "so that I can get started quickly without remembering all the steps."
            ),
            "criteria": (
                "Templates should cover most common use cases",
                "Templates should be easily accessible from home screen",
                "Template usage should be tracked to improve offerings",
            ),
        },
        {
            "title": "Feature Reminder Tooltips",
            "description": (
                "As an occasional user, I want contextual reminders about how features work "
                "so that I don't need to relearn the interface each time."
            ),
            "criteria": (
                "Tooltips should appear for infrequently used features",
                "Tooltips should be dismissible",
                "User should be able to control tooltip frequency",
            ),
        },
    ),
}

# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

INSIGHT_TEMPLATES: Dict[str, Tuple[Dict[str, str], ...]] = {
    "onboarding": (
        {
            "title": "Onboarding Completion Analysis",
            "description": (
                "New users struggle with completing the onboarding process. "
                "The tutorials are too long and users often skip them."
            ),
            "recommendation": (
                "Simplify the onboarding process to focus on core value, "
                "introducing advanced features through contextual tips later."
            ),
        },
        {
            "title": "First Week Engagement",
            "description": (
                "Users who complete at least 3 key actions in their first week "
                "are 2.5x more likely to become active users."
            ),
            "recommendation": (
                "Redesign the onboarding flow to encourage completion of these "
                "3 key actions within the first week."
            ),
        },
    ),
    "engagement": (
        {
            "title": "Integration Usage Impact",
            "description": (
                "Users who connect third-party integrations show 3x higher retention rates "
                "and use the product more frequently."
            ),
            "recommendation": (
                "Create an email campaign highlighting integration possibilities and their "
                "benefits, targeting occasional users."
            ),
        },
        {
            "title": "Feature Adoption Gap",
            "description": (
                "Only 23% of users discover and use the advanced filtering features, "
                "which are highly correlated with retention."
            ),
            "recommendation": (
                "Implement contextual tooltips highlighting the advanced filtering options "
                "when users are performing related tasks."
            ),
        },
    ),
    "support": (
        {
            "title": "Response Time Correlation",
            "description": (
                "Support response time has a direct correlation with user retention. "
                "Faster responses lead to significantly lower churn."
            ),
            "recommendation": (
                "Implement a priority response system for at-risk users based on their "
                "churn prediction score."
            ),
        },
        {
            "title": "Self-Help Resource Utilization",
            "description": (
                "Users who access help documentation resolve issues 45% faster "
                "but only 12% of users find the help center."
            ),
            "recommendation": (
                "Increase visibility of self-help resources within the product UI "
                "and improve search functionality."
            ),
        },
    ),
    "product": (
        {
            "title": "Feature Discovery Analysis",
            "description": (
                "Feature discovery is a major issue. Many users aren't aware of key features "
                "that would solve their specific problems."
            ),
            "recommendation": (
                "Add feature discovery tooltips based on user behavior patterns "
                "to highlight relevant functionality."
            ),
        },
        {
            "title": "Mobile Usage Patterns",
            "description": (
                "38% of at-risk users primarily access via mobile, where the experience "
                "is significantly worse than desktop."
            ),
            "recommendation": (
                "Prioritize mobile experience improvements, focusing on the most common "
                "tasks performed on mobile devices."
            ),
        },
    ),
}
