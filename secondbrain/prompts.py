"""
secondbrain/prompts.py
Prompt text for classification, forced re-classification, and digests.
Exports: build_classification_prompt, build_forced_prompt, DAILY_DIGEST_PROMPT, WEEKLY_REVIEW_PROMPT
"""

from datetime import date

_FIELD_SCHEMA = {
    "PEOPLE": (
        '    "name": "person\'s name",\n'
        '    "context": "how you know them / context",\n'
        '    "follow_ups": ["action items"]'
    ),
    "PROJECTS": (
        '    "title": "project title",\n'
        '    "next_action": "specific next step",\n'
        '    "notes": "additional context"'
    ),
    "IDEAS": (
        '    "title": "idea title",\n'
        '    "one_liner": "brief description",\n'
        '    "notes": "additional thoughts"'
    ),
    "ADMIN": (
        '    "title": "task title",\n'
        '    "due_date": "if mentioned, ISO format YYYY-MM-DD or null",\n'
        '    "notes": "additional details"'
    ),
}


def _date_preamble(today: date) -> str:
    iso = today.isoformat()
    return (
        f"Today's date is {iso}. Use this for any relative date references "
        f'(e.g. "by March 15" means {iso[:4]}-03-15).'
    )


def build_classification_prompt(text: str, hint: str | None = None, today: date | None = None) -> str:
    """Return the full classification prompt for one captured message."""
    today = today or date.today()
    field_blocks = "\n\n".join(
        f"    // For {category}:\n{schema}" for category, schema in _FIELD_SCHEMA.items()
    )
    hint_line = (
        f"\nThe user suggested the category {hint.upper()}. Treat it as a strong signal.\n"
        if hint
        else ""
    )
    return (
        "You are a Second Brain classifier. Analyze the user's captured thought and classify it.\n\n"
        f"{_date_preamble(today)}\n\n"
        "Categories:\n"
        "- PEOPLE: Notes about people, relationships, follow-ups with individuals\n"
        "- PROJECTS: Active work items, tasks with next actions\n"
        "- IDEAS: Concepts, future possibilities, things to explore\n"
        "- ADMIN: Errands, appointments, logistics, bills, chores\n\n"
        "Return JSON only, no other text:\n"
        "{\n"
        '  "category": "PEOPLE" | "PROJECTS" | "IDEAS" | "ADMIN",\n'
        '  "confidence": 0.0-1.0,\n'
        '  "fields": {\n'
        f"{field_blocks}\n"
        "  }\n"
        "}\n\n"
        "Be decisive. If it mentions a person by name with context, it's PEOPLE. "
        "If it has a clear action item or deliverable, it's PROJECTS. "
        "If it's speculative or \"what if\", it's IDEAS. "
        "If it's a chore/errand/appointment, it's ADMIN.\n"
        f"{hint_line}\n"
        f'Classify this:\n"{text}"'
    )


def build_forced_prompt(text: str, category: str, today: date | None = None) -> str:
    """Return a field-extraction prompt for a category fixed by the user."""
    today = today or date.today()
    return (
        "You are a Second Brain filing assistant. The user has already decided the category "
        f"of this captured thought: {category}. Do not reconsider it.\n\n"
        f"{_date_preamble(today)}\n\n"
        "Return JSON only, no other text:\n"
        "{\n"
        f'  "category": "{category}",\n'
        '  "confidence": 1.0,\n'
        '  "fields": {\n'
        f"{_FIELD_SCHEMA[category]}\n"
        "  }\n"
        "}\n\n"
        f'Extract the fields from this:\n"{text}"'
    )


DAILY_DIGEST_PROMPT = """You are creating a daily digest for a Second Brain system. Given the active items below, create a brief, actionable morning digest.

Format:
**Top 3 for today:**
1. [most important thing]
2. [second priority]
3. [third priority]

**People to reach out to:**
- [name]: [reason]

**Don't forget:**
- [any admin items due soon]

Keep it under 150 words. Be direct. No fluff."""

WEEKLY_REVIEW_PROMPT = """You are creating a weekly review for a Second Brain system. Summarize the week's captures and suggest focus areas.

Format:
**This week:** [X] captures ([breakdown by category])

**Progress:**
- [completed or moved forward]

**Open loops:**
- [things that need attention]

**Patterns I notice:**
- [any themes in the captures]

**Suggested focus for next week:**
1. [priority]
2. [priority]

Keep it under 250 words. Be honest about what's stalling."""
