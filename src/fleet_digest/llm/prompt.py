# fleet_digest/llm/prompt.py
"""Prompt template for the first conversational turn."""

__all__: list[str] = ['SUMMARY_PROMPT_TEMPLATE', 'build_summary_prompt']

SUMMARY_PROMPT_TEMPLATE: str = """Summarize the following fleet activity from the last week.

Focus on:
- Critical or overdue issues
- Vehicles needing immediate attention
- Overall fleet trends

Provide specific recommendations for fleet management based on the data.

Do not relist the data. Just provide recommendations with a reasoning about your recommendations.

Do not invent information. Base your summary only on the provided data.

---

{digest_text}
"""


def build_summary_prompt(digest_text: str) -> str:
    """Wrap the serialized digest in the recommendation-focused instructions."""
    return SUMMARY_PROMPT_TEMPLATE.format(digest_text=digest_text)
