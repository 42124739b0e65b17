"""Assistant layer: routing, prompts, language model and chat handlers.

- **router**: keyword rule table -> data requirements -> rendered data block.
- **formatters**: text blocks for metrics, comparisons and rankings.
- **prompts**: system prompt, business-query detection, user prompt.
- **llm**: Anthropic Messages API client.
- **service**: `Assistant`, the question-in/answer-out facade.
- **chat**: mention, direct-message and slash-command handlers.
"""

from pos_insights.assistant.router import (
    OVERVIEW,
    RULES,
    DataRequirement,
    IntentRule,
    QueryRouter,
    match_requirements,
)
from pos_insights.assistant.service import Assistant

__all__ = [
    "OVERVIEW",
    "RULES",
    "Assistant",
    "DataRequirement",
    "IntentRule",
    "QueryRouter",
    "match_requirements",
]
