"""AI Agents package."""

from erp_assistant.agents.ai_agents import (
    DraftingAgent,
    ProviderError,
    ProviderFailure,
    ProviderResult,
    parse_provider_text,
)
from erp_assistant.agents.prompts import SYSTEM_PROMPT, build_drafting_prompt

__all__ = [
    "DraftingAgent",
    "ProviderError",
    "ProviderFailure",
    "ProviderResult",
    "SYSTEM_PROMPT",
    "build_drafting_prompt",
    "parse_provider_text",
]
