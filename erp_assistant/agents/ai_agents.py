"""
AI Agent for Transaction Drafting

DESIGN DECISION: The language model is an OPTIONAL proposer. The agent
never raises into the drafting flow; it returns a ProviderResult that is
either a candidate Draft or a typed ProviderError.

CRITICAL BOUNDARIES:
- CAN: Propose an intent and a payload for a message
- CANNOT: Mark a draft ready; readiness is re-derived by the validator
- CANNOT: Post anything

Three failure kinds are kept apart for logging:
1. UNCONFIGURED - no API key, the model was never called
2. REQUEST_FAILED - the call failed or timed out after retries (network, quota)
3. INVALID_OUTPUT - the model answered with something other than a JSON object
The user sees the same rule-based fallback draft for all three.
"""

import asyncio
import json
import re
from enum import Enum
from typing import Any, Optional

import google.generativeai as genai
from pydantic import BaseModel, ConfigDict
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from erp_assistant.agents.prompts import build_drafting_prompt
from erp_assistant.config import GeminiSettings, get_settings
from erp_assistant.models.directory import ContextHints
from erp_assistant.models.draft import Draft


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class ProviderFailure(str, Enum):
    UNCONFIGURED = "unconfigured"
    REQUEST_FAILED = "request_failed"
    INVALID_OUTPUT = "invalid_output"


class ProviderError(Exception):
    """A language model call that produced no usable draft."""

    def __init__(self, failure: ProviderFailure, message: str = ""):
        super().__init__(message or failure.value)
        self.failure = failure


class ProviderResult(BaseModel):
    """Either a candidate draft or the error that prevented one."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    draft: Optional[Draft] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.draft is not None

    @property
    def failure(self) -> Optional[ProviderFailure]:
        return self.error.failure if self.error else None


def parse_provider_text(text: str) -> dict[str, Any]:
    """
    Parse the model's reply into a JSON object.

    Markdown code fences around the JSON are tolerated.

    Raises:
        ProviderError: INVALID_OUTPUT when the reply is not a JSON object
    """
    cleaned = _FENCE.sub("", (text or "").strip()).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderError(ProviderFailure.INVALID_OUTPUT, f"Reply is not JSON: {e}")
    if not isinstance(payload, dict):
        raise ProviderError(
            ProviderFailure.INVALID_OUTPUT,
            f"Reply is a JSON {type(payload).__name__}, not an object",
        )
    return payload


class DraftingAgent:
    """
    Gemini-backed proposer of candidate drafts.

    Args:
        settings: Gemini settings; read from the environment when omitted.
        model: A pre-built model object exposing `generate_content_async`
               (used instead of configuring genai).
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "top_p": self._settings.top_p,
                "top_k": self._settings.top_k,
            }
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    async def _generate(self, prompt: str) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.request_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            reraise=True,
        ):
            with attempt:
                response = await asyncio.wait_for(
                    self._model.generate_content_async(prompt),
                    timeout=self._settings.timeout_seconds,
                )
        return response.text

    async def propose_draft(
        self,
        text: str,
        hints: Optional[ContextHints] = None,
    ) -> ProviderResult:
        """Ask the model for a candidate draft. Never raises."""
        if not self.is_configured:
            return ProviderResult(error=ProviderError(ProviderFailure.UNCONFIGURED))

        prompt = build_drafting_prompt(text, hints or ContextHints())
        try:
            reply = await self._generate(prompt)
        except asyncio.TimeoutError:
            return ProviderResult(error=ProviderError(
                ProviderFailure.REQUEST_FAILED,
                f"No reply within {self._settings.timeout_seconds}s",
            ))
        except Exception as e:
            return ProviderResult(error=ProviderError(ProviderFailure.REQUEST_FAILED, str(e)))

        try:
            payload = parse_provider_text(reply)
        except ProviderError as e:
            return ProviderResult(error=e)

        return ProviderResult(draft=Draft.from_provider_payload(payload))
