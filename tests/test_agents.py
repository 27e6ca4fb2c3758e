"""Tests for the drafting agent (no network: the model is faked)."""

import asyncio
from types import SimpleNamespace

import pytest

from erp_assistant.agents import (
    DraftingAgent,
    ProviderError,
    ProviderFailure,
    build_drafting_prompt,
    parse_provider_text,
)
from erp_assistant.config import GeminiSettings
from erp_assistant.models.directory import AccountRecord, ContextHints
from erp_assistant.models.draft import Intent


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.reply)


class HangingModel:
    """A model that never answers."""

    async def generate_content_async(self, prompt):
        await asyncio.sleep(3600)


def settings(**overrides):
    return GeminiSettings(api_key=None, request_attempts=1, **overrides)


class TestParseProviderText:
    """Tests for parse_provider_text."""

    def test_plain_json(self):
        """Test a bare JSON object."""
        assert parse_provider_text('{"intent": "create_bill"}') == {"intent": "create_bill"}

    def test_fenced_json(self):
        """Test markdown fences are stripped."""
        text = '```json\n{"intent": "create_invoice", "data": {}}\n```'
        assert parse_provider_text(text)["intent"] == "create_invoice"

    def test_not_json(self):
        """Test prose is an invalid output."""
        with pytest.raises(ProviderError) as excinfo:
            parse_provider_text("Sure! Here is your invoice.")
        assert excinfo.value.failure == ProviderFailure.INVALID_OUTPUT

    def test_json_array(self):
        """Test a JSON array is not a draft."""
        with pytest.raises(ProviderError):
            parse_provider_text("[1, 2, 3]")

    def test_empty(self):
        """Test empty replies."""
        with pytest.raises(ProviderError):
            parse_provider_text("")


class TestDraftingAgent:
    """Tests for DraftingAgent.propose_draft."""

    def test_unconfigured(self):
        """Test no key and no model means unconfigured."""
        agent = DraftingAgent(settings=settings())
        assert agent.is_configured is False
        result = asyncio.run(agent.propose_draft("sold 10 chairs"))
        assert result.ok is False
        assert result.failure == ProviderFailure.UNCONFIGURED

    def test_valid_reply(self):
        """Test a fenced JSON reply becomes a draft."""
        model = FakeModel(reply=(
            '```json\n{"intent": "create_invoice", "confidence": 0.9, '
            '"readyToExecute": true, "data": {"partnerName": "Acme"}, "message": "ok"}\n```'
        ))
        agent = DraftingAgent(settings=settings(), model=model)
        result = asyncio.run(agent.propose_draft("sold chairs to acme"))
        assert result.ok
        assert result.draft.intent == Intent.CREATE_INVOICE
        assert result.draft.data == {"partnerName": "Acme"}
        assert 'USER REQUEST: "sold chairs to acme"' in model.prompts[0]

    def test_request_failure(self):
        """Test a raising model is a request failure, not an exception."""
        agent = DraftingAgent(settings=settings(), model=FakeModel(error=RuntimeError("quota")))
        result = asyncio.run(agent.propose_draft("sold chairs"))
        assert result.failure == ProviderFailure.REQUEST_FAILED
        assert "quota" in str(result.error)

    def test_hung_model_times_out(self):
        """Test a model that never answers is a request failure."""
        agent = DraftingAgent(settings=settings(timeout_seconds=0.05), model=HangingModel())
        result = asyncio.run(agent.propose_draft("rent 50000"))
        assert result.ok is False
        assert result.failure == ProviderFailure.REQUEST_FAILED
        assert "No reply within" in str(result.error)

    def test_invalid_output(self):
        """Test a prose reply is an invalid output."""
        agent = DraftingAgent(settings=settings(), model=FakeModel(reply="I am not sure."))
        result = asyncio.run(agent.propose_draft("sold chairs"))
        assert result.failure == ProviderFailure.INVALID_OUTPUT


class TestPrompt:
    """Tests for prompt building."""

    def test_prompt_includes_hints(self):
        """Test tenant hints are rendered into the prompt."""
        hints = ContextHints(accounts=[AccountRecord(code="101", name="Cash", type="Asset")])
        prompt = build_drafting_prompt("rent 500", hints)
        assert "101:Cash (Asset)" in prompt
        assert "(No partners available)" in prompt
        assert prompt.endswith('USER REQUEST: "rent 500"')
