import json
from unittest.mock import AsyncMock, patch

import anthropic
import httpx
import pytest

from app.exceptions import ConfigurationError, UpstreamFailure
from app.schemas.extraction import RawExtraction
from app.services.claude_service import ClaudeService, build_extraction_prompt

from conftest import make_claude_response, make_settings


@pytest.mark.asyncio
async def test_extract_inquiry_parses_json(sample_ai_extraction):
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response(sample_ai_extraction)
        result = await service.extract_inquiry("Quote request", "jane@acme.example", "body")

    assert isinstance(result.extraction, RawExtraction)
    assert result.model == "claude-sonnet-4-20250514"
    assert result.payload == sample_ai_extraction
    assert result.extraction.customer.name == "Acme"
    assert len(result.extraction.items) == 3


@pytest.mark.asyncio
async def test_extract_inquiry_handles_markdown_wrapped_json(sample_ai_extraction):
    service = ClaudeService(make_settings())

    wrapped = f"```json\n{json.dumps(sample_ai_extraction)}\n```"
    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response(wrapped)
        result = await service.extract_inquiry("s", "f", "b")

    assert result.extraction.delivery.company_name == "Acme Warehouse"


@pytest.mark.asyncio
async def test_extract_inquiry_raises_on_invalid_json():
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response("This is not JSON at all")

        with pytest.raises(UpstreamFailure, match="not valid JSON"):
            await service.extract_inquiry("s", "f", "b")


@pytest.mark.asyncio
async def test_extract_inquiry_rejects_unexpected_top_level_keys():
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response({"items": [], "invoice_number": "X"})

        with pytest.raises(UpstreamFailure, match="did not match the inquiry shape"):
            await service.extract_inquiry("s", "f", "b")


@pytest.mark.asyncio
async def test_extract_inquiry_rejects_non_object_payload():
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response("[1, 2, 3]")

        with pytest.raises(UpstreamFailure, match="not a JSON object"):
            await service.extract_inquiry("s", "f", "b")


@pytest.mark.asyncio
async def test_extract_inquiry_raises_on_empty_content():
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response("   ")

        with pytest.raises(UpstreamFailure, match="empty content"):
            await service.extract_inquiry("s", "f", "b")


@pytest.mark.asyncio
async def test_extract_inquiry_surfaces_api_status_code():
    service = ClaudeService(make_settings())
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(529, request=request)
    error = anthropic.APIStatusError("Overloaded", response=response, body=None)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.side_effect = error

        with pytest.raises(UpstreamFailure, match="Claude error 529") as exc_info:
            await service.extract_inquiry("s", "f", "b")

    assert exc_info.value.code == 529


@pytest.mark.asyncio
async def test_extract_inquiry_requires_api_key():
    service = ClaudeService(make_settings(anthropic_api_key=""))

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            await service.extract_inquiry("s", "f", "b")

    mock_create.assert_not_called()


@pytest.mark.asyncio
async def test_extract_inquiry_sends_model_prompt_and_zero_temperature(sample_ai_extraction):
    settings = make_settings(claude_model="claude-haiku-4-5-20251001")
    service = ClaudeService(settings)

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response(sample_ai_extraction)
        await service.extract_inquiry("Quote request", "jane@acme.example", "please quote")

    call_kwargs = mock_create.call_args.kwargs
    assert call_kwargs["model"] == "claude-haiku-4-5-20251001"
    assert call_kwargs["temperature"] == 0
    prompt = call_kwargs["messages"][0]["content"]
    assert "Subject: Quote request" in prompt
    assert "From: jane@acme.example" in prompt
    assert prompt.endswith("please quote")


def test_build_extraction_prompt_truncates_body():
    prompt = build_extraction_prompt("s", "f", "x" * 50, max_chars=10)
    assert prompt.endswith("Body:\n" + "x" * 10)
    assert "Allowed top-level keys: customer, delivery, items" in prompt


@pytest.mark.asyncio
async def test_extract_inquiry_raises_on_truncated_fenced_json():
    service = ClaudeService(make_settings())

    with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock_create:
        mock_create.return_value = make_claude_response('```json\n{"items": [{"brand": "ABC"')

        with pytest.raises(UpstreamFailure, match="not valid JSON"):
            await service.extract_inquiry("s", "f", "b")
