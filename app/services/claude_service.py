"""
Claude API service for inquiry extraction from email.

Sends the email subject, sender and body to Claude and validates the returned
JSON envelope against RawExtraction. Values inside the envelope are left
untyped; normalization happens downstream.
"""

import json
import logging
from dataclasses import dataclass

import anthropic
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import ConfigurationError, UpstreamFailure
from app.schemas.extraction import RawExtraction

logger = logging.getLogger("intake.claude")

EXTRACTION_SYSTEM_PROMPT = "Output strict JSON only."

INQUIRY_EXTRACTION_INSTRUCTIONS = """Extract inquiry data from this email.
Return STRICT JSON only. No markdown, no explanation.
Allowed top-level keys: customer, delivery, items
Allowed customer keys: name, country, billing_address, contact_person, contact_phone, contact_email
Allowed delivery keys: company_name, address, contact_person, phone, email
Allowed item keys: brand, catalog_number, quantity
If uncertain, use null."""


@dataclass
class AiExtraction:
    """Validated extraction envelope plus the payload it came from."""

    model: str
    payload: dict
    extraction: RawExtraction


def _parse_json_response(response_text: str) -> dict:
    """Parse JSON from Claude response, handling markdown code blocks."""
    text = response_text.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse Claude response as JSON: %s", e)
        raise UpstreamFailure(f"Claude response was not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise UpstreamFailure("Claude response was not a JSON object.")
    return payload


def build_extraction_prompt(subject: str, sender: str, body: str, max_chars: int) -> str:
    return "\n".join([
        INQUIRY_EXTRACTION_INSTRUCTIONS,
        "",
        f"Subject: {subject}",
        f"From: {sender}",
        "Body:",
        body[:max_chars],
    ])


class ClaudeService:
    def __init__(self, settings: Settings):
        self.api_key = settings.anthropic_api_key.strip()
        self.client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        self.model = settings.claude_model
        self.max_tokens = settings.claude_max_tokens
        self.body_max_chars = settings.extraction_body_max_chars

    def check_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("Missing ANTHROPIC_API_KEY")

    async def extract_inquiry(self, subject: str, sender: str, body: str) -> AiExtraction:
        """Extract a raw inquiry from one email.

        Raises:
            ConfigurationError: no API key is configured.
            UpstreamFailure: the API call failed, or the reply was empty, not
                JSON, or not shaped like an inquiry.
        """
        self.check_configured()
        prompt = build_extraction_prompt(subject, sender, body, self.body_max_chars)

        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0,
                system=EXTRACTION_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise UpstreamFailure(f"Claude error {e.status_code}: {e.message}", code=e.status_code) from e
        except anthropic.APIError as e:
            raise UpstreamFailure(f"Claude request failed: {e}") from e

        content = message.content[0].text.strip() if message.content else ""
        if not content:
            raise UpstreamFailure("Claude returned empty content.")

        payload = _parse_json_response(content)
        try:
            extraction = RawExtraction.model_validate(payload)
        except ValidationError as e:
            logger.error("Claude response did not match the inquiry shape: %s", e)
            raise UpstreamFailure(f"Claude response did not match the inquiry shape: {e}") from e

        return AiExtraction(model=self.model, payload=payload, extraction=extraction)
