"""Turn unstructured document text into a fixed-schema object via an LLM.

The upstream model is not schema-constrained, so replies are recovered on a
best-effort basis: a fenced code block is unwrapped first, then the span from
the first ``{`` to the last ``}`` is parsed. That span is permissive and will
include stray braces from surrounding prose.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import Settings, get_settings
from .openrouter_client import OpenRouterError, chat as openrouter_chat

LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS = ("documentType", "vendor", "date", "description")

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")

ChatFunc = Callable[[List[Dict[str, str]]], str]


class StructuredExtractionError(RuntimeError):
    """Raised when structured data cannot be obtained from document text."""


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str
    amount: float


class ExtractedData(BaseModel):
    """Fields extracted from a document by the language model."""

    model_config = ConfigDict(extra="ignore")

    documentType: str
    vendor: str
    amount: float | None = None
    date: str
    description: str
    lineItems: list[LineItem] | None = None

    def to_record(self) -> dict[str, Any]:
        """Return the JSON payload stored on the document (absent optionals omitted)."""

        return self.model_dump(exclude_none=True)


def build_prompt(text: str) -> str:
    """Return the extraction prompt for ``text``."""

    return f"""You are a document parsing assistant. Extract structured data from the following document text and return it as JSON.

Please extract the following information:
- documentType: The type of document (e.g., "invoice", "receipt", "contract", "letter", "report")
- vendor: The company or person name associated with this document
- amount: The total amount (if applicable, as a number)
- date: The document date in ISO format (YYYY-MM-DD)
- description: A brief description of the document
- lineItems: An array of line items with description and amount (if applicable)

Return ONLY valid JSON matching this schema:
{{
  "documentType": string,
  "vendor": string,
  "amount": number | undefined,
  "date": string,
  "description": string,
  "lineItems": [{{ "description": string, "amount": number }}] | undefined
}}

Document text:
{text} Return ONLY the structured data with no additional words, no markdown files"""


def extract_json(text: str) -> str:
    """Return the JSON object substring embedded in a model reply."""

    cleaned = (text or "").strip()

    if "```json" in cleaned:
        match = _JSON_FENCE.search(cleaned)
        if match:
            cleaned = match.group(1).strip()
    elif "```" in cleaned:
        match = _ANY_FENCE.search(cleaned)
        if match:
            cleaned = match.group(1).strip()

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        return cleaned[first : last + 1]

    raise StructuredExtractionError("No JSON object found in response")


def _settings_chat(settings: Settings) -> ChatFunc:
    def _chat(messages: List[Dict[str, str]]) -> str:
        return openrouter_chat(
            messages,
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            url=settings.openrouter_url,
            site_url=settings.openrouter_http_referer,
            title=settings.openrouter_title,
            timeout=settings.openrouter_timeout_s,
        )

    return _chat


def parse_extracted_data(reply: str) -> ExtractedData:
    """Recover, parse, and validate the structured payload from a model reply."""

    payload_text = extract_json(reply)
    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError as exc:
        raise StructuredExtractionError(f"Invalid JSON in response: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise StructuredExtractionError("Response JSON is not an object")
    if any(not payload.get(field) for field in REQUIRED_FIELDS):
        raise StructuredExtractionError("Missing required fields in extracted data")

    try:
        return ExtractedData.model_validate(payload)
    except ValidationError as exc:
        raise StructuredExtractionError(
            f"Extracted data does not match schema: {exc.error_count()} error(s)"
        ) from exc


def extract_structured_data(
    text: str,
    *,
    settings: Settings | None = None,
    chat_func: ChatFunc | None = None,
) -> ExtractedData:
    """Ask the language model for structured fields describing ``text``."""

    settings = settings or get_settings()
    if chat_func is None:
        if not settings.openrouter_api_key:
            raise StructuredExtractionError(
                "Failed to extract data from text: OPENROUTER_API_KEY is not configured"
            )
        chat_func = _settings_chat(settings)

    messages = [{"role": "user", "content": build_prompt(text)}]
    try:
        reply = chat_func(messages)
        return parse_extracted_data(reply)
    except (OpenRouterError, StructuredExtractionError) as exc:
        LOGGER.error("Structured extraction failed: %s", exc)
        raise StructuredExtractionError(f"Failed to extract data from text: {exc}") from exc


__all__ = [
    "ExtractedData",
    "LineItem",
    "REQUIRED_FIELDS",
    "StructuredExtractionError",
    "build_prompt",
    "extract_json",
    "extract_structured_data",
    "parse_extracted_data",
]
