"""Response Parser Module

Turns the text generated by the model into JSON.

This module handles:
- Pulling the generated text out of a generateContent response body
- Parsing the text as JSON directly
- Falling back to the first fenced code block (```json ... ```)
- Unwrapping ``{"raw_text": ...}`` envelopes
"""

import json
import re
from typing import Any, Dict

from docextract.observability.logging import get_logger
from docextract.utils.exceptions import JSONParseError, ResponseFormatError

logger = get_logger("response_parser")

CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_generated_text(response_json: Dict[str, Any]) -> str:
    """Return the first text part of the first candidate.

    Raises:
        ResponseFormatError: If the response has no candidate text
    """
    try:
        text = response_json["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise ResponseFormatError("Failed to extract data from the API response")

    if not isinstance(text, str):
        raise ResponseFormatError("Candidate text part is not a string")
    return text


def extract_json_from_raw_text(raw_text: str) -> Any:
    """Parse JSON from model output that may wrap it in a markdown fence.

    Args:
        raw_text: Model output, optionally a ``{"raw_text": ...}`` envelope

    Returns:
        The parsed JSON value

    Raises:
        JSONParseError: If neither a code block nor the whole text is JSON
    """
    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, dict) and isinstance(parsed.get("raw_text"), str):
        return extract_json_from_raw_text(parsed["raw_text"])
    if parsed is not None:
        return parsed

    match = CODE_BLOCK_PATTERN.search(raw_text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as e:
            raise JSONParseError(f"Failed to parse extracted JSON: {e}")

    raise JSONParseError("Failed to parse text as JSON and no code blocks were found")


def parse_generated_content(response_json: Dict[str, Any]) -> Any:
    """Generated text as JSON, or ``{"raw_text": text}`` when unparseable."""
    text = extract_generated_text(response_json)
    try:
        return extract_json_from_raw_text(text)
    except JSONParseError as e:
        logger.warning(
            "response_not_json_returning_raw_text",
            error=str(e),
            text_length=len(text),
        )
        return {"raw_text": text}
