"""
Interpretation of proxy success payloads.

The proxy returns either a JSON array of listings or a wrapper object
``{"generatedText": "..."}`` whose text may be fenced in markdown or
surrounded by prose. This module classifies the payload and recovers a
list of RentalProperty records from it.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from rental_finder.errors import FormatError
from rental_finder.models.rental import RentalProperty

logger = logging.getLogger(__name__)

GENERATED_TEXT_FIELD = "generatedText"
FENCE = "```"
DIAGNOSTIC_PREFIX_LENGTH = 200


@dataclass(frozen=True)
class ArrayPayload:
    items: List[Any]


@dataclass(frozen=True)
class WrapperPayload:
    text: str


@dataclass(frozen=True)
class UnknownPayload:
    body: Any


Payload = Union[ArrayPayload, WrapperPayload, UnknownPayload]


def classify_payload(body: Any) -> Payload:
    """Decide which shape a decoded body has, checking for an array first."""
    if isinstance(body, list):
        return ArrayPayload(body)
    if isinstance(body, dict) and isinstance(body.get(GENERATED_TEXT_FIELD), str):
        return WrapperPayload(body[GENERATED_TEXT_FIELD])
    return UnknownPayload(body)


def strip_code_fence(text: str) -> str:
    """
    Remove one surrounding fenced code block, if there is one.

    The opening fence may carry a language tag (```json). Text that does
    not both start and end with a fence is returned stripped but otherwise
    unchanged.
    """
    stripped = text.strip()
    if not (stripped.startswith(FENCE) and stripped.endswith(FENCE) and len(stripped) >= 2 * len(FENCE)):
        return stripped

    inner = stripped[len(FENCE):-len(FENCE)]
    first_newline = inner.find("\n")
    # Drop the language tag on the opening fence line
    if first_newline != -1 and not inner[:first_newline].strip().startswith(("[", "{")):
        inner = inner[first_newline + 1:]
    return inner.strip()


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except ValueError:
        return None


def extract_json_array(text: str) -> Optional[List[Any]]:
    """
    Recover a JSON array from free-form model text.

    Tries the (fence-stripped) text as a whole first, then the substring
    from the first ``[`` to the last ``]``. Returns None when neither
    parses to an array.
    """
    candidate = strip_code_fence(text)
    parsed = _loads(candidate)
    if isinstance(parsed, list):
        return parsed

    start = candidate.find("[")
    end = candidate.rfind("]")
    if start != -1 and end != -1 and start < end:
        parsed = _loads(candidate[start:end + 1])
        if isinstance(parsed, list):
            return parsed
    return None


def _to_properties(items: List[Any], source_text: str) -> List[RentalProperty]:
    """
    Validate listing objects, keeping the first listing seen for each url.

    Raises:
        FormatError: If the array has entries but none is a usable listing.
    """
    properties = []
    seen_urls = set()
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object listing: %r", item)
            continue
        try:
            prop = RentalProperty.model_validate(item)
        except PydanticValidationError as e:
            logger.warning("Failed to parse listing: %s - %s", e, item)
            continue
        if prop.url in seen_urls:
            logger.info("Dropping duplicate listing for url %r", prop.url)
            continue
        seen_urls.add(prop.url)
        properties.append(prop)

    if items and not properties:
        prefix = source_text[:DIAGNOSTIC_PREFIX_LENGTH]
        logger.warning("No usable listing objects in response: %s", prefix)
        raise FormatError(
            "The AI response did not contain any property listings.",
            text=prefix,
        )
    return properties


def decode_properties(body: Any) -> List[RentalProperty]:
    """
    Interpret a proxy success body as a list of rental properties.

    An empty array is a valid result. Anything that cannot be read as an
    array of listings, even after fence stripping and bracket scanning,
    raises. Listings sharing a url are collapsed to the first one.

    Raises:
        FormatError: With a truncated prefix of the offending text.
    """
    payload = classify_payload(body)

    if isinstance(payload, ArrayPayload):
        return _to_properties(payload.items, json.dumps(payload.items, default=str))

    if isinstance(payload, WrapperPayload):
        items = extract_json_array(payload.text)
        if items is None:
            prefix = payload.text[:DIAGNOSTIC_PREFIX_LENGTH]
            logger.warning("Could not find a JSON array in generated text: %s", prefix)
            raise FormatError(
                "The AI response could not be parsed as a list of properties.",
                text=prefix,
            )
        return _to_properties(items, payload.text)

    prefix = json.dumps(payload.body, default=str)[:DIAGNOSTIC_PREFIX_LENGTH]
    raise FormatError("The server returned an unrecognised response.", text=prefix)
