"""
Claude API service for finding rental listings.

Turns SearchCriteria into a single natural-language instruction, sends it
to the Anthropic Messages API and hands back whatever came out, either an
array of listings (structured output) or a wrapper around the raw text.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from anthropic import AsyncAnthropic

from rental_finder.config import Settings
from rental_finder.models.rental import GeneratedTextPayload, SearchCriteria

logger = logging.getLogger(__name__)

Payload = Union[List[Any], Dict[str, Any]]

RENTAL_PROPERTY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "Listing headline"},
        "price": {"type": "string", "description": "Monthly rent, e.g. '$2,400/mo'"},
        "bedrooms": {"type": "integer"},
        "bathrooms": {"type": "integer"},
        "location": {"type": "string", "description": "Address or neighbourhood"},
        "source": {"type": "string", "description": "Name of the listing site"},
        "url": {"type": "string", "description": "Direct link to the listing"},
    },
    "required": ["title", "price", "bedrooms", "bathrooms", "location", "source", "url"],
}

# Forcing this tool is how the Messages API constrains output to a schema
LISTINGS_TOOL: Dict[str, Any] = {
    "name": "report_rental_listings",
    "description": "Report the rental listings that match the search.",
    "input_schema": {
        "type": "object",
        "properties": {
            "listings": {"type": "array", "items": RENTAL_PROPERTY_SCHEMA},
        },
        "required": ["listings"],
    },
}

SEARCH_SYSTEM_PROMPT = """You are a rental search assistant. You look for rental listings that are currently advertised online and report them faithfully.

Guidelines:
- Only report listings that match every stated constraint
- Keep prices formatted as they appear on the listing site
- Use whole numbers for bedroom and bathroom counts
- If nothing matches, report an empty list"""

NO_CONTENT_TEXT = "No content generated."


def _count_phrase(value: str, noun: str) -> str:
    value = value.strip()
    if not value or value.lower() == "any":
        return f"any number of {noun}s"
    return f"{value} {noun}" if value == "1" else f"{value} {noun}s"


def _price_phrase(min_price: str, max_price: str) -> str:
    low, high = min_price.strip(), max_price.strip()
    if low and high:
        return f"between ${low} and ${high} per month"
    if low:
        return f"at least ${low} per month"
    if high:
        return f"at most ${high} per month"
    return "any amount per month"


def build_search_prompt(criteria: SearchCriteria) -> str:
    """
    Build the instruction sent to the completion service.

    The housing-type sentence is left out entirely when the criteria
    accept any kind of housing.
    """
    lines = [
        f"Find rental listings in {criteria.location}.",
        f"The rent should be {_price_phrase(criteria.min_price, criteria.max_price)}.",
        (
            f"Each place should have {_count_phrase(criteria.bedrooms, 'bedroom')} "
            f"and {_count_phrase(criteria.bathrooms, 'bathroom')}."
        ),
    ]
    if criteria.housing_type != "any":
        article = "an" if criteria.housing_type[0] in "aeiou" else "a"
        lines.append(f"Only include places that are {article} {criteria.housing_type}.")
    lines.append(
        "Respond with a JSON array only. Each object must have the fields "
        '"title" (string), "price" (string), "bedrooms" (integer), '
        '"bathrooms" (integer), "location" (string), "source" (string naming '
        'the listing site) and "url" (string linking to the listing). '
        "If nothing matches, respond with an empty array."
    )
    return "\n".join(lines)


class ClaudeService:
    """Service for asking Claude to find rental listings."""

    def __init__(self, settings: Settings, client: Optional[AsyncAnthropic] = None) -> None:
        """
        Initialize the Claude service.

        Args:
            settings: Application settings containing API configuration.
            client: Pre-built Anthropic client, mainly for tests.
        """
        # max_retries=0: one upstream request per search, the user retries
        self.client = client or AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            max_retries=0,
        )
        self.model = settings.claude_model
        self.max_tokens = settings.claude_max_tokens
        self.temperature = settings.claude_temperature
        self.structured_output = settings.structured_output

    async def find_rentals(self, criteria: SearchCriteria) -> Payload:
        """
        Ask the completion service for listings matching the criteria.

        Args:
            criteria: Search criteria from the form.

        Returns:
            A list of listing dicts when the service answered through the
            listings tool, otherwise ``{"generatedText": <text>}``.

        Raises:
            anthropic.APIError: If the API request fails.
        """
        prompt = build_search_prompt(criteria)
        return await self.complete(prompt, structured=self.structured_output)

    async def complete(self, prompt: str, structured: bool = False) -> Payload:
        """
        Send one prompt and decode the reply into a payload.

        Args:
            prompt: Instruction text.
            structured: Force the listings tool so the reply follows the
                RentalProperty schema.
        """
        logger.info("Sending prompt to %s: %s", self.model, prompt[:100])

        request: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": SEARCH_SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
        }
        if structured:
            request["tools"] = [LISTINGS_TOOL]
            request["tool_choice"] = {"type": "tool", "name": LISTINGS_TOOL["name"]}

        message = await self.client.messages.create(**request)
        logger.debug("Claude stop reason: %s", getattr(message, "stop_reason", None))

        return self._to_payload(message.content)

    def _to_payload(self, content: List[Any]) -> Payload:
        """
        Convert response content blocks to the payload returned to clients.

        A tool call carrying a ``listings`` array wins; otherwise the text
        blocks are joined into a wrapper for the client to decode.
        """
        texts = []
        for block in content:
            block_type = getattr(block, "type", None)
            if block_type == "tool_use":
                tool_input = getattr(block, "input", None)
                if isinstance(tool_input, dict) and isinstance(tool_input.get("listings"), list):
                    logger.info("Received %d listings from tool call", len(tool_input["listings"]))
                    return tool_input["listings"]
                logger.warning("Tool call without a listings array: %s", tool_input)
            elif block_type == "text":
                texts.append(block.text)

        generated_text = "".join(texts).strip() or NO_CONTENT_TEXT
        logger.info("Returning generated text (%d chars)", len(generated_text))
        return GeneratedTextPayload(generated_text=generated_text).model_dump(by_alias=True)


def get_claude_service(settings: Settings) -> ClaudeService:
    """
    Build a Claude service for one request.

    The service and its credential are tied to the ``settings`` passed in;
    nothing is cached at module level.
    """
    return ClaudeService(settings)
