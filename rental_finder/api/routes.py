"""
API routes for the rental search proxy.
"""

import logging
from typing import Annotated, Any, Dict, List, Union

import anthropic
from fastapi import APIRouter, Depends

from rental_finder.config import Settings, get_settings
from rental_finder.errors import ServerConfigurationError, UpstreamError
from rental_finder.models.rental import ErrorResponse, PromptRequest, SearchCriteria
from rental_finder.services.claude_service import ClaudeService, get_claude_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


def require_credential(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Settings:
    """Dependency that rejects the request when no API key is configured."""
    if not settings.anthropic_api_key:
        logger.error("ANTHROPIC_API_KEY not found in environment variables")
        raise ServerConfigurationError("The ANTHROPIC_API_KEY setting is not configured.")
    return settings


def get_service(
    settings: Annotated[Settings, Depends(require_credential)],
) -> ClaudeService:
    """Dependency that provides a completion service bound to ``settings``."""
    return get_claude_service(settings)


@router.post(
    "/findRentals",
    response_model=None,
    summary="Find rental listings",
    description=(
        "Forward search criteria to the completion service and return either "
        "an array of listings or a {generatedText} wrapper for the client to decode."
    ),
    responses={
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def find_rentals(
    request: Union[SearchCriteria, PromptRequest],
    service: Annotated[ClaudeService, Depends(get_service)],
) -> Union[List[Any], Dict[str, Any]]:
    """
    Find rental listings for the given criteria.

    This endpoint:
    1. Builds one natural-language instruction from the criteria
    2. Issues exactly one request to the completion service
    3. Returns the decoded payload unmodified

    Args:
        request: Search criteria, or a raw prompt from older clients.
        service: Injected completion service.

    Returns:
        A JSON array of listings or ``{"generatedText": ...}``.

    Raises:
        UpstreamError: If the completion service fails or is unreachable.
    """
    try:
        if isinstance(request, PromptRequest):
            logger.info("Received raw prompt: %s", request.prompt[:100])
            return await service.complete(request.prompt)

        logger.info("Received search criteria: %s", request.model_dump(by_alias=True))
        return await service.find_rentals(request)

    except anthropic.APIStatusError as e:
        logger.error("Anthropic API error (%s): %s", e.status_code, e.body)
        raise UpstreamError(
            f"Completion service error ({e.status_code}): {e.body if e.body is not None else e.message}",
            status_code=e.status_code,
            body=e.body,
        ) from e

    except anthropic.APIConnectionError as e:
        logger.error("Failed to connect to Anthropic API: %s", e)
        raise UpstreamError(
            "Failed to connect to the completion service. Please try again later.",
        ) from e
