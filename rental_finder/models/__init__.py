from .rental import (
    ERROR_MARKER_SOURCE,
    ErrorResponse,
    GeneratedTextPayload,
    HousingType,
    PromptRequest,
    RentalProperty,
    SavedSearch,
    SearchCriteria,
    coerce_count,
)

__all__ = [
    "ERROR_MARKER_SOURCE",
    "ErrorResponse",
    "GeneratedTextPayload",
    "HousingType",
    "PromptRequest",
    "RentalProperty",
    "SavedSearch",
    "SearchCriteria",
    "coerce_count",
]
