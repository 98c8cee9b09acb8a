from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from rental_finder.api import routes
from rental_finder.config import Settings
from rental_finder.main import create_app
from rental_finder.models.rental import SearchCriteria

LISTING: Dict[str, Any] = {
    "title": "Sunny 2BR near the park",
    "price": "$2,400/mo",
    "bedrooms": 2,
    "bathrooms": 1,
    "location": "Mission District, San Francisco",
    "source": "Zillow",
    "url": "https://example.com/listings/1",
}


class FakeService:
    """Stands in for ClaudeService inside the route."""

    def __init__(self, result: Any = None, error: Exception = None) -> None:
        self.result = result if result is not None else [LISTING]
        self.error = error
        self.criteria: List[SearchCriteria] = []
        self.prompts: List[str] = []

    async def find_rentals(self, criteria):
        self.criteria.append(criteria)
        if self.error is not None:
            raise self.error
        return self.result

    async def complete(self, prompt, structured=False):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.result


class FakeMessages:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeAnthropic:
    """Minimal AsyncAnthropic lookalike exposing ``messages.create``."""

    def __init__(self, result: Any) -> None:
        self.messages = FakeMessages(result)


def tool_message(listings):
    block = SimpleNamespace(type="tool_use", name="report_rental_listings", input={"listings": listings})
    return SimpleNamespace(content=[block], stop_reason="tool_use")


def text_message(*texts):
    blocks = [SimpleNamespace(type="text", text=t) for t in texts]
    return SimpleNamespace(content=blocks, stop_reason="end_turn")


@pytest.fixture
def settings() -> Settings:
    return Settings(anthropic_api_key="test-key", _env_file=None)


@pytest.fixture
def criteria() -> SearchCriteria:
    return SearchCriteria(
        location="San Francisco, CA",
        min_price="1000",
        max_price="3500",
        bedrooms="2",
        bathrooms="1",
        housing_type="apartment",
    )


@pytest.fixture
def fake_service(monkeypatch) -> FakeService:
    service = FakeService()
    monkeypatch.setattr(routes, "get_claude_service", lambda settings: service)
    return service


@pytest.fixture
def api(settings) -> TestClient:
    return TestClient(create_app(settings), raise_server_exceptions=False)
