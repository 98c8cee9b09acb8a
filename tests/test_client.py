"""Tests for the rental search client against a mocked proxy."""

import json

import httpx
import pytest

from rental_finder.client import GENERIC_SERVER_ERROR, RentalSearchClient
from rental_finder.errors import FormatError, NetworkError, ServerError

PROPERTY = {
    "title": "A",
    "price": "$1",
    "bedrooms": "2",
    "bathrooms": 1,
    "location": "X",
    "source": "Y",
    "url": "u1",
}


def make_client(handler) -> RentalSearchClient:
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return RentalSearchClient("http://proxy.test/", http_client=http_client)


def respond(status_code=200, **kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, **kwargs)

    return handler


def test_posts_criteria_with_wire_names(criteria):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    make_client(handler).search(criteria)

    request = seen[0]
    assert request.method == "POST"
    assert request.url == "http://proxy.test/api/findRentals"
    assert json.loads(request.content) == {
        "location": "San Francisco, CA",
        "minPrice": "1000",
        "maxPrice": "3500",
        "bedrooms": "2",
        "bathrooms": "1",
        "housingType": "apartment",
    }


def test_array_body_is_decoded(criteria):
    results = make_client(respond(json=[PROPERTY])).search(criteria)

    assert len(results) == 1
    assert results[0].bedrooms == 2
    assert results[0].bathrooms == 1


def test_fenced_wrapper_is_decoded(criteria):
    body = {"generatedText": "```json\n" + json.dumps([PROPERTY]) + "\n```"}

    results = make_client(respond(json=body)).search(criteria)

    assert [p.url for p in results] == ["u1"]


def test_uninterpretable_wrapper_yields_error_marker(criteria):
    body = {"generatedText": "Sorry, I cannot help."}

    results = make_client(respond(json=body)).search(criteria)

    assert len(results) == 1
    marker = results[0]
    assert marker.is_error_marker
    assert marker.title == "Parsing Error"
    assert marker.price == "$1000 - $3500"
    assert marker.bedrooms == 2
    assert "Sorry, I cannot help." in marker.description


def test_strict_mode_raises_format_error(criteria):
    body = {"generatedText": "Sorry, I cannot help."}

    with pytest.raises(FormatError):
        make_client(respond(json=body)).search(criteria, strict=True)


def test_non_json_success_body_yields_error_marker(criteria):
    results = make_client(respond(text="<html>oops</html>")).search(criteria)

    assert results[0].is_error_marker


def test_server_error_uses_proxy_message(criteria):
    client = make_client(respond(500, json={"message": "boom"}))

    with pytest.raises(ServerError) as excinfo:
        client.search(criteria)

    assert str(excinfo.value) == "boom"
    assert excinfo.value.status_code == 500


def test_server_error_without_message_uses_fallback(criteria):
    client = make_client(respond(502, text="Bad Gateway"))

    with pytest.raises(ServerError) as excinfo:
        client.search(criteria)

    assert excinfo.value.message == GENERIC_SERVER_ERROR


def test_transport_failure_is_network_error(criteria):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        make_client(handler).search(criteria)


def test_array_of_numbers_in_prose_yields_error_marker(criteria):
    body = {"generatedText": "Typical rents there are [1200, 1500] per month."}

    results = make_client(respond(json=body)).search(criteria)

    assert len(results) == 1
    assert results[0].is_error_marker


def test_infinite_room_count_is_coerced_to_zero(criteria):
    body = {"generatedText": '[{"title":"A","bedrooms":1e999,"url":"u"}]'}

    results = make_client(respond(json=body)).search(criteria)

    assert [(p.title, p.bedrooms) for p in results] == [("A", 0)]
