"""Tests for the search session controller."""

from rental_finder.errors import NetworkError, ServerError
from rental_finder.models.rental import RentalProperty, SearchCriteria
from rental_finder.session import UNKNOWN_ERROR, SearchSession


class StubClient:
    def __init__(self, result=None, error=None):
        self.result = result or []
        self.error = error

    def search(self, criteria):
        if self.error is not None:
            raise self.error
        return self.result


def test_stale_results_are_discarded(criteria):
    session = SearchSession()
    old = session.begin(criteria)
    new = session.begin(SearchCriteria(location="Boston, MA"))

    assert session.complete(new, [RentalProperty(url="new")]) is True
    assert session.complete(old, [RentalProperty(url="old")]) is False

    assert [p.url for p in session.results] == ["new"]
    assert session.criteria.location == "Boston, MA"


def test_stale_error_does_not_clobber_newer_search(criteria):
    session = SearchSession()
    old = session.begin(criteria)
    new = session.begin(criteria)

    assert session.fail(old, "late failure") is False
    assert session.error is None
    assert session.is_loading is True

    session.complete(new, [])
    assert session.is_loading is False


def test_begin_clears_previous_state(criteria):
    session = SearchSession()
    token = session.begin(criteria)
    session.fail(token, "boom")

    session.begin(criteria)

    assert session.error is None
    assert session.results == []
    assert session.is_loading is True


def test_run_stores_results(criteria):
    session = SearchSession()

    assert session.run(StubClient(result=[RentalProperty(url="u1")]), criteria) is True

    assert [p.url for p in session.results] == ["u1"]
    assert session.is_loading is False
    assert session.error is None


def test_run_surfaces_server_message(criteria):
    session = SearchSession()

    session.run(StubClient(error=ServerError("boom", status_code=500)), criteria)

    assert session.error == "boom"
    assert session.is_loading is False


def test_run_surfaces_network_error(criteria):
    session = SearchSession()

    session.run(StubClient(error=NetworkError("An unexpected network error occurred.")), criteria)

    assert session.error == "An unexpected network error occurred."


def test_run_never_leaks_unexpected_errors(criteria):
    session = SearchSession()

    session.run(StubClient(error=KeyError("x")), criteria)

    assert session.error == UNKNOWN_ERROR
    assert session.is_loading is False
