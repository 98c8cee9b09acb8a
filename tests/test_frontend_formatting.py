"""Tests for the pure formatting helpers of the Streamlit UI."""

from frontend.app import format_criteria, format_property
from rental_finder.models.rental import ERROR_MARKER_SOURCE, RentalProperty, SearchCriteria


def test_format_criteria_full():
    criteria = SearchCriteria(
        location="Seattle, WA",
        min_price="1500",
        max_price="3000",
        bedrooms="2",
        bathrooms="1",
        housing_type="condo",
    )

    assert format_criteria(criteria) == "2 beds, 1 bath, $1500 - $3000, condo"


def test_format_criteria_skips_any_values():
    criteria = SearchCriteria(location="Seattle, WA", max_price="2000")

    assert format_criteria(criteria) == "$0 - $2000"


def test_format_property_links_source():
    prop = RentalProperty(
        title="Loft",
        price="$2,000/mo",
        bedrooms=1,
        bathrooms=1,
        location="Capitol Hill",
        source="Craigslist",
        url="https://example.com/loft",
    )

    text = format_property(prop)

    assert "**Loft**" in text
    assert "1 bed | 1 bath | Capitol Hill" in text
    assert "[View on Craigslist](https://example.com/loft)" in text


def test_format_error_marker_shows_description():
    marker = RentalProperty(
        title="Parsing Error",
        source=ERROR_MARKER_SOURCE,
        url="#",
        description="Could not read the response.",
    )

    assert format_property(marker) == "**Parsing Error**\n\n_Could not read the response._"


def _results_with_shared_urls():
    import streamlit as st

    from frontend.app import render_favorites, render_results
    from rental_finder.library import RentalLibrary
    from rental_finder.models.rental import RentalProperty, SearchCriteria
    from rental_finder.session import SearchSession
    from rental_finder.storage import MemoryStore, PersistenceAdapter

    library = RentalLibrary(PersistenceAdapter(MemoryStore()))
    library.toggle_favorite(RentalProperty(title="Saved", url=""))
    st.session_state.library = library

    session = SearchSession()
    token = session.begin(SearchCriteria(location="Seattle, WA"))
    session.complete(
        token,
        [
            RentalProperty(title="A", url=""),
            RentalProperty(title="B", url=""),
            RentalProperty(title="C", url="https://example.com/c"),
            RentalProperty(title="C again", url="https://example.com/c"),
        ],
    )
    st.session_state.search = session

    render_favorites()
    render_results()


def test_results_with_shared_urls_render_without_key_clash():
    from streamlit.testing.v1 import AppTest

    at = AppTest.from_function(_results_with_shared_urls)
    at.run()

    assert not at.exception
    assert len(at.button) == 5
