"""
Rental Finder Frontend - Streamlit Search Interface

A search form, a result list and the user's saved searches and favorites,
all backed by the rental search proxy and a local JSON store.
"""

import time
from typing import List

import streamlit as st

from rental_finder.client import RentalSearchClient
from rental_finder.config import get_settings
from rental_finder.library import RentalLibrary
from rental_finder.models.rental import HousingType, RentalProperty, SavedSearch, SearchCriteria
from rental_finder.session import SearchSession
from rental_finder.storage import JsonFileStore, PersistenceAdapter

BEDROOM_OPTIONS: List[str] = ["any", "1", "2", "3", "4"]
BATHROOM_OPTIONS: List[str] = ["any", "1", "2", "3"]
HOUSING_TYPES: List[HousingType] = ["any", "apartment", "house", "condo", "townhouse"]

# How long the "Saved!" confirmation stays up, in seconds
SAVED_FLASH_SECONDS = 2.0

DEFAULT_CRITERIA = SearchCriteria(
    location="San Francisco, CA",
    min_price="1000",
    max_price="3500",
    bedrooms="2",
    bathrooms="1",
    housing_type="apartment",
)


def init_session_state():
    """Initialize session state variables."""
    settings = get_settings()
    if "criteria" not in st.session_state:
        st.session_state.criteria = DEFAULT_CRITERIA
    if "search" not in st.session_state:
        st.session_state.search = SearchSession()
    if "library" not in st.session_state:
        store = JsonFileStore(settings.storage_path)
        st.session_state.library = RentalLibrary(PersistenceAdapter(store))
    if "client" not in st.session_state:
        st.session_state.client = RentalSearchClient.from_settings(settings)
    if "saved_at" not in st.session_state:
        st.session_state.saved_at = 0.0


def format_criteria(search: SearchCriteria) -> str:
    """Summarise criteria in one line, e.g. ``2 beds, 1 bath, $1000 - $3500, condo``."""
    parts = []
    if search.bedrooms != "any":
        parts.append(f"{search.bedrooms} bed{'' if search.bedrooms == '1' else 's'}")
    if search.bathrooms != "any":
        parts.append(f"{search.bathrooms} bath{'' if search.bathrooms == '1' else 's'}")
    if search.min_price or search.max_price:
        parts.append(f"${search.min_price or '0'} - ${search.max_price or '∞'}")
    if search.housing_type != "any":
        parts.append(search.housing_type)
    return ", ".join(parts)


def format_property(prop: RentalProperty) -> str:
    """Format a single property as markdown."""
    if prop.is_error_marker:
        return f"**{prop.title}**\n\n_{prop.description or ''}_"

    lines = [f"**{prop.title or 'Untitled listing'}**", prop.price or "Price on request"]

    details = [f"{prop.bedrooms} bed", f"{prop.bathrooms} bath"]
    if prop.location:
        details.append(prop.location)
    lines.append(" | ".join(details))

    if prop.url:
        source = prop.source or "listing"
        lines.append(f"\n[View on {source}]({prop.url})")

    return "\n".join(lines)


def run_search(criteria: SearchCriteria):
    """Run a search and store the outcome in session state."""
    st.session_state.criteria = criteria
    with st.spinner("Searching for rentals..."):
        st.session_state.search.run(st.session_state.client, criteria)


def render_form():
    """Render the search form and dispatch submit/save actions."""
    current: SearchCriteria = st.session_state.criteria
    search: SearchSession = st.session_state.search

    with st.form("search-form"):
        location = st.text_input("Location", value=current.location, placeholder="e.g., Brooklyn, NY")
        col1, col2 = st.columns(2)
        min_price = col1.text_input("Min Price ($)", value=current.min_price, placeholder="1000")
        max_price = col2.text_input("Max Price ($)", value=current.max_price, placeholder="3500")

        col3, col4, col5 = st.columns(3)
        bedrooms = col3.selectbox(
            "Bedrooms",
            BEDROOM_OPTIONS,
            index=BEDROOM_OPTIONS.index(current.bedrooms) if current.bedrooms in BEDROOM_OPTIONS else 0,
            format_func=lambda v: "Any" if v == "any" else ("4+" if v == "4" else v),
        )
        bathrooms = col4.selectbox(
            "Bathrooms",
            BATHROOM_OPTIONS,
            index=BATHROOM_OPTIONS.index(current.bathrooms) if current.bathrooms in BATHROOM_OPTIONS else 0,
            format_func=lambda v: "Any" if v == "any" else ("3+" if v == "3" else v),
        )
        housing_type = col5.selectbox(
            "Housing Type",
            HOUSING_TYPES,
            index=HOUSING_TYPES.index(current.housing_type),
            format_func=str.capitalize,
        )

        saved_recently = time.monotonic() - st.session_state.saved_at < SAVED_FLASH_SECONDS
        submit_col, save_col = st.columns([3, 1])
        submitted = submit_col.form_submit_button(
            "Searching..." if search.is_loading else "Find Properties",
            disabled=search.is_loading,
            type="primary",
            use_container_width=True,
        )
        save_clicked = save_col.form_submit_button(
            "Saved!" if saved_recently else "Save Search",
            disabled=search.is_loading or saved_recently,
            use_container_width=True,
        )

    if not (submitted or save_clicked):
        return

    if not location.strip():
        st.error("Please enter a location.")
        return

    criteria = SearchCriteria(
        location=location,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        housing_type=housing_type,
    )
    st.session_state.criteria = criteria

    if save_clicked:
        st.session_state.library.save_search(criteria)
        st.session_state.saved_at = time.monotonic()
        st.rerun()
    else:
        run_search(criteria)


def render_property(prop: RentalProperty, key_prefix: str, index: int):
    """Render one property card with its favorite toggle."""
    library: RentalLibrary = st.session_state.library
    with st.container(border=True):
        st.markdown(format_property(prop))
        if prop.is_error_marker:
            return
        favorited = library.is_favorite(prop)
        label = "♥ Remove from favorites" if favorited else "♡ Add to favorites"
        if st.button(label, key=f"{key_prefix}-fav-{index}-{prop.url}"):
            library.toggle_favorite(prop)
            st.rerun()


def render_saved_searches():
    """Render the saved-search list with load and delete actions."""
    library: RentalLibrary = st.session_state.library
    searches: List[SavedSearch] = library.saved_searches
    if not searches:
        return

    st.subheader("Saved Searches")
    for saved in searches:
        with st.container(border=True):
            st.markdown(f"**{saved.location}**")
            st.caption(format_criteria(saved))
            load_col, delete_col = st.columns(2)
            if load_col.button("Load", key=f"load-{saved.id}", use_container_width=True):
                run_search(saved.criteria())
                st.rerun()
            if delete_col.button("Delete", key=f"delete-{saved.id}", use_container_width=True):
                library.delete_search(saved.id)
                st.rerun()


def render_favorites():
    """Render the favorites list."""
    favorites = st.session_state.library.favorites
    if not favorites:
        return

    st.subheader("Your Favorites")
    for index, prop in enumerate(favorites):
        render_property(prop, "favorite", index)


def render_results():
    """Render the current search results, error or empty state."""
    search: SearchSession = st.session_state.search
    if search.error:
        st.error(search.error)
        return
    if search.criteria is None or search.is_loading:
        return
    if not search.results:
        st.info("No properties found. Try broadening your search.")
        return

    st.subheader(f"Results ({len(search.results)})")
    for index, prop in enumerate(search.results):
        render_property(prop, "result", index)


def main():
    """Main application entry point."""
    # Page configuration
    st.set_page_config(
        page_title="AI Rental Finder",
        page_icon="🏠",
        layout="centered",
    )

    # Hide streamlit branding
    st.markdown(
        """
        <style>
        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}
        </style>
        """,
        unsafe_allow_html=True,
    )

    # Initialize session state
    init_session_state()

    st.title("AI Rental Finder")
    st.write(
        "Enter your criteria below and our AI will search across listing sites "
        "to find the perfect rental for you."
    )

    render_form()

    left, right = st.columns(2)
    with left:
        render_saved_searches()
    with right:
        render_favorites()

    render_results()

    st.caption("Powered by Claude")


if __name__ == "__main__":
    main()
