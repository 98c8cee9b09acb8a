"""Rental Finder: AI-assisted rental search."""
