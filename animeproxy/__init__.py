"""Scraping proxy that resolves anime titles to episode lists and video servers."""

__version__ = "0.3.0"
