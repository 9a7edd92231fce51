"""Concrete adapters for the interfaces in :mod:`semantic_news.interfaces`."""
