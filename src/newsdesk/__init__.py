"""Newsdesk: article collection, search and backup service."""

__version__ = "0.1.0"
