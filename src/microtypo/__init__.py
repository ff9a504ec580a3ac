"""Microtypo: typographic corrections for Markdown notes."""

__version__ = "0.1.0"
