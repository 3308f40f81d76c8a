"""Orayata: AI-generated Torah study sources with validated Sefaria links."""

__version__ = "0.1.0"
