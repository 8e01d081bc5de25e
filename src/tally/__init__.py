"""Tally: a small numeric scripting language."""

__version__ = "0.1.0"
