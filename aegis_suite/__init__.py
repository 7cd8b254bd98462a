"""Aegis Suite - investment allocation recommendations for advisors."""

__version__ = "0.3.0"
