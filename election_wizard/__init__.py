"""Stateful engine behind the election configuration wizard."""

__version__ = "1.0.0"
