"""Dvora - check which streaming sites carry a movie or show."""

__version__ = "1.0.0"
