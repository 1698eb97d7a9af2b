"""Salatuk - prayer times, qibla direction and azan notification engine."""

__version__ = "0.1.0"
