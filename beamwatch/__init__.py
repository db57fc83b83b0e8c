"""Beamwatch: competitor discovery and threat scoring for small businesses."""

__version__ = "0.1.0"
