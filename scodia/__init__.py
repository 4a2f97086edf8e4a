"""Scodia: posture asymmetry screening from side and back photos."""

__version__ = "0.1.0"
