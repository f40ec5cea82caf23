"""Stonebridge Trust banking gateway"""

__version__ = "0.1.0"
