"""Armaso restaurant point-of-sale backend."""

__version__ = "1.0.0"
