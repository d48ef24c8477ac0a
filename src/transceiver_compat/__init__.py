"""Transceiver compatibility resolver - find optics that fit a switch model."""

__version__ = "0.1.0"
