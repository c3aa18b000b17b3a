"""Prefix command registration and dispatch for chat bots."""

__version__ = "0.1.0"
