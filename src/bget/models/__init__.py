"""Bget configuration models."""

from .config import ClientConfig

__all__ = ["ClientConfig"]
