# src/narratopia/core/env.py
"""Environment configuration utilities."""

from __future__ import annotations

from dotenv import load_dotenv

from ..config import NarratopiaConfig, config


def load_env() -> None:
    """Load environment variables from a local ``.env`` file."""
    load_dotenv()


def get_settings() -> NarratopiaConfig:
    """Get the application settings."""
    return config


__all__ = ["load_env", "get_settings"]
