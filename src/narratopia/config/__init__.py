"""Configuration package for Narratopia."""

from .config import DatabaseConfig, NarratopiaConfig, SystemConfig, config

__all__ = ["NarratopiaConfig", "DatabaseConfig", "SystemConfig", "config"]
