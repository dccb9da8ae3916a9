# src/narratopia/__init__.py
"""Narratopia manuscript core: chapter ordering, versions and the codex graph."""

__version__ = "0.1.0"

__all__ = ["__version__"]
