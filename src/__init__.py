# src/__init__.py — v1
"""wsindex: deterministic workspace scan / chunk / embed / store pipeline."""

__version__ = "0.3.0"
