"""Observability utilities for the page agent.

- @observe decorator for automatic span creation around sync and async calls
"""

from .observe import observe

__all__ = ["observe"]
