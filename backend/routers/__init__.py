"""Routers module - FastAPI route handlers"""

from . import config, ghost

__all__ = ["config", "ghost"]
