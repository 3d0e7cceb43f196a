"""Shared utilities for the backend."""
from utils.clock import utcnow

__all__ = ["utcnow"]
