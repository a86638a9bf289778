"""Utility modules for the Atlassian Community tools."""

from .logging import setup_logging

__all__ = ["setup_logging"]
