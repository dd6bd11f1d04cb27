"""Scan web sources for Baseline compatibility risks."""

from ._version import __version__

__all__ = ["__version__"]
