"""Visa fee application service."""
from visa_fees.version import __version__

__all__ = ["__version__"]
