"""Freight Rates: carrier rate quotes from third-party freight providers."""

__version__ = "0.1.0"
