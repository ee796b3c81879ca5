"""Vendor price and availability scraper."""

__version__ = "0.1.0"
