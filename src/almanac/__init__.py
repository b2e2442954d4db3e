"""Almanac — BSE Sensex holiday calendar and weekly expiry engine."""

__version__ = "0.1.0"
