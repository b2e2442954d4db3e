"""Expiry computation over the trading calendar."""
