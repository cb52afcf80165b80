"""Leakage inspection and repair tracking API."""
