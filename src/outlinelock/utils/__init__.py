"""Utility helpers (file IO, logging)."""
