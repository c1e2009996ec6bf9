"""Escaping and formatting helpers."""
