"""Utility helpers for Embed Gate."""
