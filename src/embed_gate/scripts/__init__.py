"""Operational scripts for Embed Gate."""
