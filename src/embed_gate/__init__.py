"""Embed Gate: abuse-screening relay for webhook embed notifications."""

__version__ = "0.1.0"
