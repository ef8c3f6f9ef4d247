"""Core configuration for the Embed Gate application."""
