"""HTTP API for Embed Gate."""
