"""HTTP API for the daily code service."""
