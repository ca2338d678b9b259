"""Core configuration for the daily code service."""
