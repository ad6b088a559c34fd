"""Core configuration and logging for Gatehouse."""
