"""Outbound services (mail delivery)."""
