"""Infrastructure adapters: crypto, persistence, mail and HTTP API."""
