"""eventrelay — severity-filtered event notifications over email and webhooks."""

__version__ = "0.1.0"
