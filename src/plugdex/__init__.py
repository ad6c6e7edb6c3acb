"""Plugdex - discover and load launcher plugins from plugin directories."""

__version__ = "0.1.0"
