"""
Plugin discovery and loading.

This package finds plugin directories below an ordered list of plugin roots
and loads each plugin.ron descriptor into a validated PluginConfig, either
sequentially or as a bounded-concurrency async stream.
"""

from plugdex.plugins.loader import LoadedPlugin, PluginLoader
from plugdex.plugins.manifest import ConfigLoader, PluginConfig
from plugdex.plugins.paths import plugin_paths, resolve_roots
from plugdex.plugins.scanner import DESCRIPTOR_NAME, Candidate, scan, scan_async

__all__ = [
    "DESCRIPTOR_NAME",
    "Candidate",
    "ConfigLoader",
    "LoadedPlugin",
    "PluginConfig",
    "PluginLoader",
    "plugin_paths",
    "resolve_roots",
    "scan",
    "scan_async",
]
