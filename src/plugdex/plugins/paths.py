"""
Plugin root resolution.

Plugin roots are searched from highest to lowest priority: user plugins
first, then system-wide configuration, then plugins shipped by the
distribution. Priority is simply the position in the returned list.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from plugdex.config import Settings

# Highest priority first
DEFAULT_PLUGIN_PATHS = (
    "~/.local/share/pop-launcher/plugins",
    "/etc/pop-launcher/plugins",
    "/usr/lib/pop-launcher/plugins",
)


def _expand(path: str, home: Path) -> Path:
    if path == "~":
        return home
    if path.startswith("~/"):
        return home / path[2:]
    return Path(path)


def plugin_paths(
    paths: Sequence[str] = DEFAULT_PLUGIN_PATHS,
    home: Optional[Path] = None,
) -> List[Path]:
    """
    Expand plugin root paths, preserving their priority order.

    Args:
        paths: Root paths, highest priority first
        home: Home directory used to expand ``~/`` (defaults to the
              current user's home)

    Returns:
        Ordered list of root directories. Roots are not checked for
        existence; unreadable roots simply contribute no plugins.
    """
    home = home if home is not None else Path.home()
    return [_expand(path, home) for path in paths]


def resolve_roots(config: Settings, home: Optional[Path] = None) -> List[Path]:
    """
    Get the plugin roots configured for this process.

    ``config.plugin_paths`` replaces the default roots when set.
    """
    if config.plugin_paths:
        return plugin_paths(config.plugin_paths, home=home)
    return plugin_paths(home=home)
