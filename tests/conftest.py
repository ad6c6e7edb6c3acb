"""
Pytest configuration and fixtures for Plugdex tests.

Provides helpers for building synthetic plugin roots on disk.
"""

import os
from pathlib import Path
from typing import Optional

import pytest


def write_plugin(
    root: Path,
    name: str,
    descriptor: Optional[str] = None,
    executable: Optional[str] = "run",
) -> Path:
    """
    Create a plugin directory below ``root``.

    Args:
        root: Plugin root directory (created if missing)
        name: Plugin directory name
        descriptor: plugin.ron contents (defaults to a minimal valid config
                    pointing at ``executable``); "" creates no descriptor
        executable: Name of an executable file to create inside the plugin

    Returns:
        The plugin directory
    """
    plugin = root / name
    plugin.mkdir(parents=True)

    if executable:
        exe = plugin / executable
        exe.write_text("#!/bin/sh\n")
        os.chmod(exe, 0o755)

    if descriptor is None:
        descriptor = (
            f'(name: "{name}", description: "The {name} plugin", '
            f'bin: (path: "{executable or "run"}"))'
        )
    if descriptor:
        (plugin / "plugin.ron").write_text(descriptor)

    return plugin


@pytest.fixture
def make_plugin():
    """Factory fixture for creating plugin directories."""
    return write_plugin


@pytest.fixture
def two_roots(tmp_path):
    """
    A user root and a system root sharing a plugin name.

    Layout:
        user/foo          valid
        system/foo        valid
        system/bar        no descriptor
        system/baz        valid, with a query regex
    """
    user = tmp_path / "user"
    system = tmp_path / "system"
    user.mkdir()
    system.mkdir()

    write_plugin(user, "foo")
    write_plugin(system, "foo")
    write_plugin(system, "bar", descriptor="")
    write_plugin(
        system,
        "baz",
        descriptor=(
            '(name: "baz", description: "Baz", bin: (path: "run"), '
            'query: (regex: "^baz ", priority: High))'
        ),
    )
    return [user, system]
