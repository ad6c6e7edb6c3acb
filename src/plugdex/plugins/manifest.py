"""
Plugin descriptor schema and loading.

Defines the structure of plugin descriptor files (plugin.ron) that describe
launcher plugins, and the ConfigLoader that turns a descriptor into a
validated PluginConfig plus its compiled query pattern. Descriptors are
validated using Pydantic for type safety.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, List, Literal, Optional, Pattern, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from plugdex.exceptions import DescriptorError
from plugdex.parsers.ron import loads

logger = logging.getLogger(__name__)

LoadResult = Tuple["PluginConfig", Optional[Pattern[str]]]


class PluginPriority(str, Enum):
    """Sort priority of a plugin's results relative to other plugins."""

    HIGH = "High"
    DEFAULT = "Default"
    LOW = "Low"


class IconSource(BaseModel):
    """
    Icon shown next to the plugin's results.

    Written in RON either as ``Name("icon-name")`` for a themed icon or as
    ``Mime("text/plain")`` for the icon of a mime type.
    """

    kind: Literal["Name", "Mime"]
    value: str

    @model_validator(mode="before")
    @classmethod
    def from_variant(cls, data: Any) -> Any:
        """Accept the ``{"Name": "..."}`` shape produced by the RON reader."""
        if isinstance(data, dict) and len(data) == 1:
            ((kind, value),) = data.items()
            if kind in ("Name", "Mime"):
                return {"kind": kind, "value": value}
        return data


class PluginBinary(BaseModel):
    """Executable that implements the plugin."""

    path: str = Field(
        ...,
        description="Absolute path, or path relative to the plugin directory",
        min_length=1,
    )

    args: List[str] = Field(
        default_factory=list,
        description="Arguments passed to the executable",
    )

    def is_absolute(self) -> bool:
        """Check if the executable path is absolute."""
        return self.path.startswith("/")


class PluginQuery(BaseModel):
    """How the launcher routes queries to the plugin."""

    help: Optional[str] = Field(
        None,
        description="Prefix shown in the launcher's help listing",
    )

    isolate: bool = Field(
        False,
        description="Only this plugin runs when its pattern matches",
    )

    isolate_with: Optional[str] = Field(
        None,
        description="Pattern that isolates the plugin when matched",
    )

    no_sort: bool = Field(
        False,
        description="Keep the plugin's own result ordering",
    )

    persistent: bool = Field(
        False,
        description="Plugin receives every query, not just matching ones",
    )

    priority: PluginPriority = Field(
        PluginPriority.DEFAULT,
        description="Sort priority of results",
    )

    regex: Optional[str] = Field(
        None,
        description="Pattern a query must match to be sent to the plugin",
    )


class PluginConfig(BaseModel):
    """
    Complete plugin configuration as declared in plugin.ron.

    Example descriptor:

        (
            name: "Files",
            description: "Search files in the home directory",
            bin: (path: "files"),
            icon: Name("system-file-manager"),
            query: (help: "find ", regex: "^(find )+", isolate: true),
        )
    """

    name: str = Field(
        ...,
        description="Human-readable plugin name",
    )

    description: str = Field(
        ...,
        description="Human-readable description of the plugin",
    )

    bin: Optional[PluginBinary] = Field(
        None,
        description="Executable launched for this plugin",
    )

    icon: Optional[IconSource] = Field(
        None,
        description="Icon shown with the plugin's results",
    )

    query: PluginQuery = Field(
        default_factory=PluginQuery,
        description="Query routing options",
    )

    history: bool = Field(
        False,
        description="Whether the launcher records history for this plugin",
    )

    def executable(self, source: Path) -> Optional[Path]:
        """
        Get the path of the plugin executable.

        Args:
            source: Directory the descriptor was found in

        Returns:
            Absolute executable path, or None if no binary is declared
        """
        if self.bin is None:
            return None
        if self.bin.is_absolute():
            return Path(self.bin.path)
        return (source / self.bin.path).resolve()

    def compile_pattern(self) -> Optional[Pattern[str]]:
        """
        Compile the query regex, if one is declared.

        An invalid pattern is logged and treated as no pattern at all.
        """
        if self.query.regex is None:
            return None
        try:
            return re.compile(self.query.regex)
        except re.error as e:
            logger.warning(f"Invalid query regex for plugin {self.name!r}: {e}")
            return None

    @classmethod
    def from_str(cls, text: str, path: Optional[Path] = None) -> "PluginConfig":
        """
        Parse a plugin configuration from RON text.

        Raises:
            DescriptorError: If the text is not valid RON or fails validation
        """
        location = str(path) if path else None
        try:
            data = loads(text)
        except DescriptorError as e:
            raise DescriptorError(f"Invalid RON: {e}", location) from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DescriptorError(f"Invalid plugin config: {e}", location) from e

    @classmethod
    def from_file(cls, descriptor: Path) -> "PluginConfig":
        """
        Load a plugin configuration from a plugin.ron file.

        Args:
            descriptor: Path to the plugin.ron file

        Returns:
            PluginConfig instance

        Raises:
            DescriptorError: If the file cannot be read or is invalid
        """
        try:
            text = descriptor.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DescriptorError(f"Cannot read descriptor: {e}", str(descriptor)) from e

        return cls.from_str(text, descriptor)


class ConfigLoader:
    """
    Turns a descriptor file into a PluginConfig and compiled query pattern.

    Every failure is reported as None so that one broken plugin never stops
    discovery of the others. Subclass and override load() to plug in a
    different descriptor format.
    """

    def load(self, source: Path, descriptor: Path) -> Optional[LoadResult]:
        """
        Load a single plugin descriptor.

        Args:
            source: Plugin directory containing the descriptor
            descriptor: Path to the plugin.ron file

        Returns:
            (PluginConfig, compiled pattern or None), or None if the plugin
            cannot be used
        """
        try:
            config = PluginConfig.from_file(descriptor)
        except DescriptorError as e:
            logger.warning(f"Skipping plugin at {source}: {e}")
            return None

        if config.bin is None:
            logger.warning(
                f"Skipping plugin at {source}: config does not define a binary path"
            )
            return None

        if not config.bin.is_absolute():
            try:
                (source / config.bin.path).resolve(strict=True)
            except (OSError, RuntimeError):
                logger.warning(
                    f"Skipping plugin at {source}: executable "
                    f"{config.bin.path!r} not found"
                )
                return None

        logger.debug(f"Loaded plugin config: {config.name} from {descriptor}")
        return config, config.compile_pattern()
