"""
Plugin discovery and loading pipeline.

Plugins are discovered by scanning each plugin root in priority order and
loading every plugin.ron found directly below it. Two pipelines are
provided:

1. load_all(): sequential, single-threaded, fully materialized
2. load_all_async(): lazy stream that parses up to ``concurrency``
   descriptors in worker threads while keeping discovery order

Plugins with the same directory name under several roots are all returned,
highest-priority root first. No plugin overrides another.
"""

import asyncio
import logging
import os
from contextlib import aclosing
from functools import partial
from pathlib import Path
from typing import AsyncIterator, Iterator, List, NamedTuple, Optional, Pattern, Sequence

from plugdex.config import Settings, settings as default_settings
from plugdex.plugins.manifest import ConfigLoader, PluginConfig
from plugdex.plugins.paths import resolve_roots
from plugdex.plugins.scanner import Candidate, iter_candidates, scan_async
from plugdex.plugins.window import Job, ordered_window

logger = logging.getLogger(__name__)


class LoadedPlugin(NamedTuple):
    """A plugin whose descriptor loaded successfully."""

    source: Path
    config: PluginConfig
    pattern: Optional[Pattern[str]]


class PluginLoader:
    """
    Discovers and loads plugins from an ordered list of plugin roots.

    Roots are searched from highest to lowest priority. Every failure
    (missing root, unreadable entry, broken descriptor) only removes the
    affected plugin from the results.
    """

    def __init__(
        self,
        roots: Sequence[Path],
        config_loader: Optional[ConfigLoader] = None,
        concurrency: Optional[int] = None,
    ) -> None:
        """
        Initialize the plugin loader.

        Args:
            roots: Plugin root directories, highest priority first
            config_loader: Descriptor loader (defaults to ConfigLoader())
            concurrency: Max descriptors parsed at once by the async
                         pipeline (defaults to the logical core count)

        Raises:
            ValueError: If concurrency is less than 1
        """
        if concurrency is None:
            concurrency = os.cpu_count() or 1
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self.roots: List[Path] = [Path(root) for root in roots]
        self.config_loader = config_loader or ConfigLoader()
        self.concurrency = concurrency

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        config_loader: Optional[ConfigLoader] = None,
    ) -> "PluginLoader":
        """Create a loader for the roots and concurrency configured in settings."""
        config = config or default_settings
        return cls(
            resolve_roots(config),
            config_loader=config_loader,
            concurrency=config.effective_concurrency,
        )

    def _load(self, candidate: Candidate) -> Optional[LoadedPlugin]:
        try:
            result = self.config_loader.load(candidate.source, candidate.descriptor)
        except Exception as e:
            logger.exception(f"Config loader failed for {candidate.source}: {e}")
            return None

        if result is None:
            return None

        config, pattern = result
        return LoadedPlugin(candidate.source, config, pattern)

    def candidates(self) -> Iterator[Candidate]:
        """Enumerate candidates of all roots, in root priority order."""
        for root in self.roots:
            yield from iter_candidates(root)

    def iter_plugins(self) -> Iterator[LoadedPlugin]:
        """Lazily load plugins one at a time, in discovery order."""
        for candidate in self.candidates():
            plugin = self._load(candidate)
            if plugin is not None:
                yield plugin

    def load_all(self) -> List[LoadedPlugin]:
        """
        Load all plugins sequentially.

        Returns:
            Loaded plugins in discovery order

        Note:
            Plugins that fail to load are logged but not included in results.
        """
        plugins = list(self.iter_plugins())
        logger.info(f"Loaded {len(plugins)} plugin(s) from {len(self.roots)} root(s)")
        return plugins

    async def candidates_async(self) -> AsyncIterator[Candidate]:
        """Stream candidates of all roots, in root priority order."""
        for root in self.roots:
            async with aclosing(scan_async(root)) as stream:
                async for candidate in stream:
                    yield candidate

    async def _jobs(self) -> AsyncIterator[Job[Optional[LoadedPlugin]]]:
        async with aclosing(self.candidates_async()) as stream:
            async for candidate in stream:
                yield partial(asyncio.to_thread, self._load, candidate)

    async def load_all_async(self) -> AsyncIterator[LoadedPlugin]:
        """
        Stream plugins, parsing up to ``concurrency`` descriptors at once.

        Results come out in discovery order regardless of which parse
        finishes first, and the set of plugins equals what load_all()
        returns for the same filesystem.

        Yields:
            Loaded plugins in discovery order
        """
        count = 0
        async with aclosing(ordered_window(self._jobs(), self.concurrency)) as window:
            async for plugin in window:
                if plugin is not None:
                    count += 1
                    yield plugin
        logger.info(f"Loaded {count} plugin(s) from {len(self.roots)} root(s)")

    async def collect_async(self) -> List[LoadedPlugin]:
        """Run the async pipeline to completion and return all plugins."""
        return [plugin async for plugin in self.load_all_async()]
