"""
Plugin directory scanning.

A plugin root contains one subdirectory per plugin, and a subdirectory is
only a plugin when it holds a plugin.ron descriptor. Scanning is
best-effort: unreadable roots and entries are skipped, never raised.
"""

import asyncio
import logging
import os
import threading
from pathlib import Path
from typing import AsyncIterator, Iterator, List, NamedTuple

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "plugin.ron"

# End-of-scan marker passed through the async hand-off channel
_DONE = object()


class Candidate(NamedTuple):
    """A plugin directory confirmed to contain a descriptor file."""

    source: Path
    descriptor: Path


def _candidate_for(entry: os.DirEntry) -> Candidate | None:
    """Build a Candidate for a directory entry, or None if it isn't a plugin."""
    source = Path(entry.path)
    descriptor = source / DESCRIPTOR_NAME
    try:
        if not entry.is_dir() or not descriptor.is_file():
            return None
    except OSError as e:
        logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
        return None
    return Candidate(source, descriptor)


def iter_candidates(root: Path) -> Iterator[Candidate]:
    """
    Lazily enumerate plugin candidates directly below a root.

    Args:
        root: Plugin root directory

    Yields:
        Candidates in filesystem enumeration order. A root that cannot be
        opened yields nothing.
    """
    try:
        entries = os.scandir(root)
    except OSError as e:
        logger.debug(f"Cannot read plugin root {root}: {e}")
        return

    with entries:
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                return
            except OSError as e:
                logger.debug(f"Stopped reading plugin root {root}: {e}")
                return

            candidate = _candidate_for(entry)
            if candidate is not None:
                yield candidate


def scan(root: Path) -> List[Candidate]:
    """Collect all plugin candidates directly below a root."""
    return list(iter_candidates(root))


async def scan_async(root: Path) -> AsyncIterator[Candidate]:
    """
    Stream plugin candidates below a root without blocking the event loop.

    The directory is read by a worker thread that hands candidates over one
    at a time through a single-slot queue, blocking until the consumer has
    taken the previous one. Closing the stream early stops the worker.

    Args:
        root: Plugin root directory

    Yields:
        Candidates in the same order as iter_candidates()
    """
    loop = asyncio.get_running_loop()
    channel: asyncio.Queue = asyncio.Queue(maxsize=1)
    stop = threading.Event()

    def produce() -> None:
        def send(item: object) -> None:
            asyncio.run_coroutine_threadsafe(channel.put(item), loop).result()

        for candidate in iter_candidates(root):
            if stop.is_set():
                return
            send(candidate)
        if not stop.is_set():
            send(_DONE)

    producer = asyncio.ensure_future(asyncio.to_thread(produce))
    try:
        while True:
            item = await channel.get()
            if item is _DONE:
                break
            yield item
    finally:
        stop.set()
        # Free the slot so a worker blocked on put() can observe the stop flag
        while not channel.empty():
            channel.get_nowait()
        await producer
