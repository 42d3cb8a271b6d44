"""Persistent tool cache keyed by tool name and canonical version.

Layout::

    <root>/<tool_name>/<canonical_version>/   published entries
    <root>/<tool_name>/.staging-<id>/         entries being published
    <root>/.tmp/<id>/                         extraction workspaces

An entry only ever appears through a single ``os.rename`` of a complete
staging directory, so readers never observe a partial entry.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from common.logging_utils import extra_context
from versioning.models import CacheEntry, CanonicalVersion
from versioning.normalizer import try_normalize

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"
WORKSPACE_DIR = ".tmp"


class LocalCache:
    """Tool cache on the local filesystem."""

    def __init__(self, root: Union[str, Path]):
        """Initialize the cache.

        Args:
            root: Cache root directory (created lazily).
        """
        self.root = Path(root)

    def entry_path(self, tool_name: str, version: CanonicalVersion) -> Path:
        return self.root / tool_name / str(version)

    def lookup(self, tool_name: str, version: CanonicalVersion) -> Optional[Path]:
        """Return the published entry for ``tool_name``/``version``, if any."""
        path = self.entry_path(tool_name, version)
        if path.is_dir():
            logger.debug(
                "Cache hit",
                extra=extra_context(event="cache", component="cache", outcome="hit", target=str(path)),
            )
            return path
        logger.debug(
            "Cache miss",
            extra=extra_context(event="cache", component="cache", outcome="miss", target=str(path)),
        )
        return None

    def store(self, tool_name: str, version: CanonicalVersion, source: Union[str, Path]) -> Path:
        """Publish ``source`` as the entry for ``tool_name``/``version``.

        ``source`` is moved, not copied. If another writer published the
        same entry first, ours is discarded and the existing entry returned.
        """
        final = self.entry_path(tool_name, version)
        final.parent.mkdir(parents=True, exist_ok=True)
        staging = final.parent / f"{STAGING_PREFIX}{uuid.uuid4().hex}"
        shutil.move(str(source), str(staging))
        try:
            os.rename(staging, final)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            if exc.errno not in (errno.EEXIST, errno.ENOTEMPTY) or not final.is_dir():
                raise
            logger.info("%s %s was added to the tool cache concurrently", tool_name, version)
            return final
        logger.info("Added %s %s to tool-cache", tool_name, version)
        return final

    @contextmanager
    def workspace(self) -> Iterator[Path]:
        """Yield a private scratch directory on the cache filesystem.

        The directory is removed on exit unless its content was moved away.
        """
        path = self.root / WORKSPACE_DIR / uuid.uuid4().hex
        path.mkdir(parents=True)
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)

    def entries(self, tool_name: str) -> List[CacheEntry]:
        """List published entries for ``tool_name``, lowest version first."""
        tool_dir = self.root / tool_name
        if not tool_dir.is_dir():
            return []
        found = []
        for child in tool_dir.iterdir():
            if not child.is_dir() or child.name.startswith(STAGING_PREFIX):
                continue
            version = try_normalize(child.name)
            if version is None or str(version) != child.name:
                continue
            found.append(CacheEntry(tool_name=tool_name, canonical_version=version, path=child))
        return sorted(found, key=lambda entry: entry.canonical_version)
