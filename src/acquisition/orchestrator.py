"""End-to-end acquisition: resolve, download, extract and cache a JDK."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Callable, Optional

from common.errors import AcquisitionError
from common.http_client import HttpClient
from common.logging_utils import Timer, extra_context
from resolvers import get_resolver
from resolvers.base import SourceResolver
from resolvers.github import GitHubClient
from versioning.models import Artifact, CanonicalVersion, VersionDescriptor
from versioning.normalizer import normalize

from .cache import LocalCache
from .config import AcquisitionConfig
from .downloader import Downloader
from .extractor import Extractor, locate_jdk_home

logger = logging.getLogger(__name__)


class AcquisitionOrchestrator:
    """Turns a ``VersionDescriptor`` into the path of an installed JDK home.

    Collaborators are injected so tests can replace any of them; by default
    they are built from ``config`` and ``http``.
    """

    def __init__(
        self,
        config: AcquisitionConfig,
        http: HttpClient,
        *,
        cache: Optional[LocalCache] = None,
        downloader: Optional[Downloader] = None,
        extractor: Optional[Extractor] = None,
        resolver_factory: Optional[Callable[[VersionDescriptor], SourceResolver]] = None,
    ):
        self.config = config
        self.http = http
        self.cache = cache or LocalCache(config.tool_cache_dir)
        self.downloader = downloader or Downloader(http, config)
        self.extractor = extractor or Extractor()
        self._github = GitHubClient(http, token=config.github_token)
        self._resolver_factory = resolver_factory or self._default_resolver

    def _default_resolver(self, descriptor: VersionDescriptor) -> SourceResolver:
        return get_resolver(
            descriptor.distribution,
            self.http,
            self.config.platform,
            github=self._github,
            gds_token=self.config.gds_token,
        )

    async def acquire(self, descriptor: VersionDescriptor) -> Path:
        """Return the JDK home for ``descriptor``, installing it if needed.

        Raises:
            AcquisitionError: Any failure, enriched with the descriptor.
        """
        try:
            return await self._acquire(descriptor)
        except AcquisitionError as exc:
            raise exc.add_context(descriptor)

    async def _acquire(self, descriptor: VersionDescriptor) -> Path:
        resolver = self._resolver_factory(descriptor)
        tool_name = resolver.tool_name(descriptor)
        platform = self.config.platform

        requested = resolver.requested_version(descriptor)
        if requested is not None:
            # raises InvalidVersionFormat before any network traffic
            normalize(requested)

        key: Optional[CanonicalVersion] = None
        cache_version = resolver.cache_version(descriptor)
        if cache_version is not None:
            key = normalize(cache_version)
            hit = self.cache.lookup(tool_name, key)
            if hit is not None:
                logger.info("Found %s %s in tool-cache @ %s", tool_name, cache_version, hit)
                return locate_jdk_home(hit, platform)

        artifact = await resolver.resolve(descriptor)
        if artifact.version is None:
            return await self._install_uncached(artifact)

        if key is None:
            key = normalize(artifact.version)
            hit = self.cache.lookup(tool_name, key)
            if hit is not None:
                logger.info("Found %s %s in tool-cache @ %s", tool_name, artifact.version, hit)
                return locate_jdk_home(hit, platform)

        with Timer() as t:
            archive = await self.downloader.fetch(artifact)
            try:
                with self.cache.workspace() as workspace:
                    extracted = await self.extractor.extract(archive, platform.archive_format, workspace / "content")
                    locate_jdk_home(extracted, platform)
                    logger.info("Adding %s %s to tool-cache ...", tool_name, artifact.version)
                    stored = self.cache.store(tool_name, key, extracted)
            finally:
                archive.unlink(missing_ok=True)
        logger.debug(
            "Acquired %s",
            tool_name,
            extra=extra_context(
                event="acquire",
                component="orchestrator",
                outcome="installed",
                version=str(key),
                duration_ms=t.duration_ms(),
            ),
        )
        return locate_jdk_home(stored, platform)

    async def _install_uncached(self, artifact: Artifact) -> Path:
        """Install a build that has no stable version (dev builds) outside the cache."""
        archive = await self.downloader.fetch(artifact)
        dest = Path(self.config.temp_dir) / f"jdk-{uuid.uuid4().hex}"
        try:
            extracted = await self.extractor.extract(archive, self.config.platform.archive_format, dest)
            home = locate_jdk_home(extracted, self.config.platform)
        except BaseException:
            shutil.rmtree(dest, ignore_errors=True)
            raise
        finally:
            archive.unlink(missing_ok=True)
        logger.info("Installed %s (not cached) @ %s", artifact.file_name, home)
        return home
