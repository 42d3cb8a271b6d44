"""Streaming artifact download with retry and SHA-256 verification."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp

from constants import Constants
from common.errors import AuthRejected, ChecksumMismatch, DownloadFailed, NotFound
from common.http_client import HttpClient
from common.logging_utils import Timer, extra_context, safe_url
from versioning.models import Artifact

from .config import AcquisitionConfig
from .retry import AttemptResult, is_retryable_status, run_with_retry

logger = logging.getLogger(__name__)


def calculate_sha256(path: Path) -> str:
    """Hex SHA-256 digest of the file at ``path``."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for block in iter(lambda: fh.read(Constants.DOWNLOAD_CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.debug("Failed to delete '%s'. %s", path, exc)


def _rejection_reason(body: str) -> Optional[str]:
    try:
        data = json.loads(body) if body else None
    except json.JSONDecodeError:
        return None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return None


class Downloader:
    """Downloads artifacts into the configured temp directory."""

    def __init__(self, http: HttpClient, config: AcquisitionConfig, sleep=asyncio.sleep):
        """Initialize downloader.

        Args:
            http: HTTP client used for the streamed GET.
            config: Temp directory, retry policy and timeouts.
            sleep: Awaitable used between attempts.
        """
        self.http = http
        self.config = config
        self._sleep = sleep

    async def fetch(self, artifact: Artifact) -> Path:
        """Download ``artifact`` and verify its checksum when one is published.

        Returns:
            Path of the downloaded archive; the caller owns it.

        Raises:
            AuthRejected: On HTTP 401.
            NotFound: On HTTP 404.
            DownloadFailed: On other failures once retries are exhausted.
            ChecksumMismatch: If the SHA-256 differs from ``artifact.checksum``.
        """
        dest = Path(self.config.temp_dir) / uuid.uuid4().hex
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Downloading %s", safe_url(artifact.download_url))
        logger.debug("Destination %s", dest)

        async def attempt(attempt_no: int) -> AttemptResult[Path]:
            return await self._attempt(artifact, dest, attempt_no)

        try:
            with Timer() as t:
                await run_with_retry(attempt, self.config.retry, sleep=self._sleep)
            logger.info(
                "Downloaded %s",
                artifact.file_name,
                extra=extra_context(
                    event="download",
                    component="downloader",
                    outcome="success",
                    duration_ms=t.duration_ms(),
                    target=safe_url(artifact.download_url),
                ),
            )
            if artifact.checksum:
                actual = await asyncio.to_thread(calculate_sha256, dest)
                if actual.lower() != artifact.checksum.lower():
                    raise ChecksumMismatch(artifact.checksum, actual)
        except BaseException:
            _remove(dest)
            raise
        return dest

    async def _attempt(self, artifact: Artifact, dest: Path, attempt_no: int) -> AttemptResult[Path]:
        if dest.exists():
            _remove(dest)
        try:
            async with self.http.open_response(
                artifact.download_url,
                headers=artifact.headers,
                timeout=self.config.download_timeout,
            ) as response:
                status = response.status
                if status != 200:
                    return await self._failed_response(artifact, response, attempt_no)
                async with aiofiles.open(dest, "wb") as fh:
                    async for chunk in response.content.iter_chunked(Constants.DOWNLOAD_CHUNK_SIZE):
                        await fh.write(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _remove(dest)
            logger.debug("Download attempt %d of %s failed: %s", attempt_no, artifact.file_name, exc)
            return AttemptResult.failure(
                DownloadFailed(f"Failed to download {artifact.file_name} (error: {exc!r})."),
                retryable=True,
            )
        logger.debug("Download complete")
        return AttemptResult.success(dest)

    async def _failed_response(self, artifact: Artifact, response, attempt_no: int) -> AttemptResult[Path]:
        status = response.status
        logger.debug(
            'Failed to download from "%s". Code(%s) Message(%s)',
            safe_url(artifact.download_url),
            status,
            getattr(response, "reason", ""),
            extra=extra_context(
                event="download",
                component="downloader",
                outcome="http_error",
                status_code=status,
                attempt=attempt_no,
            ),
        )
        if status == 401:
            reason = _rejection_reason(await response.text())
            request_id = response.headers.get("opc-request-id")
            token_name = '"gds-token"' if "x-download-token" in artifact.headers else "download token"
            return AttemptResult.failure(
                AuthRejected(
                    f'The provided {token_name} was rejected (reason: "{reason}", '
                    f"opc-request-id: {request_id})",
                    request_id=request_id,
                ),
                retryable=False,
            )
        if status == 404:
            return AttemptResult.failure(NotFound(artifact.file_name), retryable=False)
        return AttemptResult.failure(
            DownloadFailed(
                f"Failed to download {artifact.file_name} (unexpected HTTP response: {status}).",
                status=status,
            ),
            retryable=is_retryable_status(status),
        )
