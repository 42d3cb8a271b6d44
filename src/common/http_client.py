"""Shared async HTTP helpers used by the resolvers and the downloader.

Encapsulates the aiohttp session, the custom user agent and the common
request/timeout error handling so resolver modules avoid duplicating
try/except blocks.
"""
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import aiohttp

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin wrapper around one ``aiohttp.ClientSession``."""

    def __init__(
        self,
        user_agent: str = Constants.USER_AGENT,
        timeout: int = Constants.REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the client.

        Args:
            user_agent: Value of the User-Agent header sent with every request.
            timeout: Total timeout in seconds for API requests.
            session: Optional pre-built session (the client will not close it).
        """
        self.user_agent = user_agent
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Return the session, creating an owned one on first use."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_session = True
        return self._session

    async def start(self) -> None:
        """Start the HTTP session."""
        self._ensure_session()

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HttpClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    def _headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        request_headers = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)
        return request_headers

    async def get_json(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        context: str = "",
    ) -> Tuple[int, Dict[str, str], Optional[Any]]:
        """Perform a GET request and parse the JSON body.

        Transport failures are reported as status 0 so callers can tell an
        unreachable upstream apart from an HTTP error.

        Returns:
            Tuple of (status_code, headers_dict, parsed_json_or_none)
        """
        session = self._ensure_session()
        safe_target = safe_url(url)
        request_headers = self._headers({"Accept": "application/json", **(headers or {})})
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                        context=context,
                    ),
                )
            try:
                async with session.get(url, headers=request_headers) as response:
                    status = response.status
                    response_headers = {k: v for k, v in response.headers.items()}
                    text = await response.text()
            except asyncio.TimeoutError:
                logger.warning("%s request timed out: %s", context or "HTTP", safe_target)
                return 0, {}, None
            except aiohttp.ClientError as exc:
                logger.warning("%s connection error: %s", context or "HTTP", exc)
                return 0, {}, None

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        status_code=status,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                        context=context,
                    ),
                )

        if not text:
            return status, response_headers, None
        try:
            return status, response_headers, json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status,
                        target=safe_target,
                    ),
                )
            return status, response_headers, None

    @asynccontextmanager
    async def open_response(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open a streamed GET response as an async context manager.

        Transport errors propagate as ``aiohttp.ClientError`` or
        ``asyncio.TimeoutError``.
        """
        session = self._ensure_session()
        kwargs: Dict[str, Any] = {}
        if timeout:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_url(url),
                    stream=True,
                ),
            )
        response = await session.get(
            url,
            headers=self._headers(headers),
            **kwargs,
        )
        try:
            yield response
        finally:
            response.release()
