"""Configuration injected into the acquisition core."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from constants import Constants
from common.platform import PlatformInfo, detect_platform

from .retry import RetryPolicy


def _default_tool_cache() -> Path:
    return Path(tempfile.gettempdir()) / Constants.DEFAULT_CACHE_SUBDIR / "toolcache"


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir()) / Constants.DEFAULT_CACHE_SUBDIR / "tmp"


@dataclass(frozen=True)
class AcquisitionConfig:
    """Everything the core needs to know about its environment.

    Nothing below this object reads environment variables; the CLI builds
    one instance and passes it down.
    """

    tool_cache_dir: Path = field(default_factory=_default_tool_cache)
    temp_dir: Path = field(default_factory=_default_temp_dir)
    github_token: Optional[str] = None
    gds_token: Optional[str] = None
    user_agent: str = Constants.USER_AGENT
    request_timeout: int = Constants.REQUEST_TIMEOUT
    download_timeout: int = Constants.DOWNLOAD_TIMEOUT
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    platform: PlatformInfo = field(default_factory=detect_platform)
    check_for_updates: bool = True

    @classmethod
    def from_sources(
        cls,
        cli: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
        file_config: Optional[Mapping[str, Any]] = None,
        platform: Optional[PlatformInfo] = None,
    ) -> "AcquisitionConfig":
        """Merge configuration with precedence CLI > environment > file > defaults.

        Args:
            cli: Values given on the command line (None values are ignored).
            env: Environment mapping (defaults to ``os.environ``).
            file_config: Parsed YAML configuration.
            platform: Target platform (detected when omitted).
        """
        cli = {k: v for k, v in (cli or {}).items() if v not in (None, "")}
        env = os.environ if env is None else env
        file_config = file_config or {}

        def pick(key: str, env_name: Optional[str] = None) -> Any:
            if key in cli:
                return cli[key]
            if env_name and env.get(env_name):
                return env[env_name]
            value = file_config.get(key)
            return None if value in (None, "") else value

        kwargs: dict = {}
        tool_cache = pick("tool_cache_dir", Constants.ENV_TOOL_CACHE)
        if tool_cache:
            kwargs["tool_cache_dir"] = Path(tool_cache)
        temp_dir = pick("temp_dir", Constants.ENV_TEMP)
        if temp_dir:
            kwargs["temp_dir"] = Path(temp_dir)
        kwargs["github_token"] = pick("github_token", Constants.ENV_GITHUB_TOKEN)
        kwargs["gds_token"] = pick("gds_token", Constants.ENV_GDS_TOKEN)
        for key in ("user_agent",):
            value = pick(key)
            if value:
                kwargs[key] = str(value)
        for key in ("request_timeout", "download_timeout"):
            value = pick(key)
            if value is not None:
                kwargs[key] = int(value)
        check = pick("check_for_updates")
        if check is not None:
            kwargs["check_for_updates"] = _as_bool(check)

        retry_cfg = file_config.get("retry") or {}
        if isinstance(retry_cfg, Mapping) and retry_cfg:
            kwargs["retry"] = RetryPolicy(
                max_attempts=int(retry_cfg.get("max_attempts", Constants.HTTP_RETRY_MAX)),
                min_backoff=float(retry_cfg.get("min_backoff", Constants.HTTP_RETRY_MIN_DELAY_SEC)),
                max_backoff=float(retry_cfg.get("max_backoff", Constants.HTTP_RETRY_MAX_DELAY_SEC)),
            )
        if platform is not None:
            kwargs["platform"] = platform
        return cls(**kwargs)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")
