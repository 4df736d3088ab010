"""Run configuration for a link check.

Explicit values (CLI flags or keyword arguments) win; anything left unset
falls back to ``LINKCHECK_*`` environment variables, read at call time so a
late ``.env`` load or a monkeypatched environment is honoured.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .filters import parse_excludes
from .urls import DEFAULT_ROOT, InvalidRootError, normalize_root

LOGGER = logging.getLogger(__name__)

ENV_CRAWLERS = "LINKCHECK_CRAWLERS"
ENV_EXCLUDE = "LINKCHECK_EXCLUDE"
ENV_TIMEOUT = "LINKCHECK_TIMEOUT"
ENV_USER_AGENT = "LINKCHECK_USER_AGENT"


class ConfigError(Exception):
    """Raised for configuration that must stop the run before crawling."""


def default_crawlers() -> int:
    return os.cpu_count() or 1


@dataclass
class CheckConfig:
    """Validated settings for one run."""

    root: str = DEFAULT_ROOT
    crawlers: int = field(default_factory=default_crawlers)
    excludes: List[str] = field(default_factory=list)
    # seconds; None disables the per-request timeout
    timeout: Optional[float] = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    verbose: bool = False
    json_output: bool = False


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def build_config(
    root: Optional[str] = None,
    *,
    crawlers: Optional[int] = None,
    exclude: Optional[str] = None,
    timeout: Optional[float] = None,
    user_agent: Optional[str] = None,
    verbose: bool = False,
    json_output: bool = False,
) -> CheckConfig:
    """Merge explicit settings with the environment and validate them.

    Raises:
        ConfigError: If the root URL is unusable, fewer than one crawler is
            requested, or an environment value does not parse.
    """
    try:
        normalized_root = normalize_root(root or "")
    except InvalidRootError as exc:
        raise ConfigError(str(exc)) from exc

    if crawlers is None:
        crawlers = _env_int(ENV_CRAWLERS)
    if crawlers is None:
        crawlers = default_crawlers()
    if crawlers < 1:
        raise ConfigError("need at least one crawler")

    if exclude is None:
        exclude = os.getenv(ENV_EXCLUDE, "")

    if timeout is None:
        timeout = _env_float(ENV_TIMEOUT)
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    if timeout < 0:
        raise ConfigError("timeout must not be negative")

    config = CheckConfig(
        root=normalized_root,
        crawlers=crawlers,
        excludes=parse_excludes(exclude),
        timeout=timeout or None,
        user_agent=user_agent or os.getenv(ENV_USER_AGENT) or DEFAULT_USER_AGENT,
        verbose=verbose,
        json_output=json_output,
    )
    LOGGER.debug("Using %s", config)
    return config
