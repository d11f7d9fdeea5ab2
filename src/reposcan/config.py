"""Configuration parsing and validation for reposcan."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import AuthenticationError, ConfigurationError

DEFAULT_COOLDOWN_MONTHS = 1
DEFAULT_LOW_LINES = 50
DEFAULT_HIGH_LINES = 500
DEFAULT_BOT_PREFIXES: Tuple[str, ...] = ("renovate",)

TOKEN_ENV_VAR = "GITHUB_TOKEN"


@dataclass(frozen=True)
class NormalizationConfig:
    """Settings that shape contributor tracking and metric normalization."""

    low: int = DEFAULT_LOW_LINES
    high: int = DEFAULT_HIGH_LINES
    cooldown: int = DEFAULT_COOLDOWN_MONTHS
    allowlist: Tuple[str, ...] = ()
    start: Optional[date] = None
    bot_prefixes: Tuple[str, ...] = DEFAULT_BOT_PREFIXES


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the scanner."""

    settings: NormalizationConfig
    repos: Tuple[str, ...]
    token: str = field(repr=False)


def split_repo_name(name: str) -> Tuple[str, str]:
    """Split an ``org/repo`` identifier into its two parts.

    Raises:
        ConfigurationError: If ``name`` is not exactly two non-empty path segments.
    """
    parts = name.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(f"Invalid repository '{name}': expected 'org/repo'.")
    return parts[0], parts[1]


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Invalid value for '{key}': expected an object.")
    return value


def _non_negative_int(section: Dict[str, Any], key: str, default: int, label: str) -> int:
    value = section.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Invalid value for '{label}': expected an integer.")
    if value < 0:
        raise ConfigurationError(f"Invalid value for '{label}': expected an integer >= 0.")
    return value


def _string_tuple(section: Dict[str, Any], key: str, default: Tuple[str, ...], label: str) -> Tuple[str, ...]:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"Invalid value for '{label}': expected a list of strings.")
    return tuple(value)


def parse_start_date(value: Optional[str]) -> Optional[date]:
    """Parse the optional ``graphs.start`` override (``YYYY-MM-DD``)."""
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid value for 'graphs.start': expected YYYY-MM-DD, got {value!r}."
        ) from exc


def parse_settings(data: Dict[str, Any]) -> NormalizationConfig:
    """Build a ``NormalizationConfig`` from the ``settings`` object of a config file.

    Missing keys fall back to the defaults (cooldown 1 month, thresholds 50/500,
    unrestricted allowlist, no fixed start).
    """
    contributors = _section(data, "contributors")
    pr = _section(data, "pr")
    graphs = _section(data, "graphs")

    low = _non_negative_int(pr, "low", DEFAULT_LOW_LINES, "pr.low")
    high = _non_negative_int(pr, "high", DEFAULT_HIGH_LINES, "pr.high")
    if low > high:
        raise ConfigurationError(
            f"Invalid PR size thresholds: 'pr.low' ({low}) must not exceed 'pr.high' ({high})."
        )

    return NormalizationConfig(
        low=low,
        high=high,
        cooldown=_non_negative_int(
            contributors, "cooldown", DEFAULT_COOLDOWN_MONTHS, "contributors.cooldown"
        ),
        allowlist=_string_tuple(contributors, "allowlist", (), "contributors.allowlist"),
        start=parse_start_date(graphs.get("start")),
        bot_prefixes=_string_tuple(
            contributors, "bot_prefixes", DEFAULT_BOT_PREFIXES, "contributors.bot_prefixes"
        ),
    )


def load_token(token_file: Path) -> str:
    """Read the GitHub token from ``GITHUB_TOKEN`` or, failing that, ``token_file``.

    Raises:
        AuthenticationError: If no non-empty token is available.
    """
    token = os.getenv(TOKEN_ENV_VAR, "").strip()
    if token:
        return token

    try:
        token = token_file.read_text(encoding="utf-8").strip()
    except OSError:
        token = ""

    if not token:
        raise AuthenticationError(
            "Missing required GitHub access token. "
            f"Set the '{TOKEN_ENV_VAR}' environment variable or write it to '{token_file}'."
        )
    return token


def load_config(config_path: Path, token_file: Path) -> Config:
    """Load, validate and combine the JSON config file and the access token.

    Args:
        config_path: Path to the JSON configuration file.
        token_file: Fallback file holding the GitHub access token.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the file is unreadable or any value is invalid.
        AuthenticationError: If no access token is configured.
    """
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file '{config_path}': {exc}") from exc

    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Config file '{config_path}' is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{config_path}' must contain a JSON object.")

    settings = parse_settings(_section(data, "settings"))

    repos = data.get("repos") or []
    if not isinstance(repos, list) or not all(isinstance(repo, str) for repo in repos):
        raise ConfigurationError("Invalid value for 'repos': expected a list of 'org/repo' strings.")
    for repo in repos:
        split_repo_name(repo)

    return Config(settings=settings, repos=tuple(repos), token=load_token(token_file))
