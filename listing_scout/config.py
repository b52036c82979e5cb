# === FILE: listing_scout/config.py ===
"""
Loading and validation of the ListingScout crawl configuration.
Pydantic describes the schema; files may be YAML or JSON and may use either
snake_case keys or the camelCase input names (``maxRequestsPerCrawl``, ...).
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

__all__ = (
    "StartUrl",
    "PacingWindow",
    "StealthOptions",
    "ProxyConfig",
    "BlockRules",
    "CrawlConfig",
    "load_config",
    "read_mapping",
)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)


class StartUrl(_Model):
    url: HttpUrl


class PacingWindow(_Model):
    """Range the inter-request delay is drawn from, in milliseconds."""

    min_ms: int = Field(..., ge=0)
    max_ms: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> PacingWindow:
        if self.min_ms > self.max_ms:
            raise ValueError("pacing window min_ms must not exceed max_ms")
        return self


class StealthOptions(_Model):
    """Transport-level stealth parameters; configuration, not per-target code."""

    locale: str = "en-AU"
    accept_language: str = "en-AU,en;q=0.9"
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    user_agents: List[str] = Field(default_factory=lambda: [_DEFAULT_USER_AGENT], min_length=1)
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    viewport: Dict[str, int] = Field(default_factory=lambda: {"width": 1920, "height": 1080})
    browser_args: List[str] = Field(
        default_factory=lambda: [
            "--disable-blink-features=AutomationControlled",
            "--disable-features=IsolateOrigins,site-per-process",
        ],
        description="Automation-signal suppression flags for browser transports.",
    )
    mask_webdriver: bool = True


class ProxyConfig(_Model):
    """Opaque proxy settings handed to the identity."""

    urls: List[str] = Field(default_factory=list)


class BlockRules(_Model):
    """Narrow, case-insensitive denylists for block-page detection."""

    title_markers: List[str] = Field(default_factory=lambda: ["403", "access denied"])
    body_phrases: List[str] = Field(default_factory=lambda: ["unusual traffic", "blocked", "access denied"])
    statuses: List[int] = Field(default_factory=lambda: [403, 429])


class CrawlConfig(_Model):
    """Configuration of one crawl run."""

    site: str = Field("domain", min_length=1, description="Built-in site profile name.")
    site_profile: Optional[Path] = Field(None, description="YAML/JSON site profile overriding `site`.")
    addresses: List[str] = Field(default_factory=list)
    start_urls: List[StartUrl] = Field(default_factory=list)
    max_requests_per_crawl: int = Field(100, ge=1, description="Hard cap on admitted requests.")
    max_request_retries: int = Field(3, ge=0, description="Retries per request after the first attempt.")
    request_timeout_seconds: float = Field(60.0, gt=0, description="Wall-clock timeout of one fetch.")
    max_concurrency: int = Field(1, ge=1, description="Parallel workers; 1 keeps requests strictly sequential.")
    pacing_window: Optional[PacingWindow] = Field(None, description="Defaults to the site profile's window.")
    backoff_factor: float = Field(1.5, ge=1.0, description="Retry delay multiplier per attempt.")
    max_backoff: float = Field(4.0, ge=1.0, description="Cap on the retry delay multiplier.")
    stealth: StealthOptions = Field(default_factory=StealthOptions)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    block: BlockRules = Field(default_factory=BlockRules)

    @field_validator("addresses", mode="before")
    def _strip_addresses(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [a.strip() if isinstance(a, str) else a for a in v if not isinstance(a, str) or a.strip()]
        return v

    @field_validator("start_urls", mode="before")
    def _wrap_plain_urls(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"url": u} if isinstance(u, str) else u for u in v]
        return v

    @model_validator(mode="after")
    def _check_profile_exists(self) -> CrawlConfig:
        if self.site_profile is not None and not Path(self.site_profile).is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.site_profile))
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def read_mapping(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML or JSON mapping, dispatching on the file suffix."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Read YAML or JSON and return a validated CrawlConfig.
    A missing config file (or site profile file) raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path = _DEFAULT_CFG

    data = read_mapping(path)
    try:
        return CrawlConfig(**data)
    except ValidationError:
        raise
