# === FILE: listing_scout/profiles.py ===
"""Site profiles: per-target selector lists, link rules, image policy, pacing.

Target sites differ in markup, not in crawl behaviour, so everything that
varies between them is data.  Built-in profiles live as YAML files in
``listing_scout/sites/``; a custom profile can be supplied with the
``site_profile`` config key.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from listing_scout.config import CrawlConfig, PacingWindow, read_mapping
from listing_scout.parser.images import ImageRules
from listing_scout.parser.selectors import StrategySpec

__all__ = ("LinkRule", "SiteProfile", "SITES_DIR", "available_profiles", "load_profile", "profile_for")

SITES_DIR = Path(__file__).with_name("sites")

# Fields the record extractor knows how to resolve.
KNOWN_FIELDS = frozenset(
    {
        "full_address",
        "price_text",
        "property_type",
        "property_status",
        "bedrooms",
        "bathrooms",
        "parking_spaces",
        "land_size",
        "building_size",
        "listing_id",
        "description",
        "features",
        "agent_name",
        "agency_name",
    }
)


class LinkRule(BaseModel):
    """How to find property links on a search results page."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    selector: str
    attr: str = "href"
    pattern: Optional[str] = Field(None, description="Regex the absolute URL must match.")
    exclude: Optional[str] = Field(None, description="Regex that disqualifies a URL.")

    @field_validator("pattern", "exclude")
    def _compiles(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            re.compile(v)
        return v


class SiteProfile(BaseModel):
    """Everything target-specific about one listing site."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    base_url: str
    search_url: Optional[str] = Field(None, description="Search endpoint with a '{query}' placeholder.")
    address_url: Optional[str] = Field(None, description="Direct property URL with a '{slug}' placeholder.")
    pacing: PacingWindow = Field(default_factory=lambda: PacingWindow(min_ms=2_000, max_ms=5_000))
    link_rules: List[LinkRule] = Field(default_factory=list)
    fields: Dict[str, List[StrategySpec]] = Field(default_factory=dict)
    images: ImageRules = Field(default_factory=ImageRules)

    @field_validator("fields")
    def _known_fields(cls, v: Dict[str, List[StrategySpec]]) -> Dict[str, List[StrategySpec]]:
        unknown = sorted(set(v) - KNOWN_FIELDS)
        if unknown:
            raise ValueError(f"unknown profile fields: {', '.join(unknown)}")
        return v

    @model_validator(mode="after")
    def _check_templates(self) -> SiteProfile:
        if self.search_url is not None and "{query}" not in self.search_url:
            raise ValueError("search_url must contain '{query}'")
        if self.address_url is not None and "{slug}" not in self.address_url:
            raise ValueError("address_url must contain '{slug}'")
        return self


def available_profiles() -> List[str]:
    return sorted(p.stem for p in SITES_DIR.glob("*.yaml"))


def load_profile(source: Union[str, Path]) -> SiteProfile:
    """Load a built-in profile by name, or a profile file by path."""
    path = Path(source)
    if path.suffix.lower() not in (".yaml", ".yml", ".json"):
        path = SITES_DIR / f"{source}.yaml"
        if not path.is_file():
            raise ValueError(f"Unknown site profile '{source}' (available: {', '.join(available_profiles())})")
    return SiteProfile(**read_mapping(path))


def profile_for(config: CrawlConfig) -> SiteProfile:
    return load_profile(config.site_profile if config.site_profile is not None else config.site)
