"""listing_scout.crawler: request scheduling, pacing, block detection and HTTP transport."""
