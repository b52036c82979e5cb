"""listing_scout.parser: HTML documents, selector strategies, field parsers, images and record extraction."""
