"""Field extraction: regex pattern sets and the per-document extractor."""
