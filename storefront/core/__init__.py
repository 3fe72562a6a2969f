"""Core helpers: configuration, pricing, caching and input normalization."""
