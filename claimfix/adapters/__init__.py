"""Adapters from upstream analysis payloads to canonical correction records."""
