"""Explicit status transitions for corrections and cross-document validations."""
