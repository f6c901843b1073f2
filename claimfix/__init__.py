"""Claim correction engine."""
