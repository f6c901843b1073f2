"""Correction application: strategy cascade, batch processing, legacy issue support."""
