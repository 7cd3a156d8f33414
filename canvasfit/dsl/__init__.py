"""Data model for the resize engine."""
