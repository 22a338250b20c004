"""Data models for incompatibility records."""
