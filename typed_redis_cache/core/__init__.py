"""Core configuration for the typed Redis cache."""
