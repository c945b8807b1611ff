"""Content generation service."""
