"""Code review sub-process."""
