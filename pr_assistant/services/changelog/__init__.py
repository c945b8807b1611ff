"""Change-log content store."""
