"""Pull request assistant."""
