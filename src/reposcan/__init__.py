"""Pull request pulse metrics for GitHub repositories."""

__version__ = "1.0.0"
