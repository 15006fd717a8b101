"""Utility modules for RepoLoader."""
