"""RepoLoader - replay branch history onto another branch in paced batches."""

__version__ = "0.1.0"
