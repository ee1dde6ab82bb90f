"""BlobPhish interactive threat analysis console."""

__version__ = "0.1.0"
