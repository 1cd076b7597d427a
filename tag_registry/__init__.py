"""Tag registry: records name:tag pairs and serves their history over HTTP."""

__version__ = "0.1.0"
