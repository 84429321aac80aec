"""docextract: rate-limited batch extraction of documents via Vertex AI."""

__version__ = "0.1.0"
