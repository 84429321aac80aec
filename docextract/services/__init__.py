"""Enumeration, ledger, config and Vertex AI services."""
