"""Admission-control primitives, retry and error types."""
