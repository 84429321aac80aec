"""Pydantic models for configuration, units of work and ledger entries."""
