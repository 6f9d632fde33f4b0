"""Operational scripts (migrations, sample data)."""
