"""Operational log and audit governance engine."""
