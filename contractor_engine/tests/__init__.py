"""Contractor Engine test suite."""
