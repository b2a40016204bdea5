"""Keysmith test suite."""
