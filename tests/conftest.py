# tests/conftest.py
"""Shared Hypothesis configuration: the "ci" profile (100 examples, no deadline)."""

from hypothesis import settings

settings.register_profile("ci", max_examples=100, deadline=None)
settings.load_profile("ci")
