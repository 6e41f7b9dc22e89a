"""Candidate records backed by a document store, with a local fallback cache."""

__version__ = "0.1.0"
