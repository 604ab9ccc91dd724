"""Shared utilities for Book Forge."""
