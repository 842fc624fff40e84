"""Shared utilities for DocSplit."""
