"""Session-level API of DocSplit."""
