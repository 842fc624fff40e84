"""DocSplit modules."""
