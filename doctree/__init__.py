"""DocTree: hierarchical document/folder store with ordering, soft delete and versioning."""

__version__ = "1.0.0"
