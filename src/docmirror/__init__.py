"""DocMirror - offline DevDocs mirror and fuzzy finder."""

__version__ = "0.1.0"
