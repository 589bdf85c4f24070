"""recipebox: recipe search with full-text matching and search history."""

__version__ = "1.0.0"
