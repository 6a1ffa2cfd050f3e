"""CollabMatch: skill matching and code evaluation for collaborative projects."""

__version__ = "0.1.0"
