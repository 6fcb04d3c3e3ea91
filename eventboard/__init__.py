"""Event Board: client-side state for browsing and editing remote events."""

__version__ = "0.1.0"
