"""catalogkeeper version information (single source of truth)."""

__version__ = "0.3.0"
