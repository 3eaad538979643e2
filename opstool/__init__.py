"""opstool - per-tool binary version manager."""

__version__ = "0.3.0"
