"""Port markdown documents and code into AI chat conversations."""

__version__ = "1.0.0"
