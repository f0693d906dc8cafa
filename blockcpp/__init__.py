"""Visual block workspace → C++ source generator."""

__version__ = "1.0.0"
