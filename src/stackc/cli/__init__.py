"""
stackc Command-Line Interface
=============================

- **stackcc**: compile inline source text to assembly

The tool is a Click application; errors are reported through the shared
handler in `stackc.cli.errors`.
"""

__all__ = ["stackcc"]
