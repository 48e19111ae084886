"""Cellar: run formula build steps against each declared language runtime."""

__version__ = "0.1.0"
