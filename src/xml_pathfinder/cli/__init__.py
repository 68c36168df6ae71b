"""Command-line interface module for XML Pathfinder.

This module provides CLI tools to resolve tag paths, extract values, list
extractable fields and search across XML files and zip archives.
"""

from .main import main

__all__ = ["main"]
