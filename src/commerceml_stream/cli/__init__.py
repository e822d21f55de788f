"""Command-line interface for commerceml-stream.

This module provides CLI tools for streaming CommerceML offers and orders
documents, scanning arbitrary XML with ad hoc rules and reporting statistics.
"""

from .main import main

__all__ = ["main"]
