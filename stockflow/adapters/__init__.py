"""
Stockflow Adapters.

Implementations of protocols for external systems, and the loader that
resolves the configured ones.
"""

from stockflow.adapters.loader import (
    get_catalog,
    get_principal_directory,
    reset_adapters,
)

__all__ = [
    "get_catalog",
    "get_principal_directory",
    "reset_adapters",
]
