"""
Stockflow adapter loader — resolves configured collaborators.

Usage:
    from stockflow.adapters import get_catalog, get_principal_directory

    catalog = get_catalog()
    product = catalog.get_product("P-001")

Settings:
    STOCKFLOW = {
        "CATALOG": "inventory.adapters.ProductCatalog",
        "PRINCIPAL_DIRECTORY": "stockflow.adapters.users.DjangoUserDirectory",
    }

If CATALOG is not configured, get_catalog() raises ImproperlyConfigured.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockflow.conf import stockflow_settings
from stockflow.protocols.catalog import Catalog
from stockflow.protocols.principals import PrincipalDirectory

logger = logging.getLogger(__name__)


# Cached instances, keyed by dotted path
_lock = threading.Lock()
_instances: dict[str, Any] = {}


def _load(setting_name: str, example: str) -> Any:
    path = getattr(stockflow_settings, setting_name)
    if not path:
        raise ImproperlyConfigured(
            f"STOCKFLOW['{setting_name}'] must be configured. "
            f"Example: '{example}'"
        )

    instance = _instances.get(path)
    if instance is None:
        with _lock:
            instance = _instances.get(path)
            if instance is None:  # double-checked
                try:
                    adapter_class = import_string(path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import {setting_name} '{path}': {e}"
                    ) from e
                instance = adapter_class()
                _instances[path] = instance
                logger.debug("Loaded %s: %s", setting_name, path)

    return instance


def get_catalog() -> Catalog:
    """
    Return the configured product/warehouse catalog.

    Raises:
        ImproperlyConfigured: If CATALOG is not configured or import fails
    """
    return _load("CATALOG", "inventory.adapters.ProductCatalog")


def get_principal_directory() -> PrincipalDirectory:
    """
    Return the configured principal directory.

    Raises:
        ImproperlyConfigured: If PRINCIPAL_DIRECTORY is empty or import fails
    """
    return _load("PRINCIPAL_DIRECTORY", "stockflow.adapters.users.DjangoUserDirectory")


def reset_adapters() -> None:
    """Drop cached adapter instances. Useful for testing."""
    with _lock:
        _instances.clear()
