"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    CatalogConfig,
    DocumentDialect,
    HttpConfig,
    PoolConfig,
    QSearchConfig,
)

__all__ = [
    "CatalogConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DocumentDialect",
    "HttpConfig",
    "PoolConfig",
    "QSearchConfig",
]
