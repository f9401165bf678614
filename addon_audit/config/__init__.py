"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import AuditConfig, CatalogQuery, CurseSort, TransportConfig

__all__ = [
    "AuditConfig",
    "CatalogQuery",
    "ConfigLocator",
    "ConfigRepository",
    "CurseSort",
    "TransportConfig",
]
