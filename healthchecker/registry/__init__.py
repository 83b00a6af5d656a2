from healthchecker.registry.categories import CategoryRegistry, HealthCategory
from healthchecker.registry.providers import CORE_PROVIDER, ProviderMetadata, ProviderRegistry

__all__ = [
    "CORE_PROVIDER",
    "CategoryRegistry",
    "HealthCategory",
    "ProviderMetadata",
    "ProviderRegistry",
]
