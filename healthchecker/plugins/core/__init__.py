"""Built-in checks shipped with the engine."""

from healthchecker.plugins.core.config import CoreChecksConfig, DiskConfig, ProbeDef, load_checks_config
from healthchecker.plugins.core.plugin import CORE_CATEGORIES, CorePlugin

__all__ = [
    "CORE_CATEGORIES",
    "CoreChecksConfig",
    "CorePlugin",
    "DiskConfig",
    "ProbeDef",
    "load_checks_config",
]
