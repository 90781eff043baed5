from .loader import DEFAULT_CONFIG_TEMPLATE, load_config
from .models import (
    CheckConfig,
    ContentConfig,
    CourseCheckConfig,
    FrontmatterConfig,
    LinkConfig,
    LiquidConfig,
    ModelicaConfig,
)

__all__ = [
    "CheckConfig",
    "ContentConfig",
    "CourseCheckConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "FrontmatterConfig",
    "LinkConfig",
    "LiquidConfig",
    "ModelicaConfig",
    "load_config",
]
