from .logging_config import configure_logging, configure_from_config
from .config_loader import load_config
from .formatters import format_flow
from .validators import validate_config_dependencies

__all__ = [
    "configure_from_config",
    "configure_logging",
    "load_config",
    "format_flow",
    "validate_config_dependencies",
]
