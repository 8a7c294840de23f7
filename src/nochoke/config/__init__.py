"""Config loading and schema."""

from .loader import ConfigLoadError, load_config
from .schema import EngineConfig

__all__ = ["ConfigLoadError", "EngineConfig", "load_config"]
