from ._config import Config, get_config, set_config
from ._errors import ImmutabilityViolation
from ._main import Pipeable
from ._protocols import SupportsKeysAndGetItem

__all__ = [
    "Config",
    "ImmutabilityViolation",
    "Pipeable",
    "SupportsKeysAndGetItem",
    "get_config",
    "set_config",
]
