from ._collection import DEFAULT_MAX_ITEMS, Collection
from ._core import Config, ImmutabilityViolation, get_config, set_config
from ._results import NONE, NoneOption, Option, OptionUnwrapError, Some

__all__ = [
    "DEFAULT_MAX_ITEMS",
    "NONE",
    "Collection",
    "Config",
    "ImmutabilityViolation",
    "NoneOption",
    "Option",
    "OptionUnwrapError",
    "Some",
    "get_config",
    "set_config",
]
