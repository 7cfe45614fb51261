from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from ._format import dict_repr


@dataclass(slots=True, frozen=True)
class Config:
    """Presentation settings shared by every funcoll wrapper.

    Args:
        repr_max_items (int): Maximum number of pairs shown by `repr`. Defaults to 20.
        repr_depth (int): Maximum nesting depth shown by `repr`. Defaults to 3.
        repr_width (int): Line width used before wrapping. Defaults to 80.
    """

    repr_max_items: int = 20
    repr_depth: int = 3
    repr_width: int = 80

    def dict_repr(self, data: Mapping[Any, Any]) -> str:
        return dict_repr(
            data,
            max_items=self.repr_max_items,
            depth=self.repr_depth,
            width=self.repr_width,
        )


_CONFIG = Config()


def get_config() -> Config:
    """Return the active `Config`."""
    return _CONFIG


def set_config(**changes: Any) -> Config:
    """Replace the active `Config` with a copy carrying **changes**.

    Args:
        **changes (Any): Field values to override.

    Returns:
        Config: The new active configuration.

    Example:
    ```python
    >>> import funcoll as fc
    >>> fc.set_config(repr_max_items=2)
    Config(repr_max_items=2, repr_depth=3, repr_width=80)
    >>> fc.Collection.from_sequence("abc")
    Collection({0: 'a', 1: 'b'}...)
    >>> fc.set_config(repr_max_items=20).repr_max_items
    20

    ```
    """
    global _CONFIG  # noqa: PLW0603
    _CONFIG = replace(_CONFIG, **changes)
    return _CONFIG
