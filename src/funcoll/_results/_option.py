from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Never, TypeIs


class OptionUnwrapError(RuntimeError): ...


class Option[T](ABC):
    """An explicit "value or nothing" result.

    `Some(value)` holds a value, which may itself be falsy (`0`, `""`, `[]`...).
    `NONE` holds nothing.
    Unlike a bare `None` return, the two cases can never be confused with a payload.
    """

    __slots__ = ()

    @staticmethod
    def from_[U](value: U | None) -> Option[U]:
        """Wrap a nullable value, mapping `None` to `NONE`.

        Args:
            value (U | None): The value to wrap.

        Returns:
            Option[U]: `Some(value)` if value is not None, `NONE` otherwise.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Option.from_(0)
        Some(value=0)
        >>> fc.Option.from_(None)
        NONE

        ```
        """
        return NONE if value is None else Some(value)

    @abstractmethod
    def is_some(self) -> TypeIs[Some[T]]:  # type: ignore[misc]
        """Returns `True` if the option is a `Some` value."""
        ...

    @abstractmethod
    def is_none(self) -> TypeIs[NoneOption]:  # type: ignore[misc]
        """Returns `True` if the option is `NONE`."""
        ...

    @abstractmethod
    def unwrap(self) -> T:
        """Returns the contained `Some` value.

        Returns:
            T: The contained `Some` value.

        Raises:
            OptionUnwrapError: If the option is `NONE`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Some("car").unwrap()
        'car'
        >>> fc.NONE.unwrap()
        Traceback (most recent call last):
            ...
        funcoll._results._option.OptionUnwrapError: called `unwrap` on a `None`

        ```
        """
        ...

    def expect(self, msg: str) -> T:
        """Returns the contained `Some` value, or raises with a provided message.

        Args:
            msg (str): The message to include in the exception if the option is `NONE`.

        Returns:
            T: The contained `Some` value.

        Raises:
            OptionUnwrapError: If the option is `NONE`.
        """
        if self.is_some():
            return self.unwrap()
        msg = f"{msg} (called `expect` on a `None`)"
        raise OptionUnwrapError(msg)

    def unwrap_or(self, default: T) -> T:
        """Returns the contained `Some` value or a provided default.

        Args:
            default (T): The value to return if the option is `NONE`.

        Returns:
            T: The contained `Some` value or the provided default.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Some("car").unwrap_or("bike")
        'car'
        >>> fc.NONE.unwrap_or("bike")
        'bike'

        ```
        """
        return self.unwrap() if self.is_some() else default

    def map[U](self, f: Callable[[T], U]) -> Option[U]:
        """Maps an `Option[T]` to `Option[U]` by applying a function to a contained `Some` value.

        Args:
            f (Callable[[T], U]): The function to apply to the `Some` value.

        Returns:
            Option[U]: A new `Option` with the mapped value if `Some`, otherwise `NONE`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Some("Hello, World!").map(len)
        Some(value=13)
        >>> fc.NONE.map(len)
        NONE

        ```
        """
        if self.is_some():
            return Some(f(self.unwrap()))
        return NONE


@dataclass(slots=True)
class Some[T](Option[T]):
    value: T

    def is_some(self) -> TypeIs[Some[T]]:  # type: ignore[misc]
        return True

    def is_none(self) -> TypeIs[NoneOption]:  # type: ignore[misc]
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(slots=True)
class NoneOption(Option[Any]):
    def __repr__(self) -> str:
        return "NONE"

    def is_some(self) -> TypeIs[Some[Any]]:  # type: ignore[misc]
        return False

    def is_none(self) -> TypeIs[NoneOption]:  # type: ignore[misc]
        return True

    def unwrap(self) -> Never:
        raise OptionUnwrapError("called `unwrap` on a `None`")


NONE: Option[Any] = NoneOption()
