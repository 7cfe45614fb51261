from __future__ import annotations

import functools
import itertools
import logging
from collections.abc import (
    Callable,
    ItemsView,
    Iterable,
    Iterator,
    KeysView,
    Mapping,
    Sequence,
    Set,
)
from operator import itemgetter
from typing import TYPE_CHECKING, Any, Final, NoReturn, overload

import cytoolz as cz
import more_itertools as mit

from ._core import ImmutabilityViolation, Pipeable, get_config
from ._results import NONE, Option, Some

if TYPE_CHECKING:
    from ._core import SupportsKeysAndGetItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS: Final = 1000
"""Upper bound on the size of a generated `Collection` when none is given."""

_UNSET: Any = object()


def _wrap[K, V](data: dict[K, V]) -> Collection[K, V]:
    # `data` must not be reachable from anywhere else once wrapped.
    instance: Collection[K, V] = object.__new__(Collection)
    object.__setattr__(instance, "_inner", data)
    return instance


def _reindex[V](values: Iterable[V]) -> Collection[int, V]:
    return _wrap(dict(enumerate(values)))


def _collect_bounded[V](
    pull: Callable[[], Option[V]], max_items: int, origin: str
) -> Collection[int, V]:
    # Plain loop: a producer raising StopIteration must not read as exhaustion.
    collected: dict[int, V] = {}
    position = 0
    while (pulled := pull()).is_some():
        position += 1
        if position > max_items:
            logger.debug(
                f"{origin} stopped at max_items={max_items}, last produced value discarded"
            )
            break
        collected[position - 1] = pulled.unwrap()
    return _wrap(collected)


def _walk(value: object) -> Iterator[object]:
    match value:
        case str() | bytes() | bytearray():
            yield value
        case Mapping():
            for _, inner in value.items():
                yield from _walk(inner)
        case Sequence() | Set():
            for inner in value:
                yield from _walk(inner)
        case _:
            yield value


class Collection[K, V](Pipeable, Mapping[K, V]):
    """An immutable, ordered, keyed collection with a chainable API.

    Every transformation returns a new `Collection`, the receiver is never modified.

    Whether an operator keeps the original keys or re-indexes from 0 is part of its contract:

    - `filter`, `map`, `take`, `take_while`, `drop`, `drop_while` keep the original keys.
    - `sort`, `sort_by`, `values`, `tail`, `flatten` re-index from 0.
    - `group_by` keys the result by bucket, each bucket keeping the original keys.

    There is no public constructor. Use `Collection.from_sequence`, `Collection.from_mapping`,
    `Collection.generate` or `Collection.from_fn`.

    Implements the `Mapping` Protocol from `collections.abc`, as a read-only mapping.

    Writing or deleting a key raises `ImmutabilityViolation`.

    Reading a missing key returns `None` instead of raising.

    `key in collection` is False for a key holding `None`, while `keys()`, `items()` and iteration still report that pair.

    ```python
    >>> import funcoll as fc
    >>> (
    ...     fc.Collection.from_sequence(range(1, 11))
    ...     .filter(lambda x: x % 2 == 0)
    ...     .map(lambda x: x * x)
    ...     .reduce(lambda a, b: a + b, 0)
    ... )
    220

    ```
    """

    __slots__ = ("_inner",)

    _inner: dict[K, V]

    def __init__(self, *args: object, **kwargs: object) -> None:
        msg = "Collection has no public constructor, use one of the `Collection.from_*` or `Collection.generate` factories"
        raise TypeError(msg)

    def __setattr__(self, name: str, value: object) -> NoReturn:
        raise ImmutabilityViolation("Collection object is immutable")

    def __delattr__(self, name: str) -> NoReturn:
        raise ImmutabilityViolation("Collection object is immutable")

    def __reduce__(self) -> tuple[Callable[[dict[K, V]], Collection[K, V]], tuple[dict[K, V]]]:
        return _wrap, (dict(self._inner),)

    def __repr__(self) -> str:
        return f"Collection({get_config().dict_repr(self._inner)})"

    def __iter__(self) -> Iterator[K]:
        return self._inner.__iter__()

    def __len__(self) -> int:
        return len(self._inner)

    def __getitem__(self, key: K) -> V | None:
        return self._inner.get(key)

    def __contains__(self, key: object) -> bool:
        return self._inner.get(key) is not None  # type: ignore[call-overload]

    def keys(self) -> KeysView[K]:
        return self._inner.keys()

    def items(self) -> ItemsView[K, V]:
        return self._inner.items()

    def __setitem__(self, key: K, value: V) -> NoReturn:
        raise ImmutabilityViolation("Collection object is immutable")

    def __delitem__(self, key: K) -> NoReturn:
        raise ImmutabilityViolation("Collection object is immutable")

    @staticmethod
    def from_sequence[U](values: Iterable[U]) -> Collection[int, U]:
        """Create a `Collection` from any `Iterable`, keyed from 0 in iteration order.

        Args:
            values (Iterable[U]): The values to collect.

        Returns:
            Collection[int, U]: A new Collection keyed `0..n-1`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence(["a", "b", "c"])
        Collection({0: 'a', 1: 'b', 2: 'c'})
        >>> fc.Collection.from_sequence([])
        Collection({})

        ```
        """
        return _reindex(values)

    @staticmethod
    def from_mapping[G, I](
        data: Mapping[G, I] | Iterable[tuple[G, I]] | SupportsKeysAndGetItem[G, I],
    ) -> Collection[G, I]:
        """Create a `Collection` from a convertible value, keeping its keys and their order.

        Args:
            data (Mapping[G, I] | Iterable[tuple[G, I]] | SupportsKeysAndGetItem[G, I]): Object convertible into a dict.

        Returns:
            Collection[G, I]: Instance containing a copy of the data from the input.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_mapping({"x": 1, "y": 2})
        Collection({'x': 1, 'y': 2})
        >>> fc.Collection.from_mapping([("d", "e"), ("f", "g")])
        Collection({'d': 'e', 'f': 'g'})

        ```
        """
        return _wrap(dict(data))

    @staticmethod
    def generate[U](
        producer: Callable[[], U], max_items: int = DEFAULT_MAX_ITEMS
    ) -> Collection[int, U]:
        """Create a `Collection` by calling **producer** until it returns a falsy value.

        `False`, `0`, `""`, `None` and empty containers all end the generation, and are never collected.

        Use `Collection.from_fn` when falsy values are legitimate payloads.

        At most **max_items** values are collected.

        When the bound is reached, the producer has been called one extra time and that value is discarded.

        A typical use is draining a database cursor:
        `Collection.generate(cursor.fetchone).map(Item.from_row)`.

        Args:
            producer (Callable[[], U]): Zero-argument callable returning the next value.
            max_items (int): Maximum number of values collected. Defaults to 1000.

        Returns:
            Collection[int, U]: A new Collection keyed `0..n-1`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> countdown = iter([5, 4, 3, 2, 1, 0])
        >>> fc.Collection.generate(lambda: next(countdown), max_items=10)
        Collection({0: 5, 1: 4, 2: 3, 3: 2, 4: 1})
        >>> fc.Collection.generate(lambda: "row", max_items=2)
        Collection({0: 'row', 1: 'row'})

        ```
        """

        def _pull() -> Option[U]:
            value = producer()
            return Some(value) if value else NONE

        return _collect_bounded(_pull, max_items, "generate")

    @staticmethod
    def from_fn[U](
        producer: Callable[[], Option[U]], max_items: int = DEFAULT_MAX_ITEMS
    ) -> Collection[int, U]:
        """Create a `Collection` by calling **producer** until it returns `NONE`.

        Each `Some(value)` is collected, whatever its truthiness.

        Bounded by **max_items** exactly like `Collection.generate`.

        Args:
            producer (Callable[[], Option[U]]): Zero-argument callable returning `Some(value)` or `NONE`.
            max_items (int): Maximum number of values collected. Defaults to 1000.

        Returns:
            Collection[int, U]: A new Collection keyed `0..n-1`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> rows = iter([fc.Some(3), fc.Some(0), fc.Some(""), fc.NONE])
        >>> fc.Collection.from_fn(lambda: next(rows))
        Collection({0: 3, 1: 0, 2: ''})

        ```
        """
        return _collect_bounded(producer, max_items, "from_fn")

    def to_dict(self) -> dict[K, V]:
        """Return a shallow copy of the underlying dict.

        This is a terminal operation that ends the chain.

        Mutating the returned dict has no effect on the `Collection`.

        Returns:
            dict[K, V]: The key-value pairs, in order.

        ```python
        >>> import funcoll as fc
        >>> col = fc.Collection.from_sequence([1, 2])
        >>> data = col.to_dict()
        >>> data[5] = 99
        >>> col.to_dict()
        {0: 1, 1: 2}

        ```
        """
        return dict(self._inner)

    def to_list(self) -> list[V]:
        """Return the values as a list, in order."""
        return list(self._inner.values())

    def iter_values(self) -> Iterator[V]:
        """Return an iterator over the values, in order."""
        return iter(self._inner.values())

    def count(self) -> int:
        """Return the number of key-value pairs.

        Equivalent to `len(self)`.

        Returns:
            int: The number of pairs in the Collection.
        """
        return len(self._inner)

    def is_empty(self) -> bool:
        return not self._inner

    def get(self, key: K, default: Any = None) -> Any:
        return self._inner.get(key, default)

    def contains_key(self, key: K) -> bool:
        """Check if **key** is present with a value other than `None`.

        This is equivalent to using the `in` keyword directly on the `Collection`.

        Args:
            key (K): The key to check for existence.

        Returns:
            bool: True if the key holds a non-`None` value, False otherwise.

        ```python
        >>> import funcoll as fc
        >>> col = fc.Collection.from_mapping({"a": 1, "b": None})
        >>> col.contains_key("a")
        True
        >>> col.contains_key("b")
        False
        >>> col.contains_key("c")
        False

        ```
        """
        return key in self

    def filter(self, predicate: Callable[[V], object]) -> Collection[K, V]:
        """Keep the pairs whose value satisfies **predicate**.

        Keys are **not** rewritten.

        Args:
            predicate (Callable[[V], object]): Function to determine if a value should be kept.

        Returns:
            Collection[K, V]: Filtered Collection, original keys preserved.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 2, 3, 4]).filter(lambda x: x % 2 == 0)
        Collection({1: 2, 3: 4})

        ```
        """
        return _wrap(cz.dicttoolz.valfilter(predicate, self._inner))

    def map[U](self, func: Callable[[V], U]) -> Collection[K, U]:
        """Apply **func** to each value, keeping keys and order.

        Args:
            func (Callable[[V], U]): Function to apply to each value.

        Returns:
            Collection[K, U]: Collection with transformed values.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_mapping({"Alice": [20, 15], "Bob": [10]}).map(sum)
        Collection({'Alice': 35, 'Bob': 10})

        ```
        """
        return _wrap(cz.dicttoolz.valmap(func, self._inner))

    @overload
    def reduce(self, func: Callable[[V, V], V]) -> V | None: ...
    @overload
    def reduce[U](self, func: Callable[[U, V], U], initial: U) -> U: ...
    def reduce[U](
        self, func: Callable[[Any, V], Any], initial: U = _UNSET
    ) -> U | V | None:
        """Fold the values from left to right into a single value.

        If **initial** is given, it is placed before the values, and returned as-is for an empty Collection.

        Otherwise the fold starts from the first value, and an empty Collection gives `None`.

        Args:
            func (Callable[[Any, V], Any]): Function of two arguments, the accumulator and the next value.
            initial (U): Starting accumulator. Defaults to the first value.

        Returns:
            U | V | None: The folded value.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 2, 3]).reduce(lambda a, b: a + b)
        6
        >>> fc.Collection.from_sequence([1, 2, 3]).reduce(lambda acc, x: acc + [x], [])
        [1, 2, 3]
        >>> fc.Collection.from_sequence([]).reduce(lambda a, b: a + b) is None
        True

        ```
        """
        if initial is not _UNSET:
            return functools.reduce(func, self._inner.values(), initial)
        if not self._inner:
            return None
        return functools.reduce(func, self._inner.values())

    def take(self, n: int) -> Collection[K, V]:
        """Keep the first **n** pairs, or all but the last `abs(n)` pairs if **n** is negative.

        Keys are preserved.

        Args:
            n (int): Number of pairs to keep, or to trim from the end if negative.

        Returns:
            Collection[K, V]: A new Collection.

        Example:
        ```python
        >>> import funcoll as fc
        >>> col = fc.Collection.from_sequence("abcd")
        >>> col.take(2)
        Collection({0: 'a', 1: 'b'})
        >>> col.take(-1)
        Collection({0: 'a', 1: 'b', 2: 'c'})

        ```
        """
        return _wrap(dict(mit.islice_extended(self._inner.items())[:n]))

    def take_while(self, predicate: Callable[[V], object]) -> Collection[K, V]:
        """Keep pairs while **predicate** holds, stopping at the first value that fails it.

        **predicate** is never called past the first failure.

        Args:
            predicate (Callable[[V], object]): Function to evaluate each value.

        Returns:
            Collection[K, V]: The longest satisfying prefix, keys preserved.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 2, 5, 1]).take_while(lambda x: x < 3)
        Collection({0: 1, 1: 2})

        ```
        """
        kept: dict[K, V] = {}
        for key, value in self._inner.items():
            if not predicate(value):
                break
            kept[key] = value
        return _wrap(kept)

    def drop(self, n: int) -> Collection[K, V]:
        """Remove the first **n** pairs, or the last `abs(n)` pairs if **n** is negative.

        Keys of the remaining pairs are preserved.

        Args:
            n (int): Number of pairs to remove from the start, or from the end if negative.

        Returns:
            Collection[K, V]: A new Collection.

        Example:
        ```python
        >>> import funcoll as fc
        >>> col = fc.Collection.from_sequence("abcd")
        >>> col.drop(3)
        Collection({3: 'd'})
        >>> col.drop(-3)
        Collection({0: 'a'})

        ```
        """
        items = mit.islice_extended(self._inner.items())
        return _wrap(dict(items[n:] if n >= 0 else items[:n]))

    def drop_while(self, predicate: Callable[[V], object]) -> Collection[K, V]:
        """Remove pairs while **predicate** holds, then keep everything else.

        Once a value fails **predicate**, every following pair is kept, whether it satisfies **predicate** or not.

        Args:
            predicate (Callable[[V], object]): Function to evaluate each value.

        Returns:
            Collection[K, V]: The remaining pairs, keys preserved.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 2, 5, 1]).drop_while(lambda x: x < 3)
        Collection({2: 5, 3: 1})

        ```
        """
        items = iter(self._inner.items())
        kept: dict[K, V] = {}
        for key, value in items:
            if not predicate(value):
                kept[key] = value
                break
        kept.update(items)
        return _wrap(kept)

    def flatten(self) -> Collection[int, Any]:
        """Flatten nested structures into a single level of leaf values, keyed from 0.

        Mappings (including other Collections) are walked through their values, sequences and sets through their items.

        Strings and bytes are leaves.

        The order is a depth-first, pre-order traversal.

        Returns:
            Collection[int, Any]: The leaf values.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, [2, [3, "ab"]], {"k": 4}]).flatten()
        Collection({0: 1, 1: 2, 2: 3, 3: 'ab', 4: 4})

        ```
        """
        return _reindex(itertools.chain.from_iterable(map(_walk, self._inner.values())))

    def sort(self, comparator: Callable[[V, V], int]) -> Collection[int, V]:
        """Sort the values with a three-way **comparator**, keyed from 0.

        **comparator** returns a negative number if its first argument goes first, 0 if both are equal, and a positive number otherwise.

        The sort is stable.

        Args:
            comparator (Callable[[V, V], int]): Three-way comparison function.

        Returns:
            Collection[int, V]: The sorted values, re-indexed.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([3, 1, 2]).sort(lambda a, b: a - b)
        Collection({0: 1, 1: 2, 2: 3})

        ```
        """
        return _reindex(sorted(self._inner.values(), key=functools.cmp_to_key(comparator)))

    def sort_by(
        self,
        key: Callable[[V], Any] | None = None,
        *,
        reverse: bool = False,
    ) -> Collection[int, V]:
        """Sort the values by natural order, or by **key**, keyed from 0.

        Args:
            key (Callable[[V], Any] | None): Function to extract a comparison key from each value. Defaults to None.
            reverse (bool): Whether to sort in descending order. Defaults to False.

        Returns:
            Collection[int, V]: The sorted values, re-indexed.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence(["bb", "a", "ccc"]).sort_by(len, reverse=True)
        Collection({0: 'ccc', 1: 'bb', 2: 'a'})

        ```
        """
        return _reindex(sorted(self._inner.values(), key=key, reverse=reverse))

    def find_first(self, predicate: Callable[[V], object]) -> V | None:
        """Return the first value satisfying **predicate**, or `None`.

        Use `Collection.find` to tell a found `None` apart from a miss.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 4, 6]).find_first(lambda x: x > 3)
        4
        >>> fc.Collection.from_sequence([1, 4, 6]).find_first(lambda x: x > 9) is None
        True

        ```
        """
        for value in self._inner.values():
            if predicate(value):
                return value
        return None

    def find(self, predicate: Callable[[V], object]) -> Option[V]:
        """Searches for the first value satisfying **predicate**.

        Args:
            predicate (Callable[[V], object]): Function to evaluate each value.

        Returns:
            Option[V]: `Some(value)` if found, `NONE` otherwise.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, None]).find(lambda x: x is None)
        Some(value=None)
        >>> fc.Collection.from_sequence([1, 2]).find(lambda x: x > 2)
        NONE

        ```
        """
        for value in self._inner.values():
            if predicate(value):
                return Some(value)
        return NONE

    def head(self) -> V | None:
        """Return the value stored at key `0`, or `None`.

        This is a lookup of key `0`, not of the first pair: after `filter` or `group_by`, key `0` may be absent.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([7, 8]).head()
        7
        >>> fc.Collection.from_sequence([7, 8]).filter(lambda x: x > 7).head() is None
        True

        ```
        """
        return self._inner.get(0)  # type: ignore[call-overload]

    def tail(self) -> Collection[int, V]:
        """Return all values but the first, keyed from 0.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_sequence([1, 2, 3]).tail()
        Collection({0: 2, 1: 3})

        ```
        """
        return _reindex(itertools.islice(self._inner.values(), 1, None))

    def values(self) -> Collection[int, V]:  # type: ignore[override]
        """Return the same values keyed from 0, discarding the original keys.

        Unlike `dict.values`, this returns a new `Collection`.

        Use `Collection.iter_values` to iterate over the values directly.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_mapping({"a": 1, "b": 2}).values()
        Collection({0: 1, 1: 2})

        ```
        """
        return _reindex(self._inner.values())

    def each(self, action: Callable[[V, K], object]) -> None:
        """Call **action** with each value and its key, for side effects.

        This is a terminal operation that ends the chain.

        Args:
            action (Callable[[V, K], object]): Function called as `action(value, key)`.

        Example:
        ```python
        >>> import funcoll as fc
        >>> fc.Collection.from_mapping({"a": 1, "b": 2}).each(lambda v, k: print(k, v))
        a 1
        b 2

        ```
        """
        for key, value in self._inner.items():
            action(value, key)

    def group_by[G](self, key: Callable[[V], G]) -> Collection[G, Collection[K, V]]:
        """Partition the pairs into buckets computed by **key**.

        Buckets appear in order of first occurrence.

        Each bucket is itself a `Collection`, keeping the original keys of its pairs.

        Args:
            key (Callable[[V], G]): Function computing the bucket of each value.

        Returns:
            Collection[G, Collection[K, V]]: The buckets.

        Example:
        ```python
        >>> import funcoll as fc
        >>> groups = fc.Collection.from_sequence(["a", "bb", "cc"]).group_by(len)
        >>> groups[2]
        Collection({1: 'bb', 2: 'cc'})
        >>> groups == {1: {0: "a"}, 2: {1: "bb", 2: "cc"}}
        True

        ```
        """
        by_value = cz.functoolz.compose(key, itemgetter(1))
        grouped = cz.itertoolz.groupby(by_value, self._inner.items())
        return _wrap(cz.dicttoolz.valmap(lambda pairs: _wrap(dict(pairs)), grouped))
