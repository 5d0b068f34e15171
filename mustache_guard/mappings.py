"""Read-tracking wrappers for render data.

Each wrapper stands in for a raw mapping or sequence and validates every
item read:
- Present keys return their value, with containers wrapped again one level
  deeper
- Keys present with a ``None`` value are valid
- Absent keys raise ``MissingPropertyError`` naming the full path, or are
  reported to a ``handle_error`` callback and read as ``None``

The path travels as an immutable tuple on the wrapper itself. Nothing is
written onto the data, so the same tree can be wrapped (and rendered) any
number of times at once.
"""

import logging
from typing import Any, Callable, Iterator, Optional, Tuple
from collections.abc import Mapping, Sequence

from mustache_guard.util import HandlerError, MissingPropertyError, is_node

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[list], None]


class TrackedValue:
    """Base wrapper: a raw node plus the path used to reach it.

    ``get(key)`` is the validated read; ``obj[key]`` is the same read, so
    template engines use it without knowing about the wrapper.
    """

    __slots__ = ('_data', '_path', '_handle_error')

    # Lookup errors meaning "absent" for this kind of node
    _missing_errors: Tuple = ()

    def __init__(
        self,
        data: Any,
        path: Tuple = (),
        handle_error: Optional[ErrorHandler] = None
    ):
        """Initialize a tracked node.

        Args:
            data: Raw mapping or sequence
            path: Keys used to reach ``data`` from the render root
            handle_error: Called with the failing path instead of raising
        """
        self._data = data
        self._path = tuple(path)
        self._handle_error = handle_error

    def __getitem__(self, key) -> Any:
        return self._read(key, None)

    def get(self, key, default=None) -> Any:
        """Read ``key``, validating that it exists.

        Unlike ``dict.get`` an absent key is still reported (raised, or
        passed to handle_error). ``default`` is only what a handled miss
        reads as, in place of None.
        """
        return self._read(key, default)

    def _segment(self, key):
        return key

    def _read(self, key, default) -> Any:
        try:
            value = self._data[key]
        except self._missing_errors:
            return self._missing(key, default)
        if is_node(value):
            return track(value, self._path + (self._segment(key),), self._handle_error)
        return value

    def _missing(self, key, default=None) -> Any:
        path = self._path + (self._segment(key),)
        if self._handle_error is None:
            raise MissingPropertyError(path)
        logger.debug("Missing data property %r passed to error handler", path)
        try:
            self._handle_error(list(path))
        except Exception as error:
            # Engines treat lookup errors as "not in this context"
            raise HandlerError(error) from error
        return default

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other) -> bool:
        return self._data == unwrap(other)

    def __hash__(self) -> int:
        # Same hashability as the raw node (dicts and lists raise TypeError)
        return hash(self._data)

    def __str__(self) -> str:
        # Engines stringify containers when they are interpolated directly
        return str(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r}, path={self._path!r})"


class TrackedMapping(TrackedValue, Mapping):
    """Tracked wrapper around a mapping.

    Lookups use the mapping's own ``__getitem__``, so ``ChainMap`` parents
    and ``defaultdict`` factories count as present.

    Examples:
        >>> data = TrackedMapping({'user': {'name': 'Alice', 'nick': None}})
        >>> data['user']['name']
        'Alice'
        >>> data['user']['nick'] is None
        True
        >>> data['user']['age']
        Traceback (most recent call last):
        ...
        mustache_guard.util.MissingPropertyError: Missing Mustache data property: user > age
    """

    __slots__ = ()
    _missing_errors = (KeyError,)

    def __iter__(self) -> Iterator:
        return iter(self._data)

    def __contains__(self, key) -> bool:
        return key in self._data


class TrackedSequence(TrackedValue, Sequence):
    """Tracked wrapper around a list or tuple.

    Indices become path segments as strings ("0", "1", ...), so handlers
    can join them. Iterating yields the items tracked at their index, so
    sections over lists keep full paths.

    Examples:
        >>> people = TrackedSequence([{'name': 'Ann'}], path=('people',))
        >>> [person['name'] for person in people]
        ['Ann']
        >>> people[3]
        Traceback (most recent call last):
        ...
        mustache_guard.util.MissingPropertyError: Missing Mustache data property: people > 3
    """

    __slots__ = ()
    _missing_errors = (IndexError,)

    def _segment(self, key):
        if isinstance(key, int):
            return str(key)
        return key

    def __iter__(self) -> Iterator:
        for index, value in enumerate(self._data):
            if is_node(value):
                yield track(value, self._path + (str(index),), self._handle_error)
            else:
                yield value

    def __reversed__(self) -> Iterator:
        return reversed(list(self))

    def __contains__(self, value) -> bool:
        return unwrap(value) in self._data

    def index(self, value, *args) -> int:
        return self._data.index(unwrap(value), *args)

    def count(self, value) -> int:
        return self._data.count(unwrap(value))


def track(
    value: Any,
    path: Tuple = (),
    handle_error: Optional[ErrorHandler] = None
) -> Any:
    """Wrap ``value`` so that reads below it are tracked from ``path``.

    Leaves come back unchanged. A value that is already tracked is re-tracked
    at the given path rather than wrapped twice.

    Args:
        value: Any render value
        path: Keys used to reach ``value``
        handle_error: Optional callback for missing properties

    Returns:
        Tracked wrapper, or ``value`` itself for leaves

    Examples:
        >>> track('text')
        'text'
        >>> track({'a': 1}, ('root',))
        TrackedMapping({'a': 1}, path=('root',))
    """
    if isinstance(value, TrackedValue):
        value = value._data
    if isinstance(value, Mapping):
        return TrackedMapping(value, path, handle_error)
    if is_node(value):
        return TrackedSequence(value, path, handle_error)
    return value


def unwrap(value: Any) -> Any:
    """Return the raw node behind a tracked wrapper (or the value itself)."""
    if isinstance(value, TrackedValue):
        return value._data
    return value


def path_of(value: Any) -> Tuple:
    """Return the path a tracked wrapper was reached by.

    Examples:
        >>> data = track({'a': {'b': {}}})
        >>> path_of(data['a']['b'])
        ('a', 'b')
        >>> path_of({'plain': 'dict'})
        ()
    """
    if isinstance(value, TrackedValue):
        return value._path
    return ()
