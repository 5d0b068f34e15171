"""Utility functions for mustache_guard: errors, path formatting, cycle detection.

This module provides the error types raised while validating render data,
plus helpers for classifying data nodes and rendering access paths.
"""

from typing import Any, Iterable, List, Set, Tuple
from collections.abc import Mapping, Sequence

MISSING_PROPERTY_MESSAGE = 'Missing Mustache data property'
PATH_SEPARATOR = ' > '

# Sequences that are leaf values rather than nodes
STRING_TYPES = (str, bytes, bytearray)


def format_path(path: Iterable, separator: str = PATH_SEPARATOR) -> str:
    """Render path segments as a single string.

    Args:
        path: Sequence of keys and indices
        separator: String placed between segments

    Returns:
        Joined path

    Examples:
        >>> format_path(['subject', 'name'])
        'subject > name'
        >>> format_path(('people', 0, 'nickname'))
        'people > 0 > nickname'
        >>> format_path([])
        ''
    """
    return separator.join(str(segment) for segment in path)


class MissingPropertyError(Exception):
    """Raised when rendering reads a property that is absent from the data.

    The full access path is kept on ``path``; the message is the one
    consumers assert on.

    Examples:
        >>> err = MissingPropertyError(['a', 'b', 'c'])
        >>> str(err)
        'Missing Mustache data property: a > b > c'
        >>> err.path
        ('a', 'b', 'c')
    """

    def __init__(self, path: Iterable):
        self.path = tuple(path)
        super().__init__(f"{MISSING_PROPERTY_MESSAGE}: {format_path(self.path)}")


class HandlerError(Exception):
    """Carries an exception raised by a handle_error callback.

    Template engines read a ``KeyError``, ``ValueError`` and the like as
    "not found here" and keep rendering, so the callback's exception travels
    inside this one instead. The render helpers re-raise ``error`` itself.
    """

    def __init__(self, error: BaseException):
        self.error = error
        super().__init__(f"handle_error raised {type(error).__name__}: {error}")


class CycleError(Exception):
    """Raised when a circular reference is detected in render data."""
    pass


def is_node(value: Any) -> bool:
    """Tell whether a value is a container whose reads can be tracked.

    Examples:
        >>> is_node({'a': 1}), is_node([1, 2]), is_node((1,))
        (True, True, True)
        >>> is_node('text'), is_node(42), is_node(None)
        (False, False, False)
    """
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, STRING_TYPES)


def detect_cycle(obj: Any, visited: Set[int] = None, path: List = None) -> None:
    """Detect cycles in nested render data.

    A node reachable through two different keys (a diamond) is fine; only a
    node that contains itself somewhere below is rejected.

    Args:
        obj: The data to check
        visited: IDs of the nodes on the current branch
        path: Keys leading to ``obj`` (for error reporting)

    Raises:
        CycleError: If a cycle is detected

    Examples:
        >>> shared = {'name': 'x'}
        >>> detect_cycle({'a': shared, 'b': [shared]})  # No cycle

        >>> circular = {'a': 1}
        >>> circular['self'] = circular
        >>> try:
        ...     detect_cycle(circular)
        ... except CycleError as e:
        ...     print(e)
        Circular reference detected at path: self
    """
    if visited is None:
        visited = set()
    if path is None:
        path = []

    if not is_node(obj):
        return

    obj_id = id(obj)
    if obj_id in visited:
        path_str = format_path(path) if path else 'root'
        raise CycleError(f"Circular reference detected at path: {path_str}")

    visited.add(obj_id)
    try:
        for key, value in _children(obj):
            detect_cycle(value, visited, path + [key])
    finally:
        # Off the branch again, so diamonds are allowed
        visited.discard(obj_id)


def _children(node) -> Iterable[Tuple[Any, Any]]:
    if isinstance(node, Mapping):
        return node.items()
    return enumerate(node)
