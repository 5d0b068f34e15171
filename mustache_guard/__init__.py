"""Validate Mustache render data and report the exact path of missing properties.

This package wraps the data handed to a Mustache renderer so that every
read is checked, supporting:
- Full dotted paths in errors (``Missing Mustache data property: a > b``)
- Present-but-None values treated as valid, absent keys as invalid
- A handle_error callback to collect problems instead of raising
- Render output identical to rendering the raw data
- Opt-in cycle detection

Basic usage:
    >>> from mustache_guard import render
    >>> render('Hello {{subject.name}}!', {'subject': {'name': 'world'}})
    'Hello world!'

Wrapping data for any engine:
    >>> from mustache_guard import wrap, MissingPropertyError
    >>> data = wrap({'subject': {}})
    >>> try:
    ...     data['subject']['name']
    ... except MissingPropertyError as e:
    ...     print(e)
    Missing Mustache data property: subject > name
"""

from mustache_guard.base import (
    wrap,
    proxy_mustache_data,
    Options,
    Validator,
)

from mustache_guard.mappings import (
    TrackedValue,
    TrackedMapping,
    TrackedSequence,
    track,
    unwrap,
    path_of,
)

from mustache_guard.render import (
    render,
    find_missing,
    compare_render,
    RenderComparison,
    MAX_TIME_DIFFERENCE_MS,
)

from mustache_guard.util import (
    format_path,
    detect_cycle,
    is_node,
    MissingPropertyError,
    HandlerError,
    CycleError,
)

__version__ = "0.1.0"  # Keep in sync with package version

__all__ = [
    # Core functions
    "wrap",
    "proxy_mustache_data",
    "Options",
    "Validator",
    # Wrappers
    "TrackedValue",
    "TrackedMapping",
    "TrackedSequence",
    "track",
    "unwrap",
    "path_of",
    # Rendering
    "render",
    "find_missing",
    "compare_render",
    "RenderComparison",
    "MAX_TIME_DIFFERENCE_MS",
    # Utilities
    "format_path",
    "detect_cycle",
    "is_node",
    # Exceptions
    "MissingPropertyError",
    "HandlerError",
    "CycleError",
]
