"""Core API for mustache_guard: Options, Validator and wrap.

This module implements the pattern: data = wrap(data, options), after which
every read the template engine makes on ``data`` is validated.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union
from collections.abc import Mapping

from mustache_guard.mappings import TrackedValue, track
from mustache_guard.util import detect_cycle

logger = logging.getLogger(__name__)


class Options:
    """Configuration for wrapping render data.

    Examples:
        >>> Options().handle_error is None
        True
        >>> seen = []
        >>> Options(handle_error=seen.append).handle_error is not None
        True
    """

    def __init__(
        self,
        handle_error: Optional[Callable[[list], None]] = None,
        check_cycles: bool = False
    ):
        """Initialize Options.

        Args:
            handle_error: Called with the path segments of each missing
                property. The read then returns None and rendering goes on.
                Without it, a missing property raises MissingPropertyError.
            check_cycles: If True, reject cyclic data with CycleError before
                wrapping it
        """
        self.handle_error = handle_error
        self.check_cycles = check_cycles

    @classmethod
    def from_any(
        cls,
        options: Union['Options', Mapping, None] = None,
        **kwargs
    ) -> 'Options':
        """Build Options from an Options instance, a mapping or keywords.

        Keyword arguments override whatever ``options`` holds.

        Examples:
            >>> Options.from_any({'check_cycles': True}).check_cycles
            True
            >>> base = Options(check_cycles=True)
            >>> Options.from_any(base, check_cycles=False).check_cycles
            False
        """
        if isinstance(options, Options):
            if not kwargs:
                return options
            settings = options.to_dict()
        else:
            settings = dict(options or {})
        settings.update(kwargs)
        return cls(**settings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'handle_error': self.handle_error,
            'check_cycles': self.check_cycles,
        }

    def __repr__(self) -> str:
        return (
            f"Options(handle_error={self.handle_error!r}, "
            f"check_cycles={self.check_cycles!r})"
        )


class Validator:
    """Reusable wrapper for render data with fixed options.

    Examples:
        >>> validator = Validator()
        >>> data = validator({'subject': {'name': 'world'}})
        >>> data['subject']['name']
        'world'

        >>> missing = []
        >>> lenient = Validator(handle_error=missing.append)
        >>> lenient({'subject': {}})['subject']['name'] is None
        True
        >>> missing
        [['subject', 'name']]
    """

    def __init__(self, options: Union[Options, Mapping, None] = None, **kwargs):
        """Initialize a Validator.

        Args:
            options: Options instance or mapping of option names
            **kwargs: Individual options, overriding ``options``
        """
        self.options = Options.from_any(options, **kwargs)

    def __call__(self, data: Any) -> Any:
        """Wrap ``data`` for validated reads.

        Args:
            data: Render data (any value)

        Returns:
            Tracked wrapper for mappings and sequences; anything else,
            strings included, unchanged

        Raises:
            CycleError: If check_cycles is set and ``data`` is cyclic
        """
        if isinstance(data, TrackedValue):
            return data
        if self.options.check_cycles:
            logger.debug("Checking render data for cycles")
            detect_cycle(data)
        return track(data, (), self.options.handle_error)

    def render(self, template: str, data: Any, partials: Optional[Dict] = None) -> str:
        """Render a Mustache template against validated data.

        Raises:
            MissingPropertyError: If the template reads an absent property
                and no handle_error is configured
        """
        from mustache_guard.render import render_wrapped

        return render_wrapped(template, self(data), partials)


def wrap(data: Any, options: Union[Options, Mapping, None] = None, **kwargs) -> Any:
    """Wrap render data so that reads of missing properties are reported.

    This is the main entry point.

    Args:
        data: Render data
        options: Options instance or mapping of option names
        **kwargs: Individual options (handle_error, check_cycles)

    Returns:
        Drop-in substitute for ``data``

    Examples:
        >>> data = wrap({'subjects': {'name': 'world'}})
        >>> data['subjects']['name']
        'world'
        >>> data['subject']
        Traceback (most recent call last):
        ...
        mustache_guard.util.MissingPropertyError: Missing Mustache data property: subject

        >>> wrap('plain string root')
        'plain string root'
    """
    return Validator(options, **kwargs)(data)


proxy_mustache_data = wrap
