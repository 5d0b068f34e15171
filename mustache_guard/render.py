"""Rendering Mustache templates against validated data.

Thin layer over chevron that:
- Renders with the data wrapped (render)
- Collects every missing path instead of stopping at the first (find_missing)
- Renders with and without validation to compare output and timing
  (compare_render)
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import chevron

from mustache_guard.base import wrap
from mustache_guard.util import HandlerError

logger = logging.getLogger(__name__)

# Validation may add at most this much wall-clock time to a render. Absolute
# rather than relative, since timings of very small renders vary wildly.
MAX_TIME_DIFFERENCE_MS = 5


def render_wrapped(template: str, data: Any, partials: Optional[Dict] = None) -> str:
    """Render with data that has already been wrapped.

    An exception raised by the handle_error callback aborts the render and
    propagates as itself.
    """
    try:
        return chevron.render(template, data, partials_dict=partials or {})
    except HandlerError as failure:
        raise failure.error from None


def render(template: str, data: Any, partials: Optional[Dict] = None, **options) -> str:
    """Render a Mustache template, validating every data read.

    Args:
        template: Mustache template source
        data: Render data
        partials: Partial templates by name
        **options: Wrapping options (handle_error, check_cycles)

    Returns:
        Rendered text, identical to an unvalidated render

    Raises:
        MissingPropertyError: If the template reads an absent property and
            no handle_error is given

    Examples:
        >>> render('Hello {{subject.name}}!', {'subject': {'name': 'world'}})
        'Hello world!'
    """
    return render_wrapped(template, wrap(data, **options), partials)


def find_missing(
    template: str,
    data: Any,
    partials: Optional[Dict] = None
) -> List[Tuple]:
    """List the paths of all missing properties a render reads.

    Args:
        template: Mustache template source
        data: Render data
        partials: Partial templates by name

    Returns:
        Paths in the order they were read

    Examples:
        >>> find_missing('{{a.b}} {{c}}', {'a': {}})
        [('a', 'b'), ('c',)]
        >>> find_missing('{{a}}', {'a': None})
        []
    """
    missing = []
    render(template, data, partials, handle_error=lambda path: missing.append(tuple(path)))
    if missing:
        logger.debug("Render read %d missing properties", len(missing))
    return missing


class RenderComparison:
    """Outputs and timings of one template rendered with and without validation."""

    def __init__(
        self,
        raw_output: str,
        validated_output: str,
        raw_time_ms: float,
        validated_time_ms: float
    ):
        self.raw_output = raw_output
        self.validated_output = validated_output
        self.raw_time_ms = raw_time_ms
        self.validated_time_ms = validated_time_ms

    @property
    def outputs_match(self) -> bool:
        return self.raw_output == self.validated_output

    @property
    def delta_ms(self) -> float:
        """Extra time spent by the validated render."""
        return self.validated_time_ms - self.raw_time_ms

    @property
    def within_bound(self) -> bool:
        return self.delta_ms <= MAX_TIME_DIFFERENCE_MS

    def __repr__(self) -> str:
        return (
            f"RenderComparison(outputs_match={self.outputs_match}, "
            f"raw_time_ms={self.raw_time_ms:.3f}, "
            f"validated_time_ms={self.validated_time_ms:.3f})"
        )


def compare_render(
    template: str,
    data: Any,
    partials: Optional[Dict] = None,
    repeat: int = 1,
    **options
) -> RenderComparison:
    """Render with and without validation and compare the results.

    The validated render goes first so that a missing property raises
    before anything is timed. With ``repeat`` > 1 the fastest run of each
    kind is kept, which filters out most scheduler noise.

    Args:
        template: Mustache template source
        data: Render data
        partials: Partial templates by name
        repeat: Number of timed renders of each kind
        **options: Wrapping options (handle_error, check_cycles)

    Returns:
        RenderComparison

    Raises:
        MissingPropertyError: If the template reads an absent property and
            no handle_error is given
    """
    validated_output, validated_time_ms = _timed(
        lambda: render(template, data, partials, **options), repeat
    )
    raw_output, raw_time_ms = _timed(
        lambda: chevron.render(template, data, partials_dict=partials or {}), repeat
    )
    comparison = RenderComparison(raw_output, validated_output, raw_time_ms, validated_time_ms)
    if not comparison.within_bound:
        logger.warning(
            "High time delta, validation added %.3fms to rendering "
            "(raw %.3fms, validated %.3fms)",
            comparison.delta_ms, raw_time_ms, validated_time_ms
        )
    return comparison


def _timed(func, repeat: int) -> Tuple[Any, float]:
    best = None
    result = None
    for _ in range(max(repeat, 1)):
        start = time.perf_counter()
        result = func()
        elapsed_ms = (time.perf_counter() - start) * 1000
        if best is None or elapsed_ms < best:
            best = elapsed_ms
    return result, best
