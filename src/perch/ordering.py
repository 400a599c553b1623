"""Priority ordering of candidate elements.

Higher ``data-priority`` values are dispatched first. The default order is
deliberately weak: absence means "don't care", not "lowest". Elements
without a priority keep their document positions; the elements that declare
one are stable-sorted among the slots they occupy. Any two elements with
distinct declared priorities therefore come out highest first, whatever
sits between them.

``strict=True`` opts into a total order instead: declared priorities
first (highest first), then elements without one, document order kept
among ties.
"""

import logging
import math
from collections.abc import Iterable
from functools import cmp_to_key

from perch.document import ElementLike

logger = logging.getLogger("perch.ordering")


def priority_of(element: ElementLike, attribute: str = "data-priority") -> float | None:
    """Read the numeric priority hint, or ``None`` when it is absent.

    Empty and non-numeric values count as absent.
    """
    raw = element.get(attribute)
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric %s=%r", attribute, raw)
        return None
    if math.isnan(value):
        return None
    return value


def compare_priority(a: float | None, b: float | None) -> int:
    """Weak comparator: negative sorts *a* first, zero means no defined order."""
    if a is None or b is None or a == b:
        return 0
    return -1 if a > b else 1


def sort_candidates[E: ElementLike](
    elements: Iterable[E],
    attribute: str = "data-priority",
    *,
    strict: bool = False,
) -> list[E]:
    """Return *elements* ordered for dispatch.

    Priorities are read once per element before sorting.
    """
    keyed = [(priority_of(el, attribute), el) for el in elements]

    if strict:
        keyed.sort(key=lambda pair: (pair[0] is None, -(pair[0] or 0.0)))
        return [el for _, el in keyed]

    # Unprioritized elements stay put; prioritized ones are sorted into their slots
    slots = [index for index, (priority, _) in enumerate(keyed) if priority is not None]
    ranked = sorted(
        (keyed[index] for index in slots),
        key=cmp_to_key(lambda x, y: compare_priority(x[0], y[0])),
    )
    for index, pair in zip(slots, ranked, strict=True):
        keyed[index] = pair
    return [el for _, el in keyed]
