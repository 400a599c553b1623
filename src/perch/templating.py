"""Kida template helpers for emitting controller markers.

Pages rendered with kida can tag elements without hand-writing the
attributes::

    <section{{ controller_attrs("gallery", priority=10) }}>...</section>
    → <section data-controller="gallery" data-priority="10">...</section>

``install(env)`` registers the globals on an existing ``Environment``;
``make_environment()`` builds an autoescaping one with them already set.
"""

import html
from typing import Any

from kida import Environment
from kida.template import Markup


def _format_priority(priority: float | int) -> str:
    if isinstance(priority, float) and priority.is_integer():
        return str(int(priority))
    return str(priority)


def controller_attrs(
    name: str,
    priority: float | int | None = None,
    *,
    name_attribute: str = "data-controller",
    priority_attribute: str = "data-priority",
) -> Markup:
    """Build an escaped controller-marker attribute string."""
    attrs = [f' {name_attribute}="{html.escape(name, quote=True)}"']
    if priority is not None:
        attrs.append(f' {priority_attribute}="{html.escape(_format_priority(priority), quote=True)}"')
    return Markup("".join(attrs))


TEMPLATE_GLOBALS: dict[str, Any] = {
    "controller_attrs": controller_attrs,
}


def install(env: Environment) -> Environment:
    """Register perch template globals on *env* and return it."""
    for name, value in TEMPLATE_GLOBALS.items():
        env.add_global(name, value)
    return env


def make_environment(**kwargs: Any) -> Environment:
    """Create an autoescaping kida ``Environment`` with perch globals."""
    kwargs.setdefault("autoescape", True)
    return install(Environment(**kwargs))
