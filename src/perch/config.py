"""Binder configuration.

BinderConfig is a frozen dataclass — immutable after creation, built once
when the binder is created, no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class BinderConfig:
    """Binder configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = BinderConfig(selector="[data-widget]", name_attribute="data-widget")
    """

    # Candidate selection
    selector: str = "[data-controller]"
    name_attribute: str = "data-controller"
    priority_attribute: str = "data-priority"

    # Base options merged into every controller's options (lowest precedence)
    options: Mapping[str, Any] = field(default_factory=dict)

    # Ordering — True sorts absent priorities last instead of "don't care"
    strict_priority: bool = False

    # Log and continue when a controller or hook raises
    isolate_failures: bool = False

    # Diagnostics
    logger_name: str = "perch"

    def __post_init__(self) -> None:
        for name in ("selector", "name_attribute", "priority_attribute"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                msg = f"BinderConfig.{name} must be a non-empty string, got {value!r}"
                raise ConfigurationError(msg)
        # Freeze a private copy so later caller mutations cannot leak in
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def base_options(self) -> dict[str, Any]:
        """Return the configuration layer that starts every merged options dict."""
        return {"selector": self.selector, **self.options}
