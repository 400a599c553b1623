"""Controller registry — named controller definitions with get/set.

A definition is a tagged variant: ``Bare`` wraps a constructible callable,
``Composite`` adds static options and lifecycle hooks. Registration input
is normalized once by ``as_definition`` so the dispatcher never sniffs
shapes at dispatch time.

Accepted registration shapes::

    registry.set("greet", Greeter)                              # Bare
    registry.set("greet", Composite(Greeter, options={"a": 1}))
    registry.set("greet", {"ctor": Greeter, "before_start": hook})
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from perch.errors import ConfigurationError, InvalidDefinition

type Constructor = Callable[[dict[str, Any]], Any]
type BeforeStart = Callable[[dict[str, Any], Constructor], Mapping[str, Any] | None]
type AfterStart = Callable[[Any], Any]

# Mapping keys accepted for each Composite field, camelCase spellings included
_CTOR_KEYS = ("ctor", "ctrl")
_BEFORE_KEYS = ("before_start", "beforeStart")
_AFTER_KEYS = ("after_start", "afterStart")


@dataclass(frozen=True, slots=True)
class Bare:
    """A controller registered as its constructor alone."""

    ctor: Constructor

    @property
    def options(self) -> None:
        return None

    @property
    def before_start(self) -> None:
        return None

    @property
    def after_start(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Composite:
    """A controller constructor with static options and lifecycle hooks."""

    ctor: Constructor
    options: Mapping[str, Any] | None = None
    before_start: BeforeStart | None = None
    after_start: AfterStart | None = None


type ControllerDefinition = Bare | Composite


def _first(mapping: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def as_definition(value: Any) -> ControllerDefinition:
    """Normalize a registration value into a ``Bare`` or ``Composite``.

    Raises:
        InvalidDefinition: If *value* is not callable and not a mapping
            carrying a callable ``ctor``.
    """
    if isinstance(value, (Bare, Composite)):
        return value

    if isinstance(value, Mapping):
        ctor = _first(value, _CTOR_KEYS)
        if not callable(ctor):
            msg = f"Controller mapping needs a callable 'ctor', got {ctor!r}"
            raise InvalidDefinition(msg)
        options = value.get("options")
        if options is not None and not isinstance(options, Mapping):
            msg = f"Controller options must be a mapping, got {type(options).__name__}"
            raise InvalidDefinition(msg)
        return Composite(
            ctor=ctor,
            options=options,
            before_start=_first(value, _BEFORE_KEYS),
            after_start=_first(value, _AFTER_KEYS),
        )

    if callable(value):
        return Bare(value)

    msg = f"Cannot register {type(value).__name__} as a controller"
    raise InvalidDefinition(msg)


class Registry:
    """Mutable name → definition table. Last ``set`` for a name wins."""

    __slots__ = ("_definitions", "_raw")

    def __init__(self, controllers: Mapping[str, Any] | None = None) -> None:
        self._definitions: dict[str, ControllerDefinition] = {}
        self._raw: dict[str, Any] = {}
        for name, definition in (controllers or {}).items():
            self.set(name, definition)

    def get(self, name: str) -> ControllerDefinition | None:
        """Look up a definition by exact name. Returns ``None`` if not found."""
        return self._definitions.get(name)

    def raw(self, name: str) -> Any | None:
        """Return the value exactly as it was registered, or ``None``."""
        return self._raw.get(name)

    def set(self, name: str, definition: Any) -> Any:
        """Store *definition* under *name*, overwriting silently.

        Returns the value as passed so ``controller(name, d) is d`` holds.
        """
        if not isinstance(name, str) or not name:
            msg = f"Controller name must be a non-empty string, got {name!r}"
            raise ConfigurationError(msg)
        self._definitions[name] = as_definition(definition)
        self._raw[name] = definition
        return definition

    def names(self) -> list[str]:
        return list(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions
