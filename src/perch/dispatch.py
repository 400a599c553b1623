"""Per-element dispatch — resolve, merge options, run hooks, construct.

``Dispatcher.use_controller`` performs the whole sequence for one element:

1. Read the controller name (missing → warning, skip)
2. Look it up in the registry (unknown → warning, skip)
3. Merge options: binder base options, then ``{"element": el}``, then the
   definition's static options (later keys win, shallow)
4. Construct, through ``before_start`` when the definition has one
5. Run ``after_start`` on the new instance

Errors raised by a constructor or hook are not caught here.
"""

from collections.abc import Mapping
from typing import Any

from perch.config import BinderConfig
from perch.document import ElementLike
from perch.logger import DiagnosticLogger
from perch.registry import AfterStart, BeforeStart, Constructor, ControllerDefinition, Registry


def merge_options(
    base: Mapping[str, Any],
    element: ElementLike,
    static: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Build the options handed to a controller constructor."""
    return {**base, "element": element, **(static or {})}


def run_controller(ctor: Constructor, options: Mapping[str, Any]) -> Any:
    """Construct one controller instance."""
    return ctor(options)


def execute_before_start(
    hook: BeforeStart | None,
    ctor: Constructor,
    options: dict[str, Any],
) -> Any:
    """Run *hook* and then construct the controller.

    The hook receives ``(options, ctor)``. A truthy return value replaces
    *options* verbatim for construction; ``None`` or any falsy value keeps
    the merged options. Construction always happens exactly once.
    """
    if callable(hook):
        replacement = hook(options, ctor)
        return run_controller(ctor, replacement or options)
    return run_controller(ctor, options)


def execute_after_start(hook: AfterStart | None, instance: Any) -> Any:
    """Run *hook* on *instance*, discard its result, return *instance*."""
    if callable(hook):
        hook(instance)
    return instance


class Dispatcher:
    """Resolves and starts the controller for one element at a time."""

    __slots__ = ("_base", "_config", "_logger", "_registry")

    def __init__(
        self,
        registry: Registry,
        config: BinderConfig,
        logger: DiagnosticLogger,
    ) -> None:
        self._registry = registry
        self._config = config
        self._logger = logger
        self._base = config.base_options()

    def resolve(self, element: ElementLike) -> tuple[str | None, ControllerDefinition | None]:
        """Return ``(name, definition)`` for *element* without logging."""
        name = element.get(self._config.name_attribute) or None
        if name is None:
            return None, None
        return name, self._registry.get(name)

    def use_controller(self, element: ElementLike) -> Any:
        """Dispatch *element*. Returns the instance, or ``None`` when skipped."""
        name, definition = self.resolve(element)

        if name is None:
            self._logger.log("Controller not defined", "warn")
            return None

        if definition is None:
            self._logger.log(f'Controller "{name}" not found', "warn")
            return None

        options = merge_options(self._base, element, definition.options)

        if definition.before_start is not None:
            instance = execute_before_start(definition.before_start, definition.ctor, options)
        else:
            instance = run_controller(definition.ctor, options)

        if definition.after_start is not None:
            execute_after_start(definition.after_start, instance)

        return instance
