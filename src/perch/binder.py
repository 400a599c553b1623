"""Binder — the public entry point.

Usage::

    from perch import Binder, Document

    doc = Document.parse('<div data-controller="greet"></div>')
    binder = Binder({"greet": Greeter}, document=doc)
    binder.run()

``run()`` selects candidates from the current document, sorts them by
priority and dispatches each one synchronously. The candidate list is
captured before the first dispatch, so elements added to the document
mid-run wait for the next ``run()``. Names are resolved as each element is
dispatched, so a controller registered mid-run already applies to later
candidates of the same pass.
"""

from collections.abc import Callable, Mapping
from typing import Any

from perch.config import BinderConfig
from perch.dispatch import Dispatcher
from perch.document import DocumentLike, ElementLike
from perch.errors import ConfigurationError, NoDiagnosticSink
from perch.logger import DiagnosticLogger
from perch.ordering import sort_candidates
from perch.registry import Registry

_MISSING: Any = object()


class Binder:
    """Binds registered controllers to the elements that name them."""

    __slots__ = ("_config", "_dispatcher", "_document", "_logger", "_registry")

    def __init__(
        self,
        controllers: Mapping[str, Any] | None = None,
        config: BinderConfig | None = None,
        *,
        document: DocumentLike | Callable[[], DocumentLike] | None = None,
        logger: DiagnosticLogger | None = None,
    ) -> None:
        self._config = config or BinderConfig()
        self._registry = Registry(controllers)
        self._logger = logger or DiagnosticLogger.named(self._config.logger_name)
        self._document = document
        self._dispatcher = Dispatcher(self._registry, self._config, self._logger)

    @property
    def config(self) -> BinderConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def _current_document(self) -> DocumentLike:
        source = self._document
        if source is None:
            msg = "Binder has no document; pass document= when creating it"
            raise ConfigurationError(msg)
        if isinstance(source, DocumentLike):
            return source
        return source()

    def plan(self) -> list[ElementLike]:
        """Select and sort candidates without dispatching them."""
        document = self._current_document()
        return sort_candidates(
            document.select(self._config.selector),
            self._config.priority_attribute,
            strict=self._config.strict_priority,
        )

    def run(self) -> None:
        """Run one full select, sort and dispatch pass."""
        for element in self.plan():
            if not self._config.isolate_failures:
                self._dispatcher.use_controller(element)
                continue
            try:
                self._dispatcher.use_controller(element)
            except NoDiagnosticSink:
                raise
            except Exception:
                name = element.get(self._config.name_attribute)
                self._logger.exception(f'Controller "{name}" failed to start')

    def controller(self, name: str, definition: Any = _MISSING) -> Any:
        """Get the definition registered under *name*, or register one.

        ``controller(name)`` returns the value as registered, or ``None``.
        ``controller(name, definition)`` stores it and returns it.
        """
        if definition is _MISSING:
            return self._registry.raw(name)
        return self._registry.set(name, definition)
