"""Perch exception hierarchy.

Shared across the registry, dispatcher, document layer and CLI so every
module raises and catches the same types.

Missing and unknown controller names are not exceptions: the dispatcher
logs a warning and skips the element.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError, ValueError):
    """Raised when binder configuration is invalid.

    Typically raised from ``BinderConfig.__post_init__`` or when
    ``Binder.run()`` is called without a document.
    """


class SelectorError(ConfigurationError):
    """Raised when a selector uses syntax the document layer does not support."""


class InvalidDefinition(PerchError, TypeError):
    """Raised when a registered value is neither constructible nor a composite."""


class NoDiagnosticSink(PerchError, RuntimeError):  # noqa: N818
    """Raised when a diagnostic is emitted but no logging sink can receive it.

    Carries the message that could not be delivered so callers can still
    surface it.
    """

    def __init__(self, message: str, level: str = "log") -> None:
        self.message = message
        self.level = level
        super().__init__(f"No diagnostic sink for {level!r} message: {message}")
