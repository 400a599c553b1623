"""Perch — declarative controller binding for HTML documents.

Finds elements that name a controller, resolves the name in a registry,
merges options and starts the controller, highest priority first.

Basic usage::

    from perch import Binder, Document

    class Greeter:
        def __init__(self, options):
            self.element = options["element"]

    doc = Document.parse('<p data-controller="greet">Hi</p>')
    binder = Binder({"greet": Greeter}, document=doc)
    binder.run()

Lifecycle hooks::

    binder.controller("greet", {
        "ctor": Greeter,
        "options": {"loud": True},
        "before_start": lambda options, ctor: {**options, "seen": True},
        "after_start": lambda instance: instance.element,
    })
"""

__version__ = "0.1.0-dev"

# Public name → defining module, resolved on first attribute access
_LAZY_IMPORTS: dict[str, str] = {
    "Bare": "perch.registry",
    "Binder": "perch.binder",
    "BinderConfig": "perch.config",
    "Composite": "perch.registry",
    "ConfigurationError": "perch.errors",
    "DiagnosticLogger": "perch.logger",
    "Document": "perch.document",
    "DocumentLike": "perch.document",
    "Element": "perch.document",
    "ElementLike": "perch.document",
    "InvalidDefinition": "perch.errors",
    "NoDiagnosticSink": "perch.errors",
    "PerchError": "perch.errors",
    "Registry": "perch.registry",
    "SelectorError": "perch.errors",
}

__all__ = sorted(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast and free of kida until templating is used.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
