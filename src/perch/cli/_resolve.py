"""Controller import resolution — resolves ``"module:attribute"`` strings.

Used by ``perch scan`` to locate the controllers a page is checked
against. The target may be a controllers mapping, a ``Binder``, or a
zero-argument factory returning either.
"""

import importlib
from collections.abc import Mapping

from perch.binder import Binder


def resolve_binder(import_string: str) -> Binder:
    """Resolve an import string to a ``Binder``.

    Accepts ``"module:attribute"`` format. When the attribute portion is
    omitted, defaults to ``"controllers"``. A resolved mapping is wrapped
    in a new ``Binder`` with default configuration.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a mapping or ``Binder``.

    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "controllers"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # Support factory functions - call them if they're not already usable
    if callable(obj) and not isinstance(obj, (Binder, Mapping)):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, Binder):
        return obj
    if isinstance(obj, Mapping):
        return Binder(obj)

    msg = f"{import_string!r} resolved to {type(obj).__name__}, not a controllers mapping or perch.Binder"
    raise TypeError(msg)
