"""Shared fixtures for perch tests."""

from __future__ import annotations

from typing import Any

import pytest

from perch.document import Document


class Recorder:
    """A controller that remembers every instance it was asked to build."""

    instances: list[Recorder]

    def __init__(self, options: Any) -> None:
        self.options = options
        type(self).instances.append(self)


@pytest.fixture
def recorder() -> type[Recorder]:
    """A fresh Recorder subclass with its own instance list."""

    class _Recorder(Recorder):
        instances: list[Recorder] = []

    return _Recorder


@pytest.fixture
def page() -> Document:
    return Document.parse(
        """
        <html><body>
          <div id="a" data-controller="alpha" data-priority="5"></div>
          <div id="b" data-controller="beta" data-priority="1"></div>
          <div id="c" data-controller="alpha" data-priority="5"></div>
          <div id="d" data-controller="beta"></div>
        </body></html>
        """
    )
