"""Tests for perch.binder — run(), controller(), and failure handling."""

import logging
from typing import Any

import pytest

from perch.binder import Binder
from perch.config import BinderConfig
from perch.document import Document, Element
from perch.errors import ConfigurationError, NoDiagnosticSink
from perch.logger import DiagnosticLogger


class TestController:
    def test_set_then_get(self) -> None:
        binder = Binder()
        definition = {"ctor": dict}
        assert binder.controller("x", definition) is definition
        assert binder.controller("x") is definition

    def test_get_unregistered_returns_none(self) -> None:
        assert Binder().controller("y") is None

    def test_initial_controllers(self, recorder) -> None:
        binder = Binder({"greet": recorder})
        assert binder.controller("greet") is recorder

    def test_overwrite(self, recorder) -> None:
        binder = Binder({"greet": dict})
        binder.controller("greet", recorder)
        assert binder.controller("greet") is recorder


class TestRun:
    def test_end_to_end_greeter(self, recorder) -> None:
        doc = Document.parse('<main><p data-controller="greet">Hi</p></main>')
        Binder({"greet": {"ctrl": recorder}}, document=doc).run()

        assert len(recorder.instances) == 1
        options = recorder.instances[0].options
        assert options["element"] is doc.select_one("p")

    def test_returns_none(self, recorder) -> None:
        doc = Document.parse('<p data-controller="greet"></p>')
        assert Binder({"greet": recorder}, document=doc).run() is None

    def test_dispatch_in_priority_order(self, page: Document) -> None:
        order: list[str] = []

        def ctor(options):
            order.append(options["element"].id)

        Binder({"alpha": ctor, "beta": ctor}, document=page).run()
        assert sorted(order) == ["a", "b", "c", "d"]
        assert order.index("b") > order.index("a")
        assert order.index("b") > order.index("c")

    def test_strict_priority(self, page: Document) -> None:
        order: list[str] = []

        def ctor(options):
            order.append(options["element"].id)

        config = BinderConfig(strict_priority=True)
        Binder({"alpha": ctor, "beta": ctor}, config, document=page).run()
        assert order == ["a", "c", "b", "d"]

    def test_skipped_elements_do_not_stop_run(
        self, recorder, caplog: pytest.LogCaptureFixture
    ) -> None:
        doc = Document.parse(
            '<div data-controller=""></div>'
            '<div data-controller="ghost"></div>'
            '<div data-controller="greet"></div>'
        )
        Binder({"greet": recorder}, document=doc).run()

        assert len(recorder.instances) == 1
        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings == ["Controller not defined", 'Controller "ghost" not found']

    def test_base_options_reach_controllers(self, recorder) -> None:
        doc = Document.parse('<p data-controller="greet"></p>')
        config = BinderConfig(options={"api": "/v1"})
        Binder({"greet": recorder}, config, document=doc).run()
        assert recorder.instances[0].options["api"] == "/v1"
        assert recorder.instances[0].options["selector"] == "[data-controller]"

    def test_custom_selector(self, recorder) -> None:
        doc = Document.parse(
            '<p class="live" data-controller="greet"></p>'
            '<p data-controller="greet"></p>'
        )
        config = BinderConfig(selector="p.live")
        Binder({"greet": recorder}, config, document=doc).run()
        assert len(recorder.instances) == 1

    def test_no_elements(self, recorder) -> None:
        Binder({"greet": recorder}, document=Document.parse("<p></p>")).run()
        assert recorder.instances == []

    def test_without_document(self) -> None:
        with pytest.raises(ConfigurationError, match="no document"):
            Binder().run()

    def test_document_factory_called_each_run(self, recorder) -> None:
        calls: list[int] = []

        def current() -> Document:
            calls.append(1)
            return Document.parse('<p data-controller="greet"></p>')

        binder = Binder({"greet": recorder}, document=current)
        binder.run()
        binder.run()
        assert len(calls) == 2
        assert len(recorder.instances) == 2

    def test_elements_added_later_seen_on_next_run(self, recorder) -> None:
        doc = Document.parse("<main></main>")
        binder = Binder({"greet": recorder}, document=doc)
        binder.run()
        main = doc.select_one("main")
        main.children.append(Element("p", {"data-controller": "greet"}, parent=main))
        binder.run()
        assert len(recorder.instances) == 1


class TestRegistrationDuringRun:
    def test_registration_mid_run_resolves_for_later_elements(self, recorder) -> None:
        doc = Document.parse(
            '<p id="first" data-controller="setup" data-priority="10"></p>'
            '<p id="second" data-controller="late" data-priority="1"></p>'
        )
        binder = Binder(document=doc)

        def setup(options):
            binder.controller("late", recorder)

        binder.controller("setup", setup)
        binder.run()
        # Candidates are fixed up front; names are resolved at dispatch time
        assert len(recorder.instances) == 1
        binder.run()
        assert len(recorder.instances) == 2

    def test_overwrite_is_not_retroactive(self, recorder) -> None:
        doc = Document.parse('<p data-controller="greet"></p>')
        created: list[Any] = []

        def first(options):
            created.append("first")
            return "first"

        binder = Binder({"greet": first}, document=doc)
        binder.run()
        binder.controller("greet", recorder)
        binder.run()
        assert created == ["first"]
        assert len(recorder.instances) == 1


class TestFailures:
    def _doc(self) -> Document:
        return Document.parse(
            '<p id="one" data-controller="ok" data-priority="3"></p>'
            '<p id="two" data-controller="bad" data-priority="2"></p>'
            '<p id="three" data-controller="ok" data-priority="1"></p>'
        )

    @staticmethod
    def _bad(options):
        raise RuntimeError("cannot start")

    def test_failure_aborts_run(self, recorder) -> None:
        binder = Binder({"ok": recorder, "bad": self._bad}, document=self._doc())
        with pytest.raises(RuntimeError, match="cannot start"):
            binder.run()
        assert [r.options["element"].id for r in recorder.instances] == ["one"]

    def test_hook_failure_aborts_run(self, recorder) -> None:
        def after(instance):
            raise ValueError("after failed")

        binder = Binder(
            {"ok": recorder, "bad": {"ctor": recorder, "after_start": after}},
            document=self._doc(),
        )
        with pytest.raises(ValueError, match="after failed"):
            binder.run()

    def test_isolation_continues(self, recorder, caplog: pytest.LogCaptureFixture) -> None:
        config = BinderConfig(isolate_failures=True)
        binder = Binder({"ok": recorder, "bad": self._bad}, config, document=self._doc())
        binder.run()

        assert [r.options["element"].id for r in recorder.instances] == ["one", "three"]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors[0].getMessage() == 'Controller "bad" failed to start'
        assert errors[0].exc_info is not None

    def test_missing_sink_is_fatal_even_when_isolated(self) -> None:
        doc = Document.parse('<p data-controller="ghost"></p>')
        config = BinderConfig(isolate_failures=True)
        binder = Binder(config=config, document=doc, logger=DiagnosticLogger(None))
        with pytest.raises(NoDiagnosticSink):
            binder.run()


class TestCandidatesCaptured:
    def test_elements_added_mid_run_wait_for_next_run(self, recorder) -> None:
        doc = Document.parse('<main data-controller="spawn"></main>')

        def spawn(options):
            main = options["element"]
            main.children.append(Element("p", {"data-controller": "greet"}, parent=main))

        binder = Binder({"spawn": spawn, "greet": recorder}, document=doc)
        binder.run()
        assert recorder.instances == []
        binder.run()
        assert len(recorder.instances) == 1
