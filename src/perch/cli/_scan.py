"""``perch scan`` — print the dispatch plan for an HTML page.

One line per candidate element, in dispatch order::

    1  gallery   priority=10   ok
    2  clock     priority=-    not registered
    3  -         priority=-    missing name

Exits with code 1 when any candidate would be skipped.
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from perch.binder import Binder
from perch.document import Document
from perch.errors import PerchError
from perch.ordering import priority_of

logger = logging.getLogger("perch.cli")


def _format_priority(value: float | None) -> str:
    if value is None:
        return "-"
    return str(int(value)) if value.is_integer() else str(value)


def _load_binder(args: argparse.Namespace) -> Binder:
    if args.controllers is None:
        return Binder()
    from perch.cli._resolve import resolve_binder

    return resolve_binder(args.controllers)


def run_scan(args: argparse.Namespace) -> None:
    """Print how ``args.page`` would be dispatched and optionally run it."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    page = Path(args.page)
    try:
        source = page.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error: cannot read {page}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        base = _load_binder(args)
    except (ModuleNotFoundError, AttributeError, TypeError, PerchError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    overrides: dict[str, object] = {}
    if args.selector:
        overrides["selector"] = args.selector
    if args.strict:
        overrides["strict_priority"] = True

    try:
        config = dataclasses.replace(base.config, **overrides)
        registry = base.registry
        binder = Binder(
            {name: registry.raw(name) for name in registry.names()},
            config,
            document=Document.parse(source),
        )
        plan = binder.plan()
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    skipped = 0
    name_width = max((len(el.get(config.name_attribute) or "-") for el in plan), default=1)
    for position, element in enumerate(plan, start=1):
        name, definition = binder.dispatcher.resolve(element)
        if name is None:
            status = "missing name"
        elif definition is None:
            status = "not registered"
        else:
            status = "ok"
        if status != "ok":
            skipped += 1
        priority = _format_priority(priority_of(element, config.priority_attribute))
        print(f"{position:>3}  {(name or '-'):<{name_width}}  priority={priority:<6} {status}")

    print(f"{len(plan)} candidate(s), {skipped} skipped")

    if args.run:
        logger.info("Starting %d controller(s) from %s", len(plan) - skipped, page)
        binder.run()

    if skipped:
        raise SystemExit(1)
