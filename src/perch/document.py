"""Document layer — the element tree the binder queries.

The binder only needs two capabilities, captured by ``DocumentLike`` and
``ElementLike``: select elements by a CSS-style selector, and read an
attribute. ``Document`` is a concrete implementation built on the standard
library HTML parser, good enough for server-rendered pages and tests.

Supported selector syntax (one compound selector per comma group)::

    tag   *   #id   .class   [attr]   [attr=value]   [attr="value"]
    div.card[data-controller]   section, [data-controller]

Combinators (descendant, ``>``, ``+``, ``~``) and pseudo-classes are not
supported and raise ``SelectorError``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Protocol, runtime_checkable

from perch.errors import SelectorError

# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class ElementLike(Protocol):
    """Anything that can report an attribute value by name."""

    def get(self, name: str) -> str | None: ...


@runtime_checkable
class DocumentLike(Protocol):
    """Anything that can return elements matching a selector, in document order."""

    def select(self, selector: str) -> Sequence[ElementLike]: ...


# ---------------------------------------------------------------------------
# Element tree
# ---------------------------------------------------------------------------

# Elements that never have content or an end tag
_VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})

# Start tags that end an open element of the same family: tag → (closes, stops at)
_IMPLIED_END: dict[str, tuple[frozenset[str], frozenset[str]]] = {
    "li": (frozenset({"li"}), frozenset({"ul", "ol", "menu"})),
    "dt": (frozenset({"dt", "dd"}), frozenset({"dl"})),
    "dd": (frozenset({"dt", "dd"}), frozenset({"dl"})),
    "option": (frozenset({"option"}), frozenset({"select", "datalist", "optgroup"})),
    "tr": (frozenset({"tr"}), frozenset({"table", "thead", "tbody", "tfoot"})),
    "td": (frozenset({"td", "th"}), frozenset({"tr", "table"})),
    "th": (frozenset({"td", "th"}), frozenset({"tr", "table"})),
    "p": (
        frozenset({"p"}),
        frozenset({"div", "section", "article", "aside", "main", "header", "footer",
                   "nav", "blockquote", "form", "li", "td", "th", "body"}),
    ),
}


@dataclass(eq=False, slots=True)
class Element:
    """A parsed HTML element. Identity equality, so handles stay distinct."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Element] = field(default_factory=list)
    parent: Element | None = field(default=None, repr=False)
    _text: list[str] = field(default_factory=list, repr=False)

    def get(self, name: str) -> str | None:
        """Return the attribute value, or ``None`` when absent."""
        return self.attrs.get(name)

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    @property
    def classes(self) -> frozenset[str]:
        return frozenset(self.attrs.get("class", "").split())

    @property
    def text(self) -> str:
        """Concatenated text of this element and its descendants."""
        parts = list(self._text)
        for element in self.iter():
            parts.extend(element._text)
        return "".join(parts)

    def iter(self) -> Iterator[Element]:
        """Yield this element's descendants in document order (not itself)."""
        pending = list(reversed(self.children))
        while pending:
            element = pending.pop()
            yield element
            pending.extend(reversed(element.children))


class _TreeBuilder(HTMLParser):
    """Builds an ``Element`` tree, tolerating unclosed and stray tags."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("#document")
        self._stack: list[Element] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._close_implied(tag)
        element = self._open(tag, attrs)
        if tag not in _VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._open(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        # Pop back to the matching open tag; ignore end tags with no opener
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def _close_implied(self, tag: str) -> None:
        rule = _IMPLIED_END.get(tag)
        if rule is None:
            return
        closes, boundary = rule
        for depth in range(len(self._stack) - 1, 0, -1):
            open_tag = self._stack[depth].tag
            if open_tag in closes:
                del self._stack[depth:]
                return
            if open_tag in boundary:
                return

    def handle_data(self, data: str) -> None:
        self._stack[-1]._text.append(data)

    def _open(self, tag: str, attrs: list[tuple[str, str | None]]) -> Element:
        parent = self._stack[-1]
        element = Element(
            tag=tag,
            # Boolean attributes (``<div hidden>``) read back as ""
            attrs={name: "" if value is None else value for name, value in attrs},
            parent=parent,
        )
        parent.children.append(element)
        return element


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

_SIMPLE_RE = re.compile(
    r"""
    (?P<tag>[a-zA-Z][\w-]*|\*)
    | \#(?P<id>[\w-]+)
    | \.(?P<cls>[\w-]+)
    | \[\s*(?P<attr>[\w:-]+)\s*
        (?:=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s]+))\s*)?
      \]
    """,
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class _Compound:
    tag: str | None = None
    ids: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    attrs: tuple[tuple[str, str | None], ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag is not None and element.tag != self.tag:
            return False
        if any(element.id != value for value in self.ids):
            return False
        if self.classes and not element.classes.issuperset(self.classes):
            return False
        for name, expected in self.attrs:
            actual = element.get(name)
            if actual is None or (expected is not None and actual != expected):
                return False
        return True


def _parse_compound(text: str, selector: str) -> _Compound:
    tag: str | None = None
    ids: list[str] = []
    classes: list[str] = []
    attrs: list[tuple[str, str | None]] = []
    pos = 0
    while pos < len(text):
        match = _SIMPLE_RE.match(text, pos)
        if match is None or (match.group("tag") and pos != 0):
            msg = f"Unsupported selector {selector!r} (at {text[pos:]!r})"
            raise SelectorError(msg)
        if match.group("tag"):
            tag = None if match.group("tag") == "*" else match.group("tag").lower()
        elif match.group("id"):
            ids.append(match.group("id"))
        elif match.group("cls"):
            classes.append(match.group("cls"))
        else:
            value = next(
                (v for v in match.group("dq", "sq", "bare") if v is not None),
                None,
            )
            attrs.append((match.group("attr").lower(), value))
        pos = match.end()
    return _Compound(tag=tag, ids=tuple(ids), classes=tuple(classes), attrs=tuple(attrs))


def parse_selector(selector: str) -> tuple[_Compound, ...]:
    """Parse a comma-separated selector group into compound matchers.

    Raises:
        SelectorError: On empty groups, combinators, or unknown syntax.
    """
    groups: list[_Compound] = []
    for part in selector.split(","):
        part = part.strip()
        if not part:
            msg = f"Empty selector group in {selector!r}"
            raise SelectorError(msg)
        groups.append(_parse_compound(part, selector))
    return tuple(groups)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class Document:
    """A parsed HTML document.

    Each ``select`` walks the current tree, so elements appended after
    parsing are visible to later queries.
    """

    __slots__ = ("root",)

    def __init__(self, root: Element) -> None:
        self.root = root

    @classmethod
    def parse(cls, source: str) -> Document:
        builder = _TreeBuilder()
        builder.feed(source)
        builder.close()
        return cls(builder.root)

    @classmethod
    def from_template(
        cls,
        source: str,
        context: Mapping[str, Any] | None = None,
        *,
        env: Any = None,
    ) -> Document:
        """Render a kida template string and parse the result.

        When *env* is omitted an autoescaping ``Environment`` with the
        perch template globals is created.
        """
        from perch.templating import make_environment

        environment = env if env is not None else make_environment()
        html = environment.from_string(source).render(dict(context or {}))
        return cls.parse(html)

    def select(self, selector: str) -> list[Element]:
        """Return elements matching *selector* in document order."""
        compounds = parse_selector(selector)
        return [el for el in self.root.iter() if any(c.matches(el) for c in compounds)]

    def select_one(self, selector: str) -> Element | None:
        compounds = parse_selector(selector)
        for el in self.root.iter():
            if any(c.matches(el) for c in compounds):
                return el
        return None

    def __iter__(self) -> Iterator[Element]:
        return self.root.iter()
