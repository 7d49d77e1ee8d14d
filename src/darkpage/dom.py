"""In-memory document implementing the host protocols.

Elements carry author declarations (standing in for the page's stylesheets)
and an inline style. Computed values resolve in cascade order:

    inline !important > author !important > inline > author > inherited > initial

Only the properties the engine reads are given initial values. Mutation
records are queued per observer and delivered by Document.flush_mutations(),
which plays the role of the browser's microtask checkpoint.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

from .host import MutationCallback

IMPORTANT = "important"

INHERITED_PROPERTIES = frozenset({"color", "fill", "stroke", "-webkit-text-fill-color"})

INITIAL_VALUES: dict[str, str] = {
    "background-color": "rgba(0, 0, 0, 0)",
    "background-image": "none",
    "background-clip": "border-box",
    "color": "rgb(0, 0, 0)",
    "fill": "rgb(0, 0, 0)",
    "stroke": "none",
    "filter": "none",
    "border-left-width": "0px",
    "border-right-width": "0px",
    "border-left-style": "none",
    "border-right-style": "none",
}

# Properties whose initial value is currentcolor
CURRENTCOLOR_PROPERTIES = frozenset({"border-color", "-webkit-text-fill-color"})

# Longhands that fall back to their shorthand when not declared
SHORTHAND_FALLBACK = {
    "border-left-color": "border-color",
    "border-right-color": "border-color",
    "-webkit-background-clip": "background-clip",
}


class Declaration(NamedTuple):
    value: str
    priority: str = ""


def make_declaration(value: str) -> Declaration:
    """Split a trailing !important off a declared value."""
    value = value.strip()
    if value.lower().endswith("!important"):
        return Declaration(value[: -len("!important")].strip(), IMPORTANT)
    return Declaration(value)


def parse_declarations(css_text: str) -> dict[str, Declaration]:
    """Parse 'a: b; c: d !important' into declarations."""
    result: dict[str, Declaration] = {}
    for chunk in css_text.split(";"):
        name, sep, value = chunk.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        decl = make_declaration(value)
        if name and decl.value:
            result[name] = decl
    return result


class InlineStyle:
    """Inline style declaration with CSSOM semantics."""

    def __init__(self, css_text: str = "") -> None:
        self._entries: dict[str, Declaration] = parse_declarations(css_text)

    def get_property_value(self, name: str) -> str:
        entry = self._entries.get(name)
        return entry.value if entry else ""

    def get_property_priority(self, name: str) -> str:
        entry = self._entries.get(name)
        return entry.priority if entry else ""

    def set_property(self, name: str, value: str, priority: str = "") -> None:
        # Setting an empty value removes the declaration, as in the CSSOM
        if not value:
            self.remove_property(name)
            return
        self._entries[name] = Declaration(value, IMPORTANT if priority == IMPORTANT else "")

    def remove_property(self, name: str) -> None:
        self._entries.pop(name, None)

    def declaration(self, name: str) -> Declaration | None:
        return self._entries.get(name)

    def items(self) -> list[tuple[str, Declaration]]:
        return list(self._entries.items())

    @property
    def css_text(self) -> str:
        parts = []
        for name, decl in self._entries.items():
            suffix = " !important" if decl.priority else ""
            parts.append(f"{name}: {decl.value}{suffix};")
        return " ".join(parts)

    def __len__(self) -> int:
        return len(self._entries)


class ClassTokens:
    """Ordered set of class names."""

    def __init__(self, tokens: Iterable[str] = ()) -> None:
        self._tokens: list[str] = []
        for token in tokens:
            self.add(token)

    def add(self, token: str) -> None:
        if token and token not in self._tokens:
            self._tokens.append(token)

    def remove(self, token: str) -> None:
        if token in self._tokens:
            self._tokens.remove(token)

    def contains(self, token: str) -> bool:
        return token in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __str__(self) -> str:
        return " ".join(self._tokens)


class ComputedView:
    """Live computed style of one element."""

    def __init__(self, element: Element) -> None:
        self._element = element

    def get_property_value(self, name: str) -> str:
        return self._element.resolve(name.lower())


class Element:
    """A document element."""

    def __init__(
        self,
        tag_name: str,
        *,
        classes: Iterable[str] = (),
        attributes: dict[str, str] | None = None,
        author_style: dict[str, str] | str | None = None,
        size: tuple[float, float] = (0.0, 0.0),
        children: Iterable[Element] = (),
    ) -> None:
        self._tag_name = tag_name.lower()
        attrs = dict(attributes or {})
        self.style = InlineStyle(attrs.pop("style", ""))
        self._class_list = ClassTokens([*attrs.pop("class", "").split(), *classes])
        self._attributes = attrs
        if isinstance(author_style, str):
            self._author = parse_declarations(author_style)
        else:
            self._author = {
                name.strip().lower(): make_declaration(str(value))
                for name, value in (author_style or {}).items()
            }
        self._size = size
        self.parent: Element | None = None
        self.children: list[Element] = []
        self._document: Document | None = None
        for child in children:
            self.append_child(child)

    def __repr__(self) -> str:
        ident = self._attributes.get("id")
        suffix = f"#{ident}" if ident else ""
        return f"<{self._tag_name}{suffix}>"

    # -- host protocol -------------------------------------------------

    @property
    def tag_name(self) -> str:
        return self._tag_name

    @property
    def class_name(self) -> str:
        return str(self._class_list)

    @property
    def class_list(self) -> ClassTokens:
        return self._class_list

    @property
    def is_connected(self) -> bool:
        if self._document is None:
            return False
        node: Element | None = self
        while node.parent is not None:
            node = node.parent
        return node is self._document.document_element

    @property
    def parent_element(self) -> Element | None:
        return self.parent

    def get_attribute(self, name: str) -> str | None:
        name = name.lower()
        if name == "class":
            return self.class_name or None
        if name == "style":
            return self.style.css_text or None
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        name = name.lower()
        if name == "class":
            self._class_list = ClassTokens(value.split())
        elif name == "style":
            self.style = InlineStyle(value)
        else:
            self._attributes[name] = value

    def computed_style(self) -> ComputedView:
        return ComputedView(self)

    def bounding_size(self) -> tuple[float, float]:
        return self._size

    def iter_descendants(self) -> Iterator[Element]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    # -- tree mutation -------------------------------------------------

    def append_child(self, child: Element) -> Element:
        """Attach child as the last child, moving it if already attached."""
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        child._adopt(self._document)
        if self._document is not None and self.is_connected:
            self._document.queue_mutation(self, added=[child])
        return child

    def remove_child(self, child: Element) -> Element:
        connected = self._document is not None and self.is_connected
        self.children.remove(child)
        child.parent = None
        if connected and self._document is not None:
            self._document.queue_mutation(self, removed=[child])
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def contains(self, other: Element) -> bool:
        node: Element | None = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    # -- style resolution ----------------------------------------------

    def set_author_style(self, name: str, value: str) -> None:
        """Change an author declaration, as a page script toggling a class would."""
        self._author[name.lower()] = make_declaration(value)

    def declared(self, name: str) -> str | None:
        inline = self.style.declaration(name)
        author = self._author.get(name)
        if inline is not None and inline.priority:
            return inline.value
        if author is not None and author.priority:
            return author.value
        if inline is not None:
            return inline.value
        if author is not None:
            return author.value
        return None

    def resolve(self, name: str) -> str:
        value = self.declared(name)
        if value is None and name in SHORTHAND_FALLBACK:
            return self.resolve(SHORTHAND_FALLBACK[name])
        if value is not None:
            lowered = value.lower()
            if lowered == "currentcolor":
                return self.resolve("color")
            if lowered != "inherit":
                return value
            return self.parent.resolve(name) if self.parent else self._initial(name)
        if name in INHERITED_PROPERTIES and self.parent is not None:
            return self.parent.resolve(name)
        return self._initial(name)

    def _initial(self, name: str) -> str:
        if name in CURRENTCOLOR_PROPERTIES:
            return self.resolve("color")
        return INITIAL_VALUES.get(name, "")

    def _adopt(self, document: Document | None) -> None:
        self._document = document
        for child in self.children:
            child._adopt(document)


@dataclass
class Mutation:
    """A childList mutation record."""

    target: Element
    added_nodes: list[Element] = field(default_factory=list)
    removed_nodes: list[Element] = field(default_factory=list)


class Observer:
    """Subtree observer registered on a Document."""

    def __init__(self, document: Document, target: Element, callback: MutationCallback) -> None:
        self._document = document
        self.target = target
        self.callback = callback
        self.pending: list[Mutation] = []

    def disconnect(self) -> None:
        """Stop observing and discard undelivered records."""
        self.pending.clear()
        self._document.unregister(self)

    def take_records(self) -> list[Mutation]:
        records = self.pending
        self.pending = []
        return records


class Document:
    """An in-memory rendered document with <html> and <body>."""

    def __init__(self, hostname: str = "localhost") -> None:
        self._hostname = hostname
        self._observers: list[Observer] = []
        self.stylesheets: dict[str, str] = {}
        self._root = Element("html")
        self._root._adopt(self)
        self._body = self._root.append_child(Element("body"))

    @property
    def hostname(self) -> str:
        return self._hostname

    @property
    def document_element(self) -> Element:
        return self._root

    @property
    def body(self) -> Element:
        return self._body

    def create_element(self, tag_name: str, **kwargs: object) -> Element:
        element = Element(tag_name, **kwargs)  # type: ignore[arg-type]
        element._adopt(self)
        return element

    def iter_elements(self) -> Iterator[Element]:
        yield self._root
        yield from self._root.iter_descendants()

    def get_element_by_id(self, element_id: str) -> Element | None:
        for element in self.iter_elements():
            if element.get_attribute("id") == element_id:
                return element
        return None

    # -- observation ---------------------------------------------------

    def observe(self, target: Element, callback: MutationCallback) -> Observer:
        observer = Observer(self, target, callback)
        self._observers.append(observer)
        return observer

    def unregister(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def queue_mutation(
        self,
        target: Element,
        *,
        added: Sequence[Element] = (),
        removed: Sequence[Element] = (),
    ) -> None:
        for observer in self._observers:
            if observer.target.contains(target):
                observer.pending.append(Mutation(target, list(added), list(removed)))

    def flush_mutations(self) -> int:
        """Deliver queued records to observers, batch per observer.

        Repeats until no observer has pending records. Returns the number of
        batches delivered.
        """
        delivered = 0
        while True:
            ready = [obs for obs in self._observers if obs.pending]
            if not ready:
                return delivered
            for observer in ready:
                records = observer.take_records()
                if records:
                    observer.callback(records)
                    delivered += 1

    # -- stylesheets ---------------------------------------------------

    def inject_stylesheet(self, key: str, css: str) -> None:
        self.stylesheets[key] = css

    def remove_stylesheet(self, key: str) -> None:
        self.stylesheets.pop(key, None)
