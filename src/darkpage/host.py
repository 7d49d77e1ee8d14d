"""Host document interface.

The engine never touches a concrete DOM. Anything implementing these
protocols can be darkened: the in-memory document in darkpage.dom, or an
adapter over a live browser page.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Protocol


class StyleDeclaration(Protocol):
    """An element's inline style (CSSOM CSSStyleDeclaration subset)."""

    def get_property_value(self, name: str) -> str:
        """Inline value of a property, or '' when not set."""
        ...

    def get_property_priority(self, name: str) -> str:
        """'important' when the inline value carries !important, else ''."""
        ...

    def set_property(self, name: str, value: str, priority: str = "") -> None:
        """Set an inline value with the given priority."""
        ...

    def remove_property(self, name: str) -> None:
        """Remove an inline value."""
        ...


class ComputedStyle(Protocol):
    """Read-only resolved style of an element."""

    def get_property_value(self, name: str) -> str:
        """Resolved value after cascade and inheritance, '' when unknown."""
        ...


class ClassList(Protocol):
    """An element's class tokens."""

    def add(self, token: str) -> None: ...

    def remove(self, token: str) -> None: ...

    def contains(self, token: str) -> bool: ...


class Element(Protocol):
    """A document element as the engine sees it."""

    @property
    def tag_name(self) -> str:
        """Lowercase tag name, e.g. 'div', 'svg', 'path'."""
        ...

    @property
    def class_name(self) -> str:
        """Space-separated class attribute."""
        ...

    @property
    def class_list(self) -> ClassList: ...

    @property
    def style(self) -> StyleDeclaration: ...

    @property
    def is_connected(self) -> bool:
        """True while the element is attached to its document."""
        ...

    @property
    def parent_element(self) -> Element | None: ...

    def get_attribute(self, name: str) -> str | None: ...

    def computed_style(self) -> ComputedStyle: ...

    def bounding_size(self) -> tuple[float, float]:
        """Rendered (width, height)."""
        ...

    def iter_descendants(self) -> Iterator[Element]:
        """All descendant elements in pre-order, excluding self."""
        ...


class MutationRecord(Protocol):
    """One childList mutation."""

    @property
    def added_nodes(self) -> Sequence[Element]: ...

    @property
    def removed_nodes(self) -> Sequence[Element]: ...


MutationCallback = Callable[[Sequence[MutationRecord]], None]


class ObserverHandle(Protocol):
    """A registered subtree observer."""

    def disconnect(self) -> None: ...


class Document(Protocol):
    """A rendered document."""

    @property
    def hostname(self) -> str: ...

    @property
    def document_element(self) -> Element:
        """The root element (<html>)."""
        ...

    @property
    def body(self) -> Element: ...

    def iter_elements(self) -> Iterator[Element]:
        """Every element in the document in pre-order, root first."""
        ...

    def observe(self, target: Element, callback: MutationCallback) -> ObserverHandle:
        """Watch the subtree of target for inserted and removed elements.

        Batches of records are delivered in order, asynchronously with respect
        to the mutation that caused them.
        """
        ...

    def inject_stylesheet(self, key: str, css: str) -> None:
        """Add an opaque stylesheet, replacing any previous one with the same key."""
        ...

    def remove_stylesheet(self, key: str) -> None:
        """Remove a stylesheet added with inject_stylesheet; no-op when absent."""
        ...
