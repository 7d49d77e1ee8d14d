"""Tests for incremental re-application on document mutations."""

from __future__ import annotations

from collections.abc import Sequence

from darkpage.config import EngineConfig
from darkpage.dom import Document, Element
from darkpage.session import ACTIVE_CLASS, Session


def _white_div(
    attributes: dict[str, str] | None = None, children: Sequence[Element] = ()
) -> Element:
    return Element(
        "div",
        attributes=attributes,
        author_style={"background-color": "rgb(255, 255, 255)"},
        children=children,
    )


def test_inserted_element_processed_in_one_callback(document: Document) -> None:
    session = Session(document)
    session.enable()

    div = document.body.append_child(_white_div())
    assert document.flush_mutations() == 1
    assert session.mutator.has_snapshot(div)
    assert div.style.get_property_value("background-color") == "rgb(18, 18, 18)"


def test_inserted_element_ignored_while_disabled(document: Document) -> None:
    session = Session(document)
    session.enable()
    session.disable()

    div = document.body.append_child(_white_div())
    assert document.flush_mutations() == 0
    assert len(div.style) == 0
    assert not session.mutator.has_snapshot(div)


def test_inserted_subtree_processed_pre_order(document: Document) -> None:
    session = Session(document)
    session.enable()

    inner = Element("p", author_style={"color": "rgb(68, 68, 68)"})
    outer = _white_div(children=[Element("section", children=[inner])])
    document.body.append_child(outer)
    document.flush_mutations()

    assert outer.style.get_property_value("background-color") == "rgb(18, 18, 18)"
    assert inner.style.get_property_value("color") == "rgb(255, 255, 255)"
    assert session.mutator.has_snapshot(inner)


def test_descendant_inserted_with_ancestor_matches_initial_sweep(document: Document) -> None:
    swept = document.body.append_child(Element("p", author_style={"color": "rgb(0, 0, 0)"}))
    session = Session(document)
    session.enable()

    container = document.body.append_child(Element("div"))
    inserted = container.append_child(Element("p", author_style={"color": "rgb(0, 0, 0)"}))
    assert document.flush_mutations() == 1

    assert inserted.style.items() == swept.style.items()
    assert inserted.style.get_property_value("color") == "rgb(255, 255, 255)"


def test_nested_insertion_is_observed(document: Document) -> None:
    container = document.body.append_child(Element("main"))
    session = Session(document)
    session.enable()

    div = container.append_child(_white_div())
    document.flush_mutations()
    assert div.style.get_property_value("background-color") == "rgb(18, 18, 18)"


def test_removed_element_restored_and_pruned(document: Document) -> None:
    div = document.body.append_child(_white_div(attributes={"style": "color: red"}))
    session = Session(document)
    session.enable()
    assert session.mutator.has_snapshot(div)

    div.remove()
    document.flush_mutations()
    assert not session.mutator.has_snapshot(div)
    assert div.style.items() == [("color", ("red", ""))]


def test_removed_element_kept_when_pruning_disabled(document: Document) -> None:
    div = document.body.append_child(_white_div())
    session = Session(document, EngineConfig(prune_removed=False))
    session.enable()

    div.remove()
    document.flush_mutations()
    assert session.mutator.has_snapshot(div)
    assert div.style.get_property_value("background-color") == "rgb(18, 18, 18)"

    session.disable()
    assert not session.mutator.has_snapshot(div)
    assert len(div.style) == 0


def test_moved_element_stays_dark(document: Document) -> None:
    div = document.body.append_child(_white_div())
    target = document.body.append_child(Element("aside"))
    session = Session(document)
    session.enable()

    target.append_child(div)
    assert document.flush_mutations() == 1
    assert session.mutator.has_snapshot(div)
    assert div.style.get_property_value("background-color") == "rgb(18, 18, 18)"

    session.disable()
    assert div.style.get_property_value("background-color") == ""


def test_added_then_removed_in_one_batch(document: Document) -> None:
    session = Session(document)
    session.enable()

    div = document.body.append_child(_white_div())
    div.remove()
    document.flush_mutations()
    assert not session.mutator.has_snapshot(div)
    assert len(div.style) == 0


def test_unmarked_document_ignores_callbacks(document: Document) -> None:
    session = Session(document)
    session.enable()
    document.document_element.class_list.remove(ACTIVE_CLASS)

    div = document.body.append_child(_white_div())
    assert document.flush_mutations() == 1
    assert len(div.style) == 0


def test_start_and_stop_are_idempotent(document: Document) -> None:
    session = Session(document)
    session.enable()
    assert session.loop.running
    assert not session.start_observer()

    assert session.stop_observer()
    assert not session.stop_observer()
    div = document.body.append_child(_white_div())
    assert document.flush_mutations() == 0
    assert len(div.style) == 0

    assert session.start_observer()
    assert session.loop.running
