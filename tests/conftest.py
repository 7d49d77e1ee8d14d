"""Pytest configuration and fixtures for darkpage tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from darkpage.dom import Document, Element
from darkpage.logger import reset_logger


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Every test starts and ends with a silent logger."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def document() -> Document:
    """Empty light page: transparent <html> and <body>."""
    return Document(hostname="example.com")


@pytest.fixture
def light_page() -> Document:
    """A white page with ordinary content."""
    doc = Document(hostname="example.com")
    doc.document_element.set_author_style("background-color", "rgb(255, 255, 255)")
    doc.body.append_child(
        Element(
            "div",
            attributes={"id": "card", "style": "color: rgb(10, 10, 10) !important"},
            author_style={
                "background-color": "rgb(250, 250, 250)",
                "border-color": "rgb(220, 220, 220)",
            },
            children=[
                Element("p", author_style={"color": "rgb(68, 68, 68)"}),
                Element("h2", author_style={"color": "rgb(180, 180, 180)"}),
                Element("a", author_style={"color": "rgb(0, 102, 204)"}),
            ],
        )
    )
    doc.body.append_child(
        Element("input", attributes={"id": "search", "style": "background-color: rgb(255, 255, 255)"})
    )
    return doc
