"""Page descriptions: YAML in, in-memory document out, and back to YAML.

A page file describes the rendered state of a document:

    hostname: news.example.com
    url: https://news.example.com/today
    html:
      style: {background-color: "rgb(255, 255, 255)"}
    body:
      children:
        - tag: div
          id: header
          classes: [masthead]
          style: {background-color: "rgb(250, 250, 250)", color: "rgb(40, 40, 40)"}
          children:
            - tag: img
              attributes: {src: /static/logo.png}
              size: [32, 32]

``style`` holds author declarations (what the page's stylesheets resolve to),
``inline`` the element's own style attribute.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .dom import Document, Element, parse_declarations
from .exceptions import ParseError, ValidationError
from .logger import debug_enabled, get_logger

logger = get_logger()


class NodeSchema(BaseModel):
    """Fields shared by <html>, <body> and ordinary elements."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    classes: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    style: dict[str, str] = Field(default_factory=dict)
    inline: str = ""
    size: tuple[float, float] = (0.0, 0.0)
    children: list[ElementSchema] = Field(default_factory=list)

    @field_validator("classes", mode="before")
    @classmethod
    def split_classes(cls, v: Any) -> list[str]:
        """Accept 'a b' as well as [a, b]."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        return [str(item) for item in v]

    @field_validator("style", mode="before")
    @classmethod
    def coerce_style(cls, v: Any) -> dict[str, str]:
        """Accept a CSS declaration string as well as a mapping."""
        if v is None:
            return {}
        if isinstance(v, str):
            return {
                name: f"{decl.value} !important" if decl.priority else decl.value
                for name, decl in parse_declarations(v).items()
            }
        if isinstance(v, dict):
            return {str(name): str(value) for name, value in v.items()}
        return v

    @field_validator("attributes", mode="before")
    @classmethod
    def coerce_attributes(cls, v: Any) -> dict[str, str]:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(name): str(value) for name, value in v.items()}
        return v


class ElementSchema(NodeSchema):
    """An element under <body>."""

    tag: str

    @field_validator("tag")
    @classmethod
    def check_tag(cls, v: str) -> str:
        tag = v.strip().lower()
        if not tag:
            raise ValueError("tag must not be empty")
        if tag in ("html", "body"):
            raise ValueError(f"<{tag}> cannot be nested; describe it at the top level")
        return tag


NodeSchema.model_rebuild()


class PageSchema(BaseModel):
    """Schema for an entire page description."""

    model_config = ConfigDict(extra="forbid")

    hostname: str | None = None
    url: str | None = None
    html: NodeSchema = Field(default_factory=NodeSchema)
    body: NodeSchema = Field(default_factory=NodeSchema)

    @model_validator(mode="after")
    def fill_hostname(self) -> PageSchema:
        """Derive the hostname from the URL when only the URL is given."""
        if not self.hostname and self.url:
            self.hostname = urlparse(self.url).hostname
        if not self.hostname:
            self.hostname = "localhost"
        return self


@dataclass
class Page:
    """A loaded page: its document plus where it came from."""

    document: Document
    url: str | None = None

    @property
    def hostname(self) -> str:
        return self.document.hostname


def build_element(schema: ElementSchema) -> Element:
    attributes = dict(schema.attributes)
    if schema.id:
        attributes["id"] = schema.id
    if schema.inline:
        attributes["style"] = schema.inline
    return Element(
        schema.tag,
        classes=schema.classes,
        attributes=attributes,
        author_style=schema.style,
        size=schema.size,
        children=[build_element(child) for child in schema.children],
    )


def _fill_node(element: Element, schema: NodeSchema) -> None:
    """Apply a schema to the document's existing <html> or <body>."""
    for name, value in schema.attributes.items():
        element.set_attribute(name, value)
    if schema.id:
        element.set_attribute("id", schema.id)
    for token in schema.classes:
        element.class_list.add(token)
    for name, value in schema.style.items():
        element.set_author_style(name, value)
    for name, decl in parse_declarations(schema.inline).items():
        element.style.set_property(name, decl.value, decl.priority)
    for child in schema.children:
        element.append_child(build_element(child))


def build_page(data: dict[str, Any]) -> Page:
    """Build a Page from already-parsed YAML data."""
    try:
        schema = PageSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid page description: {e}") from e

    document = Document(hostname=schema.hostname or "localhost")
    _fill_node(document.document_element, schema.html)
    _fill_node(document.body, schema.body)
    if debug_enabled():
        count = sum(1 for _ in document.iter_elements())
        logger.debug(f"loaded page {document.hostname} with {count} elements")
    return Page(document=document, url=schema.url)


def load_page(path: Path | str) -> Page:
    """Load a page description YAML file.

    Raises:
        ParseError: If the file is missing or is not a YAML mapping
        ValidationError: If the description does not match the schema
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    return build_page(data)


# ============================================================================
# Output
# ============================================================================


def element_path(element: Element) -> str:
    """Locate an element, e.g. 'html/body/div#main/p[2]'.

    Elements with an id are named by it; otherwise siblings with the same tag
    get a 1-based index.
    """
    segments: list[str] = []
    node: Element | None = element
    while node is not None:
        ident = node.get_attribute("id")
        if ident:
            segments.append(f"{node.tag_name}#{ident}")
        else:
            segment = node.tag_name
            parent = node.parent
            if parent is not None:
                same_tag = [child for child in parent.children if child.tag_name == node.tag_name]
                if len(same_tag) > 1:
                    segment += f"[{same_tag.index(node) + 1}]"
            segments.append(segment)
        node = node.parent
    return "/".join(reversed(segments))


def inline_styles(document: Document) -> dict[str, dict[str, str]]:
    """Inline declarations of every element that has any, in document order."""
    result: dict[str, dict[str, str]] = {}
    for element in document.iter_elements():
        if not len(element.style):
            continue
        result[element_path(element)] = {
            name: f"{decl.value} !important" if decl.priority else decl.value
            for name, decl in element.style.items()
        }
    return result


def dump_inline_styles(document: Document, *, site_theme: str | None = None) -> str:
    """Serialize the document's inline styles as YAML."""
    output: dict[str, Any] = {"hostname": document.hostname}
    if site_theme is not None:
        output["site_theme"] = site_theme
    output["elements"] = inline_styles(document)
    return yaml.safe_dump(output, default_flow_style=False, sort_keys=False)
